"""
Manifest Engine

Type resolution, declaration conversion and classification of a header's
declaration stream into a language-agnostic interface manifest.

The directory driver lives in ``manifest.extractor``.
"""

from manifest.errors import ManifestError, BadImport, BadObject, BadProperty, BadType
from manifest.models import (
    TypeVariant,
    VariantKind,
    TypeInfo,
    FileInfo,
    ImportInfo,
    StructInfo,
    EnumInfo,
    ParamInfo,
    InitInfo,
    DeinitInfo,
    FunctionInfo,
    PropertyInfo,
)
from manifest.types import (
    NamedKind,
    TypeKindTable,
    keyword_for_variant,
    resolve_type,
    resolve_type_use,
)
from manifest.classifier import (
    ClassificationEngine,
    ClassificationResult,
    ManifestAggregator,
    SkipNotice,
    classify_declarations,
    classify_header,
)
from manifest.serialization import (
    dump_file_info,
    load_file_info,
    file_info_to_dict,
    file_info_from_dict,
)

__all__ = [
    # Errors
    "ManifestError",
    "BadImport",
    "BadObject",
    "BadProperty",
    "BadType",
    # Data models
    "TypeVariant",
    "VariantKind",
    "TypeInfo",
    "FileInfo",
    "ImportInfo",
    "StructInfo",
    "EnumInfo",
    "ParamInfo",
    "InitInfo",
    "DeinitInfo",
    "FunctionInfo",
    "PropertyInfo",
    # Type resolution
    "NamedKind",
    "TypeKindTable",
    "keyword_for_variant",
    "resolve_type",
    "resolve_type_use",
    # Classification
    "ClassificationEngine",
    "ClassificationResult",
    "ManifestAggregator",
    "SkipNotice",
    "classify_declarations",
    "classify_header",
    # Serialization
    "dump_file_info",
    "load_file_info",
    "file_info_to_dict",
    "file_info_from_dict",
]
