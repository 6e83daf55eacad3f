"""
Configuration constants for C header reading.

Defines the tree-sitter node type strings, the export-marker vocabulary and
the annotation macros that are stripped before parsing.
"""

from typing import Dict, Set

from grammar.models import GMarkerKind, GPrimitive

# Comment node type (includes //, /* */, /** */)
COMMENT_NODE: str = "comment"

INCLUDE_NODE: str = "preproc_include"
DECLARATION_NODE: str = "declaration"
STRUCT_NODE: str = "struct_specifier"
ENUM_NODE: str = "enum_specifier"
FUNCTION_DECLARATOR: str = "function_declarator"

# Declarators that wrap another declarator and mark it as a pointer
POINTER_DECLARATORS: Set[str] = {
    "pointer_declarator",
    "abstract_pointer_declarator",
}

ARRAY_DECLARATORS: Set[str] = {
    "array_declarator",
    "abstract_array_declarator",
}

# Wrapper types that should be treated as transparent
TRANSPARENT_WRAPPERS: Set[str] = {
    "linkage_specification",  # extern "C" { ... }
}

# Preprocessor directives that may contain declarations we need to traverse
PREPROCESSOR_CONTAINERS: Set[str] = {
    "preproc_ifdef",
    "preproc_ifndef",
    "preproc_if",
    "preproc_elif",
    "preproc_else",
}

CONTAINER_TYPES: Set[str] = {
    "translation_unit",
    "declaration_list",
}

# Doxygen comment prefixes
DOXYGEN_PREFIXES: tuple = (
    "/**",
    "///",
    "//!",
    "/*!",
)

HEADER_EXTENSIONS: Set[str] = {
    ".h",
    ".hpp",
    ".hh",
}

# Export markers, by macro name
MARKER_KINDS: Dict[str, GMarkerKind] = {
    "TW_EXPORT_METHOD": GMarkerKind.EXPORT_METHOD,
    "TW_EXPORT_STATIC_METHOD": GMarkerKind.EXPORT_STATIC_METHOD,
    "TW_EXPORT_PROPERTY": GMarkerKind.EXPORT_PROPERTY,
    "TW_EXPORT_STATIC_PROPERTY": GMarkerKind.EXPORT_STATIC_PROPERTY,
    "TW_EXPORT_STRUCT": GMarkerKind.EXPORT_STRUCT,
    "TW_EXPORT_CLASS": GMarkerKind.EXPORT_CLASS,
    "TW_EXPORT_ENUM": GMarkerKind.EXPORT_ENUM,
}

# Any macro matching this is read as a marker, known or not
MARKER_PATTERN: str = r"\b(?:TW_EXPORT_[A-Z_]+|TW_VISIBILITY_DEFAULT)\b(?:\s*\([^()]*\))?"

# Macros that expand to nothing interesting and confuse the parser
TRANSPARENT_MACROS: Set[str] = {
    "TW_EXTERN_C_BEGIN",
    "TW_EXTERN_C_END",
    "TW_ASSUME_NONNULL_BEGIN",
    "TW_ASSUME_NONNULL_END",
}

# Clang nullability annotations
NULLABLE_ANNOTATION: str = "_Nullable"
NONNULL_ANNOTATION: str = "_Nonnull"
NULL_UNSPECIFIED_ANNOTATION: str = "_Null_unspecified"
NULLABILITY_ANNOTATIONS: Set[str] = {
    NULLABLE_ANNOTATION,
    NONNULL_ANNOTATION,
    NULL_UNSPECIFIED_ANNOTATION,
}

# Normalized primitive spellings (whitespace collapsed) -> keyword
PRIMITIVE_SPELLINGS: Dict[str, GPrimitive] = {
    "void": GPrimitive.VOID,
    "bool": GPrimitive.BOOL,
    "_Bool": GPrimitive.BOOL,
    "char": GPrimitive.CHAR,
    "short": GPrimitive.SHORT_INT,
    "short int": GPrimitive.SHORT_INT,
    "int": GPrimitive.INT,
    "signed int": GPrimitive.INT,
    "signed": GPrimitive.INT,
    "unsigned int": GPrimitive.UNSIGNED_INT,
    "unsigned": GPrimitive.UNSIGNED_INT,
    "long": GPrimitive.LONG_INT,
    "long int": GPrimitive.LONG_INT,
    "float": GPrimitive.FLOAT,
    "double": GPrimitive.DOUBLE,
    "size_t": GPrimitive.SIZE_T,
    "int8_t": GPrimitive.INT8_T,
    "int16_t": GPrimitive.INT16_T,
    "int32_t": GPrimitive.INT32_T,
    "int64_t": GPrimitive.INT64_T,
    "uint8_t": GPrimitive.UINT8_T,
    "uint16_t": GPrimitive.UINT16_T,
    "uint32_t": GPrimitive.UINT32_T,
    "uint64_t": GPrimitive.UINT64_T,
}
