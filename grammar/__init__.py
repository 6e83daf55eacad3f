"""
Header Reader

Tree-sitter based reader that turns a C header into an ordered stream of
declarations (includes, structs, enums, function prototypes) with their
export markers and Doxygen comments.
"""

from grammar.models import (
    GDeclaration,
    GEnumDecl,
    GEnumVariant,
    GField,
    GFunctionDecl,
    GHeader,
    GHeaderInclude,
    GMarker,
    GMarkerKind,
    GMarkers,
    GOther,
    GParam,
    GPrimitive,
    GQualifier,
    GStructDecl,
    GStructIndicator,
    GType,
    GTypeCategory,
    GTypeUse,
)
from grammar.parser import (
    create_parser,
    parse_bytes,
    count_error_nodes,
    prepare_source,
    parse_header_bytes,
    parse_header_file,
)
from grammar.reader import read_declarations, read_header_bytes, read_header_file

__all__ = [
    # Input model
    "GDeclaration",
    "GEnumDecl",
    "GEnumVariant",
    "GField",
    "GFunctionDecl",
    "GHeader",
    "GHeaderInclude",
    "GMarker",
    "GMarkerKind",
    "GMarkers",
    "GOther",
    "GParam",
    "GPrimitive",
    "GQualifier",
    "GStructDecl",
    "GStructIndicator",
    "GType",
    "GTypeCategory",
    "GTypeUse",
    # Low-level parsing
    "create_parser",
    "parse_bytes",
    "count_error_nodes",
    "prepare_source",
    "parse_header_bytes",
    "parse_header_file",
    # Declaration stream
    "read_declarations",
    "read_header_bytes",
    "read_header_file",
]
