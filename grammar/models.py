"""
Data models for the declaration stream read from a C header.

These are the shapes handed from the header reader to the manifest
classifier: type expressions, export markers and one node per top-level
declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class GQualifier(Enum):
    """Qualifier wrapping a type category."""

    MUTABLE = "mutable"
    CONST = "const"
    EXTERN = "extern"


class GPrimitive(Enum):
    """The fixed set of primitive type keywords understood by the generator."""

    VOID = "void"
    BOOL = "bool"
    CHAR = "char"
    SHORT_INT = "short"
    INT = "int"
    UNSIGNED_INT = "unsigned int"
    LONG_INT = "long"
    FLOAT = "float"
    DOUBLE = "double"
    SIZE_T = "size_t"
    INT8_T = "int8_t"
    INT16_T = "int16_t"
    INT32_T = "int32_t"
    INT64_T = "int64_t"
    UINT8_T = "uint8_t"
    UINT16_T = "uint16_t"
    UINT32_T = "uint32_t"
    UINT64_T = "uint64_t"


@dataclass(frozen=True)
class GTypeCategory:
    """Either a primitive keyword or an unrecognized identifier.

    Exactly one of ``primitive`` and ``identifier`` is set.
    """

    primitive: Optional[GPrimitive] = None
    identifier: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.primitive is None) == (self.identifier is None):
            raise ValueError("GTypeCategory needs exactly one of primitive/identifier")
        if self.identifier is not None and not self.identifier.strip():
            raise ValueError("Unrecognized type identifier must be non-empty")

    @classmethod
    def of(cls, primitive: GPrimitive) -> "GTypeCategory":
        return cls(primitive=primitive)

    @classmethod
    def unrecognized(cls, identifier: str) -> "GTypeCategory":
        return cls(identifier=identifier)

    @property
    def is_unrecognized(self) -> bool:
        return self.identifier is not None


@dataclass(frozen=True)
class GType:
    """A source type expression: qualifier plus category."""

    qualifier: GQualifier
    category: GTypeCategory


@dataclass(frozen=True)
class GTypeUse:
    """A type expression as it appears in a field, parameter or return slot.

    Pointer and nullability come from the declarator syntax around the type,
    not from the type expression itself.
    """

    ty: GType
    is_pointer: bool = False
    is_nullable: bool = False
    tags: tuple[str, ...] = ()


class GMarkerKind(Enum):
    """Closed marker vocabulary; anything else lands in ``OTHER``."""

    EXPORT_METHOD = "export_method"
    EXPORT_STATIC_METHOD = "export_static_method"
    EXPORT_PROPERTY = "export_property"
    EXPORT_STATIC_PROPERTY = "export_static_property"
    EXPORT_STRUCT = "export_struct"
    EXPORT_CLASS = "export_class"
    EXPORT_ENUM = "export_enum"
    OTHER = "other"


@dataclass(frozen=True)
class GMarker:
    """A single export marker with the macro text it was read from."""

    kind: GMarkerKind
    text: str


@dataclass(frozen=True)
class GMarkers:
    """Ordered marker set attached to one declaration."""

    items: tuple[GMarker, ...] = ()

    def contains(self, *kinds: GMarkerKind) -> bool:
        return any(marker.kind in kinds for marker in self.items)

    def texts(self) -> tuple[str, ...]:
        return tuple(marker.text for marker in self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class GHeaderInclude:
    """``#include`` directive."""

    path: str
    is_system: bool = False


@dataclass(frozen=True)
class GStructIndicator:
    """Struct forward declaration without a body."""

    name: str
    markers: GMarkers = field(default_factory=GMarkers)


@dataclass(frozen=True)
class GField:
    name: str
    ty: GTypeUse


@dataclass(frozen=True)
class GStructDecl:
    """Struct declaration with a body."""

    name: str
    fields: tuple[GField, ...] = ()
    markers: GMarkers = field(default_factory=GMarkers)


@dataclass(frozen=True)
class GEnumVariant:
    """Enumerator; ``value`` is the raw assigned expression, if any."""

    name: str
    value: Optional[str] = None


@dataclass(frozen=True)
class GEnumDecl:
    name: str
    variants: tuple[GEnumVariant, ...] = ()
    markers: GMarkers = field(default_factory=GMarkers)


@dataclass(frozen=True)
class GParam:
    name: str
    ty: GTypeUse


@dataclass(frozen=True)
class GFunctionDecl:
    """Function prototype with its markers and preceding comments."""

    name: str
    return_type: GTypeUse
    params: tuple[GParam, ...] = ()
    markers: GMarkers = field(default_factory=GMarkers)
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class GOther:
    """Any top-level item the classifier does not care about."""

    kind: str


GDeclaration = Union[
    GHeaderInclude,
    GStructIndicator,
    GStructDecl,
    GEnumDecl,
    GFunctionDecl,
    GOther,
]


@dataclass(frozen=True)
class GHeader:
    """Ordered declaration stream of one header file."""

    path: str
    declarations: tuple[GDeclaration, ...] = ()
