"""
Data models for the per-header interface manifest.

Every record is frozen: it is built once while a header is classified and
never changed afterwards. Cross-file references are plain name strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VariantKind(Enum):
    """Tag of a ``TypeVariant``; the value is the serialized tag."""

    VOID = "void"
    BOOL = "bool"
    CHAR = "char"
    SHORT_INT = "short_int"
    INT = "int"
    UNSIGNED_INT = "unsigned_int"
    LONG_INT = "long_int"
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
    STRUCT = "struct"
    ENUM = "enum"

    @property
    def is_named(self) -> bool:
        return self in (VariantKind.STRUCT, VariantKind.ENUM)


@dataclass(frozen=True)
class TypeVariant:
    """Closed tagged union: a primitive, or a struct/enum reference by name.

    Named variants carry a non-empty ``name``; primitives carry none.
    """

    kind: VariantKind
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind.is_named:
            if not self.name:
                raise ValueError(f"{self.kind.value} variant requires a non-empty name")
        elif self.name is not None:
            raise ValueError(f"Primitive variant {self.kind.value} takes no name")

    @classmethod
    def primitive(cls, kind: VariantKind) -> "TypeVariant":
        return cls(kind=kind)

    @classmethod
    def struct(cls, name: str) -> "TypeVariant":
        return cls(kind=VariantKind.STRUCT, name=name)

    @classmethod
    def enum(cls, name: str) -> "TypeVariant":
        return cls(kind=VariantKind.ENUM, name=name)

    def __str__(self) -> str:
        if self.kind.is_named:
            return f"{self.kind.value}({self.name})"
        return self.kind.value


@dataclass(frozen=True)
class TypeInfo:
    """Canonical description of a value's type."""

    variant: TypeVariant
    is_constant: bool = False
    is_nullable: bool = False
    is_pointer: bool = False
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportInfo:
    """Include path as directories plus the final file.

    E.g. ``to/some/file.h`` ~= ``("to", "some", "file.h")``.
    """

    path: tuple[str, ...]


@dataclass(frozen=True)
class StructInfo:
    name: str
    is_public: bool
    fields: tuple[tuple[str, TypeInfo], ...] = ()
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class EnumInfo:
    name: str
    is_public: bool
    variants: tuple[tuple[str, Optional[int]], ...] = ()
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParamInfo:
    name: str
    type: TypeInfo


@dataclass(frozen=True)
class InitInfo:
    """Constructor; construction return types are not modeled."""

    name: str
    params: tuple[ParamInfo, ...] = ()
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeinitInfo:
    """Destructor."""

    name: str
    params: tuple[ParamInfo, ...] = ()
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionInfo:
    name: str
    is_public: bool
    is_static: bool
    return_type: TypeInfo
    params: tuple[ParamInfo, ...] = ()
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class PropertyInfo:
    """Zero-argument accessor; only the return type is recorded."""

    name: str
    is_public: bool
    is_static: bool
    return_type: TypeInfo
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileInfo:
    """The manifest of exactly one header file.

    Attributes:
        name: Header file stem, without extension.
        imports: Include paths in source order.
        structs: Struct declarations and forward indicators.
        inits: Constructors.
        deinits: Destructors.
        enums: Enum declarations.
        functions: Exported methods that are neither constructors nor destructors.
        properties: Exported accessors.
    """

    name: str
    imports: tuple[ImportInfo, ...] = ()
    structs: tuple[StructInfo, ...] = ()
    inits: tuple[InitInfo, ...] = ()
    deinits: tuple[DeinitInfo, ...] = ()
    enums: tuple[EnumInfo, ...] = ()
    functions: tuple[FunctionInfo, ...] = ()
    properties: tuple[PropertyInfo, ...] = ()

    def record_count(self) -> int:
        """Total number of records across all seven lists."""
        return sum(
            len(items)
            for items in (
                self.imports,
                self.structs,
                self.inits,
                self.deinits,
                self.enums,
                self.functions,
                self.properties,
            )
        )
