"""
Type resolution: source type expressions to canonical ``TypeInfo``.

A bare identifier may name either a struct or an enum. The resolver never
guesses; it consults an explicit ``TypeKindTable`` and fails with
``BadType`` when the name is not in it.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from grammar.models import GPrimitive, GQualifier, GType, GTypeUse
from manifest.errors import BadType
from manifest.models import TypeInfo, TypeVariant, VariantKind

PRIMITIVE_VARIANTS: Dict[GPrimitive, VariantKind] = {
    GPrimitive.VOID: VariantKind.VOID,
    GPrimitive.BOOL: VariantKind.BOOL,
    GPrimitive.CHAR: VariantKind.CHAR,
    GPrimitive.SHORT_INT: VariantKind.SHORT_INT,
    GPrimitive.INT: VariantKind.INT,
    GPrimitive.UNSIGNED_INT: VariantKind.UNSIGNED_INT,
    GPrimitive.LONG_INT: VariantKind.LONG_INT,
    GPrimitive.FLOAT: VariantKind.FLOAT,
    GPrimitive.DOUBLE: VariantKind.DOUBLE,
    GPrimitive.SIZE_T: VariantKind.SIZE_T,
    GPrimitive.INT8_T: VariantKind.INT8_T,
    GPrimitive.INT16_T: VariantKind.INT16_T,
    GPrimitive.INT32_T: VariantKind.INT32_T,
    GPrimitive.INT64_T: VariantKind.INT64_T,
    GPrimitive.UINT8_T: VariantKind.UINT8_T,
    GPrimitive.UINT16_T: VariantKind.UINT16_T,
    GPrimitive.UINT32_T: VariantKind.UINT32_T,
    GPrimitive.UINT64_T: VariantKind.UINT64_T,
}

_KEYWORDS_BY_VARIANT: Dict[VariantKind, GPrimitive] = {
    kind: keyword for keyword, kind in PRIMITIVE_VARIANTS.items()
}


class NamedKind(Enum):
    """What a named-type reference points at."""

    STRUCT = "struct"
    ENUM = "enum"


def keyword_for_variant(variant: TypeVariant) -> GPrimitive:
    """Inverse of the primitive mapping.

    Raises:
        ValueError: If the variant is a struct or enum reference.
    """
    try:
        return _KEYWORDS_BY_VARIANT[variant.kind]
    except KeyError:
        raise ValueError(f"{variant} is not a primitive variant") from None


class TypeKindTable:
    """Name -> struct/enum lookup used to resolve named-type references.

    The table is seeded from configuration and from an index of the other
    headers, then grows as struct and enum declarations are classified.
    """

    def __init__(self, entries: Optional[Mapping[str, NamedKind]] = None) -> None:
        self._kinds: Dict[str, NamedKind] = {}
        for name, kind in (entries or {}).items():
            self.register(name, kind)

    def register(self, name: str, kind: NamedKind) -> None:
        """Record ``name`` as a struct or enum.

        Raises:
            BadType: If the name is already known under the other kind.
        """
        known = self._kinds.get(name)
        if known is not None and known is not kind:
            raise BadType(name, f"declared as both {known.value} and {kind.value}")
        self._kinds[name] = kind

    def lookup(self, name: str) -> Optional[NamedKind]:
        return self._kinds.get(name)

    def copy(self) -> "TypeKindTable":
        return TypeKindTable(self._kinds)

    def items(self) -> Iterable[Tuple[str, NamedKind]]:
        return self._kinds.items()

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __iter__(self) -> Iterator[str]:
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)


def resolve_variant(expr: GType, kinds: Optional[TypeKindTable] = None) -> TypeVariant:
    """Resolve the category of a type expression to a ``TypeVariant``.

    Raises:
        BadType: If the category is an identifier not present in ``kinds``.
    """
    category = expr.category
    if category.primitive is not None:
        return TypeVariant.primitive(PRIMITIVE_VARIANTS[category.primitive])

    name = category.identifier
    if kinds is None:
        raise BadType(name, "no named-type context to decide struct or enum")

    kind = kinds.lookup(name)
    if kind is NamedKind.STRUCT:
        return TypeVariant.struct(name)
    if kind is NamedKind.ENUM:
        return TypeVariant.enum(name)
    raise BadType(name, "unknown struct or enum")


def resolve_type(expr: GType, kinds: Optional[TypeKindTable] = None) -> TypeInfo:
    """Convert a type expression into its base ``TypeInfo``.

    ``is_constant`` is true only for the ``const`` qualifier; ``extern``
    affects linkage, not the value. Pointer and nullability flags are left
    false for the caller to set.
    """
    return TypeInfo(
        variant=resolve_variant(expr, kinds),
        is_constant=expr.qualifier is GQualifier.CONST,
    )


def resolve_type_use(use: GTypeUse, kinds: Optional[TypeKindTable] = None) -> TypeInfo:
    """Resolve a type expression together with its declarator flags."""
    base = resolve_type(use.ty, kinds)
    return TypeInfo(
        variant=base.variant,
        is_constant=base.is_constant,
        is_nullable=use.is_nullable,
        is_pointer=use.is_pointer,
        tags=tuple(use.tags),
    )
