"""
Declaration converters: one declaration shape in, one manifest record out.

Converters hold no state. Type resolution failures surface as the
converter's own error kind with the ``BadType`` chained as the cause.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from grammar.models import (
    GEnumDecl,
    GFunctionDecl,
    GHeaderInclude,
    GMarkerKind,
    GParam,
    GStructDecl,
    GStructIndicator,
)
from manifest.errors import BadImport, BadObject, BadProperty, BadType
from manifest.models import (
    DeinitInfo,
    EnumInfo,
    FunctionInfo,
    ImportInfo,
    InitInfo,
    ParamInfo,
    PropertyInfo,
    StructInfo,
)
from manifest.types import TypeKindTable, resolve_type_use

_INT_LITERAL_RE = re.compile(
    r"^(0[xX][0-9a-fA-F]+|0[bB][01]+|0[0-7]*|[1-9][0-9]*)[uUlL]*$"
)


def convert_import(decl: GHeaderInclude) -> ImportInfo:
    """Split an include path into its segments.

    Raises:
        BadImport: On an empty path, an empty or blank segment, or a
            backslash separator.
    """
    path = decl.path.strip()
    if not path:
        raise BadImport(decl.path, "empty include path")
    if "\\" in path:
        raise BadImport(decl.path, "backslash in include path")

    segments = path.split("/")
    if any(not segment.strip() for segment in segments):
        raise BadImport(decl.path, "empty path segment")
    return ImportInfo(path=tuple(segments))


def _convert_params(
    owner: str,
    params: Sequence[GParam],
    kinds: Optional[TypeKindTable],
) -> tuple[ParamInfo, ...]:
    converted = []
    for param in params:
        try:
            converted.append(ParamInfo(name=param.name, type=resolve_type_use(param.ty, kinds)))
        except BadType as exc:
            raise BadObject(owner, f"parameter '{param.name}': {exc}") from exc
    return tuple(converted)


def convert_struct(decl: GStructDecl, kinds: Optional[TypeKindTable] = None) -> StructInfo:
    """Resolve every field of a struct declaration.

    Raises:
        BadObject: If a field type fails resolution.
    """
    fields = []
    for struct_field in decl.fields:
        try:
            fields.append((struct_field.name, resolve_type_use(struct_field.ty, kinds)))
        except BadType as exc:
            raise BadObject(decl.name, f"field '{struct_field.name}': {exc}") from exc

    return StructInfo(
        name=decl.name,
        is_public=decl.markers.contains(GMarkerKind.EXPORT_STRUCT, GMarkerKind.EXPORT_CLASS),
        fields=tuple(fields),
        tags=decl.markers.texts(),
    )


def convert_struct_indicator(decl: GStructIndicator) -> StructInfo:
    """Forward declaration: public placeholder with no fields."""
    return StructInfo(name=decl.name, is_public=True, fields=(), tags=decl.markers.texts())


_ENUM_TOKEN_RE = re.compile(r"\s*(<<|\||\(|\)|[0-9A-Za-z_]+)")


def _tokenize_enum_value(text: str) -> List[str]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _ENUM_TOKEN_RE.match(text, pos)
        if match is None:
            raise ValueError(f"unsupported enum value '{text}'")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def _int_literal(token: str) -> int:
    match = _INT_LITERAL_RE.match(token)
    if match is None:
        raise ValueError(f"unsupported enum literal '{token}'")
    literal = match.group(1)
    if literal.lower().startswith("0x"):
        return int(literal, 16)
    if literal.lower().startswith("0b"):
        return int(literal[2:], 2)
    if len(literal) > 1 and literal.startswith("0"):
        return int(literal, 8)
    return int(literal)


class _EnumValueParser:
    """Left-associative evaluator; ``<<`` binds tighter than ``|``."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize_enum_value(text)
        self.pos = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ValueError(f"unexpected end of enum value '{self.text}'")
        self.pos += 1
        return token

    def parse(self) -> int:
        value = self._bit_or()
        if self._peek() is not None:
            raise ValueError(f"unexpected '{self._peek()}' in enum value '{self.text}'")
        return value

    def _bit_or(self) -> int:
        value = self._shift()
        while self._peek() == "|":
            self._take()
            value |= self._shift()
        return value

    def _shift(self) -> int:
        value = self._operand()
        while self._peek() == "<<":
            self._take()
            value <<= self._operand()
        return value

    def _operand(self) -> int:
        token = self._take()
        if token == "(":
            value = self._bit_or()
            if self._take() != ")":
                raise ValueError(f"unbalanced parentheses in enum value '{self.text}'")
            return value
        if token in ("|", "<<", ")"):
            raise ValueError(f"unexpected '{token}' in enum value '{self.text}'")
        return _int_literal(token)


def parse_enum_value(text: str) -> int:
    """Evaluate an enumerator value: integer literals joined by ``|`` or ``<<``.

    Parentheses group; ``<<`` binds tighter than ``|`` and both associate to
    the left, as in C.

    Raises:
        ValueError: If the expression is anything else.
    """
    return _EnumValueParser(text).parse()


def convert_enum(decl: GEnumDecl) -> EnumInfo:
    """Map each enumerator to ``(name, explicit value or None)``.

    Raises:
        BadObject: If an explicit value is not a non-negative integer.
    """
    variants = []
    for variant in decl.variants:
        value = None
        if variant.value is not None:
            try:
                value = parse_enum_value(variant.value)
            except ValueError as exc:
                raise BadObject(decl.name, f"variant '{variant.name}': {exc}") from exc
            if value < 0:
                raise BadObject(decl.name, f"variant '{variant.name}' is negative")
        variants.append((variant.name, value))

    return EnumInfo(
        name=decl.name,
        is_public=decl.markers.contains(GMarkerKind.EXPORT_ENUM),
        variants=tuple(variants),
        tags=decl.markers.texts(),
    )


def convert_init(decl: GFunctionDecl, kinds: Optional[TypeKindTable] = None) -> InitInfo:
    """Constructor; the declared return type is not recorded."""
    return InitInfo(
        name=decl.name,
        params=_convert_params(decl.name, decl.params, kinds),
        comments=tuple(decl.comments),
    )


def convert_deinit(decl: GFunctionDecl, kinds: Optional[TypeKindTable] = None) -> DeinitInfo:
    return DeinitInfo(
        name=decl.name,
        params=_convert_params(decl.name, decl.params, kinds),
        comments=tuple(decl.comments),
    )


def convert_function(decl: GFunctionDecl, kinds: Optional[TypeKindTable] = None) -> FunctionInfo:
    """Exported method with parameters and return type.

    Raises:
        BadObject: If a parameter or the return type fails resolution.
    """
    params = _convert_params(decl.name, decl.params, kinds)
    try:
        return_type = resolve_type_use(decl.return_type, kinds)
    except BadType as exc:
        raise BadObject(decl.name, f"return type: {exc}") from exc

    return FunctionInfo(
        name=decl.name,
        is_public=decl.markers.contains(
            GMarkerKind.EXPORT_METHOD, GMarkerKind.EXPORT_STATIC_METHOD
        ),
        is_static=decl.markers.contains(GMarkerKind.EXPORT_STATIC_METHOD),
        return_type=return_type,
        params=params,
        comments=tuple(decl.comments),
    )


def convert_property(decl: GFunctionDecl, kinds: Optional[TypeKindTable] = None) -> PropertyInfo:
    """Exported accessor; only the return type is recorded.

    A static property takes no arguments; an instance property takes at
    most its receiver.

    Raises:
        BadProperty: If the return type fails resolution or the parameter
            count breaks the accessor contract.
    """
    is_static = decl.markers.contains(GMarkerKind.EXPORT_STATIC_PROPERTY)
    allowed = 0 if is_static else 1
    if len(decl.params) > allowed:
        raise BadProperty(
            decl.name,
            f"{'static ' if is_static else ''}property takes {len(decl.params)} parameters",
        )

    try:
        return_type = resolve_type_use(decl.return_type, kinds)
    except BadType as exc:
        raise BadProperty(decl.name, f"return type: {exc}") from exc

    return PropertyInfo(
        name=decl.name,
        is_public=decl.markers.contains(
            GMarkerKind.EXPORT_PROPERTY, GMarkerKind.EXPORT_STATIC_PROPERTY
        ),
        is_static=is_static,
        return_type=return_type,
        comments=tuple(decl.comments),
    )
