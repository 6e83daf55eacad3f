"""
AST traversal that turns a parsed header into a declaration stream.

This module walks the top level of a header (through ``extern "C"`` bodies
and preprocessor conditionals), attaches export markers and Doxygen comments
to the declaration that follows them, and produces the ``GDeclaration``
nodes consumed by the manifest classifier.
"""

import logging
import os
import re
from typing import Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node, Tree

from grammar.config import (
    ARRAY_DECLARATORS,
    COMMENT_NODE,
    CONTAINER_TYPES,
    DECLARATION_NODE,
    DOXYGEN_PREFIXES,
    ENUM_NODE,
    FUNCTION_DECLARATOR,
    HEADER_EXTENSIONS,
    INCLUDE_NODE,
    NULL_UNSPECIFIED_ANNOTATION,
    NULLABLE_ANNOTATION,
    POINTER_DECLARATORS,
    PREPROCESSOR_CONTAINERS,
    PRIMITIVE_SPELLINGS,
    STRUCT_NODE,
    TRANSPARENT_WRAPPERS,
)
from grammar.models import (
    GDeclaration,
    GEnumDecl,
    GEnumVariant,
    GField,
    GFunctionDecl,
    GHeader,
    GHeaderInclude,
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
from grammar.parser import MarkerHit, PreparedSource, parse_header_bytes, parse_header_file

logger = logging.getLogger(__name__)
_SPACE_RE = re.compile(r"\s+")


def _text(node: Node) -> str:
    return _SPACE_RE.sub(" ", node.text.decode("utf-8")).strip()


def is_doxygen_comment(comment_text: str) -> bool:
    """Check if a comment is a Doxygen-style documentation comment.

    Args:
        comment_text: The text content of the comment.

    Returns:
        True if the comment starts with Doxygen markers (///, /**, //!, /*!)
    """
    stripped = comment_text.strip()
    return any(stripped.startswith(prefix) for prefix in DOXYGEN_PREFIXES)


def clean_doxygen_comment(comment_text: str) -> str:
    """Strip Doxygen comment delimiters and leading asterisks.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text, lines joined with newlines.
    """
    cleaned_lines = []

    for idx, line in enumerate(comment_text.split("\n")):
        stripped = line.strip()

        if stripped.startswith(("///", "//!")):
            stripped = stripped[3:]
        elif idx == 0 and stripped.startswith(("/**", "/*!")):
            stripped = stripped[3:]

        stripped = stripped.strip()

        # Strip trailing block marker regardless of line position.
        if stripped.endswith("*/"):
            stripped = stripped[:-2].rstrip()

        # Strip continuation '*' in multiline block comments.
        if stripped.startswith("*"):
            stripped = stripped[1:].lstrip()

        if stripped:
            cleaned_lines.append(stripped)

    return "\n".join(cleaned_lines)


def get_preceding_comments(node: Node, anchor_row: Optional[int] = None) -> Tuple[str, ...]:
    """Collect Doxygen comments immediately preceding a declaration.

    Walks backward through siblings, allowing at most one line gap between
    consecutive comments. ``anchor_row`` is the first row of the declaration
    including its marker lines.

    Args:
        node: The declaration node.
        anchor_row: Row to measure the first gap from. Defaults to the node's
            own start row.

    Returns:
        Cleaned comments in source order; empty if there are none.
    """
    comments = []
    sibling = node.prev_named_sibling
    expected_end_row = node.start_point.row if anchor_row is None else anchor_row

    while sibling is not None and sibling.type == COMMENT_NODE:
        gap = expected_end_row - sibling.end_point.row
        if gap > 1:
            break

        comment_text = sibling.text.decode("utf-8")
        if is_doxygen_comment(comment_text):
            comments.append(comment_text)

        expected_end_row = sibling.start_point.row
        sibling = sibling.prev_named_sibling

    comments.reverse()
    cleaned = (clean_doxygen_comment(c) for c in comments)
    return tuple(c for c in cleaned if c)


def read_qualifier(node: Node) -> GQualifier:
    """Read the qualifier from a declaration, field or parameter node.

    ``const`` wins over ``extern`` since only constness is kept downstream.
    """
    is_extern = False
    for child in node.children:
        if child.type == "type_qualifier" and _text(child) == "const":
            return GQualifier.CONST
        if child.type == "storage_class_specifier" and _text(child) == "extern":
            is_extern = True
    return GQualifier.EXTERN if is_extern else GQualifier.MUTABLE


def read_type_category(type_node: Node) -> GTypeCategory:
    """Map a type specifier node to a primitive keyword or a bare identifier."""
    if type_node.type in ("struct_specifier", "enum_specifier", "union_specifier"):
        name_node = type_node.child_by_field_name("name")
        spelling = _text(name_node) if name_node is not None else _text(type_node)
        return GTypeCategory.unrecognized(spelling)

    spelling = _text(type_node)
    primitive = PRIMITIVE_SPELLINGS.get(spelling)
    if primitive is not None:
        return GTypeCategory.of(primitive)
    return GTypeCategory.unrecognized(spelling)


def unwrap_declarator(
    declarator: Optional[Node],
    prepared: PreparedSource,
    container_end: int,
) -> Tuple[Optional[Node], bool, bool, Tuple[str, ...]]:
    """Peel pointer/array/paren wrappers off a declarator.

    Args:
        declarator: Declarator node, or None for abstract declarations.
        prepared: Prepared source carrying nullability annotations.
        container_end: End offset of the enclosing field/parameter, used as the
            annotation range end for trailing abstract pointers.

    Returns:
        Tuple of (innermost node, is_pointer, is_nullable, tags).
    """
    is_pointer = False
    is_nullable = False
    tags: List[str] = []
    node = declarator

    while node is not None:
        if node.type in POINTER_DECLARATORS:
            is_pointer = True
            inner = node.child_by_field_name("declarator")
            end = inner.start_byte if inner is not None else container_end
            annotations = prepared.annotations_between(node.start_byte, end)
            if NULLABLE_ANNOTATION in annotations:
                is_nullable = True
            if NULL_UNSPECIFIED_ANNOTATION in annotations and "null_unspecified" not in tags:
                tags.append("null_unspecified")
            node = inner
        elif node.type in ARRAY_DECLARATORS:
            size = node.child_by_field_name("size")
            tags.append(f"array:{_text(size)}" if size is not None else "array")
            node = node.child_by_field_name("declarator")
        elif node.type == "parenthesized_declarator":
            node = node.named_children[0] if node.named_children else None
        else:
            break

    return node, is_pointer, is_nullable, tuple(tags)


def _type_use(
    owner: Node,
    declarator: Optional[Node],
    prepared: PreparedSource,
) -> Tuple[Optional[Node], GTypeUse]:
    type_node = owner.child_by_field_name("type")
    if type_node is None:
        raise ValueError(f"Declaration at line {owner.start_point.row + 1} has no type")

    inner, is_pointer, is_nullable, tags = unwrap_declarator(declarator, prepared, owner.end_byte)
    ty = GType(qualifier=read_qualifier(owner), category=read_type_category(type_node))
    return inner, GTypeUse(ty=ty, is_pointer=is_pointer, is_nullable=is_nullable, tags=tags)


def read_include(node: Node) -> Optional[GHeaderInclude]:
    """Read an ``#include`` directive; macro includes are not supported."""
    path_node = node.child_by_field_name("path")
    if path_node is None:
        return None
    raw = _text(path_node)
    if path_node.type == "system_lib_string":
        return GHeaderInclude(path=raw.strip("<>"), is_system=True)
    if path_node.type == "string_literal":
        return GHeaderInclude(path=raw.strip('"'), is_system=False)
    logger.debug(f"Skipping computed include at line {node.start_point.row + 1}")
    return None


def read_struct(node: Node, prepared: PreparedSource, markers: GMarkers) -> Optional[GDeclaration]:
    """Read a struct specifier as a forward indicator or a full declaration."""
    name_node = node.child_by_field_name("name")
    if name_node is None:
        logger.debug(f"Skipping anonymous struct at line {node.start_point.row + 1}")
        return None
    name = _text(name_node)

    body = node.child_by_field_name("body")
    if body is None:
        return GStructIndicator(name=name, markers=markers)

    fields: List[GField] = []
    for member in body.named_children:
        if member.type != "field_declaration":
            continue
        for declarator in member.children_by_field_name("declarator"):
            inner, ty = _type_use(member, declarator, prepared)
            if inner is None:
                continue
            fields.append(GField(name=_text(inner), ty=ty))

    return GStructDecl(name=name, fields=tuple(fields), markers=markers)


def read_enum(node: Node, markers: GMarkers) -> Optional[GEnumDecl]:
    """Read an enum specifier with a body."""
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or body is None:
        logger.debug(f"Skipping anonymous or forward enum at line {node.start_point.row + 1}")
        return None

    variants = []
    for enumerator in body.named_children:
        if enumerator.type != "enumerator":
            continue
        value_node = enumerator.child_by_field_name("value")
        variants.append(
            GEnumVariant(
                name=_text(enumerator.child_by_field_name("name")),
                value=_text(value_node) if value_node is not None else None,
            )
        )
    return GEnumDecl(name=_text(name_node), variants=tuple(variants), markers=markers)


def read_params(parameter_list: Optional[Node], prepared: PreparedSource) -> Tuple[GParam, ...]:
    """Read a function's parameter list; ``(void)`` yields no parameters."""
    if parameter_list is None:
        return ()

    params: List[GParam] = []
    for idx, param in enumerate(parameter_list.named_children):
        if param.type != "parameter_declaration":
            if param.type != COMMENT_NODE:
                logger.debug(f"Ignoring {param.type} in parameter list")
            continue
        inner, ty = _type_use(param, param.child_by_field_name("declarator"), prepared)
        if inner is None and not ty.is_pointer and ty.ty.category == GTypeCategory.of(GPrimitive.VOID):
            continue
        name = _text(inner) if inner is not None else f"arg{idx}"
        params.append(GParam(name=name, ty=ty))
    return tuple(params)


def read_function(
    node: Node,
    declarator: Node,
    prepared: PreparedSource,
    markers: GMarkers,
    comments: Tuple[str, ...],
) -> Optional[GFunctionDecl]:
    """Read a function prototype from a declaration node."""
    inner, return_type = _type_use(node, declarator, prepared)
    if inner is None or inner.type != FUNCTION_DECLARATOR:
        return None

    name_node = inner.child_by_field_name("declarator")
    if name_node is None:
        return None

    return GFunctionDecl(
        name=_text(name_node),
        return_type=return_type,
        params=read_params(inner.child_by_field_name("parameters"), prepared),
        markers=markers,
        comments=comments,
    )


def _function_declarator(declarator: Optional[Node]) -> bool:
    node = declarator
    while node is not None and (
        node.type in POINTER_DECLARATORS or node.type == "parenthesized_declarator"
    ):
        if node.type == "parenthesized_declarator":
            node = node.named_children[0] if node.named_children else None
        else:
            node = node.child_by_field_name("declarator")
    return node is not None and node.type == FUNCTION_DECLARATOR


def iter_top_level_items(node: Node) -> Iterator[Node]:
    """Yield top-level items in source order, looking through wrappers."""
    for child in node.named_children:
        if child.type in TRANSPARENT_WRAPPERS:
            body = child.child_by_field_name("body")
            if body is not None:
                yield from iter_top_level_items(body)
        elif child.type in PREPROCESSOR_CONTAINERS:
            skipped = [
                n for n in (child.child_by_field_name("name"), child.child_by_field_name("condition"))
                if n is not None
            ]
            for grandchild in child.named_children:
                if any(grandchild == s for s in skipped):
                    continue
                if grandchild.type in PREPROCESSOR_CONTAINERS or grandchild.type in CONTAINER_TYPES:
                    yield from iter_top_level_items(grandchild)
                elif grandchild.type in TRANSPARENT_WRAPPERS:
                    yield from iter_top_level_items(grandchild)
                else:
                    yield grandchild
        elif child.type in CONTAINER_TYPES:
            yield from iter_top_level_items(child)
        else:
            yield child


def read_item(
    node: Node,
    prepared: PreparedSource,
    markers: GMarkers,
    anchor_row: int,
) -> GDeclaration:
    """Convert one top-level item into a declaration node."""
    if node.type == INCLUDE_NODE:
        include = read_include(node)
        return include if include is not None else GOther(kind=node.type)

    if node.type == STRUCT_NODE:
        return read_struct(node, prepared, markers) or GOther(kind=node.type)

    if node.type == ENUM_NODE:
        return read_enum(node, markers) or GOther(kind=node.type)

    if node.type == DECLARATION_NODE:
        declarators = node.children_by_field_name("declarator")
        for declarator in declarators:
            if _function_declarator(declarator):
                comments = get_preceding_comments(node, anchor_row)
                function = read_function(node, declarator, prepared, markers, comments)
                if function is not None:
                    return function
        if not declarators:
            type_node = node.child_by_field_name("type")
            if type_node is not None and type_node.type == STRUCT_NODE:
                return read_struct(type_node, prepared, markers) or GOther(kind=node.type)
            if type_node is not None and type_node.type == ENUM_NODE:
                return read_enum(type_node, markers) or GOther(kind=node.type)

    return GOther(kind=node.type)


def read_declarations(tree: Tree, prepared: PreparedSource) -> List[GDeclaration]:
    """Read the ordered declaration stream of one parsed header.

    A marker attaches to the non-comment item that contains it, otherwise to
    the first one that starts after it.

    Args:
        tree: Tree produced from ``prepared.source``.
        prepared: Prepared source with marker and annotation hits.

    Returns:
        Declarations in source order.
    """
    pending: List[MarkerHit] = sorted(prepared.markers, key=lambda hit: hit.offset)
    declarations: List[GDeclaration] = []

    for item in iter_top_level_items(tree.root_node):
        if item.type == COMMENT_NODE:
            continue

        attached = [hit for hit in pending if hit.offset < item.end_byte]
        pending = pending[len(attached):]

        anchor_row = min([hit.row for hit in attached] + [item.start_point.row])
        markers = GMarkers(items=tuple(hit.marker for hit in attached))
        declaration = read_item(item, prepared, markers, anchor_row)
        declarations.append(declaration)

        if attached and isinstance(declaration, GOther):
            logger.debug(
                "Markers %s attached to unsupported %s at line %d",
                markers.texts(),
                declaration.kind,
                item.start_point.row + 1,
            )

    if pending:
        logger.warning("%d trailing markers not attached to any declaration", len(pending))

    return declarations


def read_header_bytes(
    source: bytes,
    path: str,
    marker_aliases: Optional[Dict[str, GMarkerKind]] = None,
) -> GHeader:
    """Read a header held in memory."""
    tree, prepared = parse_header_bytes(source, marker_aliases=marker_aliases)
    declarations = read_declarations(tree, prepared)
    logger.debug(f"Read {len(declarations)} declarations from {path}")
    return GHeader(path=path, declarations=tuple(declarations))


def read_header_file(
    file_path: str,
    marker_aliases: Optional[Dict[str, GMarkerKind]] = None,
) -> GHeader:
    """Read the declaration stream of a header file on disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not carry a header extension.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1]
    if ext not in HEADER_EXTENSIONS:
        raise ValueError(
            f"File {file_path} is not a header file. "
            f"Expected one of: {HEADER_EXTENSIONS}"
        )

    tree, prepared = parse_header_file(file_path, marker_aliases=marker_aliases)
    declarations = read_declarations(tree, prepared)
    logger.info(f"Read {len(declarations)} declarations from {file_path}")
    return GHeader(path=file_path, declarations=tuple(declarations))
