"""
Tree-sitter parser initialization and header source preparation.

Export markers, extern-C guards and clang nullability annotations are
macros that tree-sitter cannot parse. ``prepare_source`` records them and
blanks them out byte-for-byte so node offsets and rows still line up with the
original header.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import tree_sitter_cpp as tscpp
from tree_sitter import Language, Node, Parser, Tree

from grammar.config import (
    MARKER_KINDS,
    MARKER_PATTERN,
    NULLABILITY_ANNOTATIONS,
    TRANSPARENT_MACROS,
)
from grammar.models import GMarker, GMarkerKind

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
CPP_LANGUAGE = Language(tscpp.language())

_COMMENT_RE = re.compile(rb"//[^\n]*|/\*.*?\*/", re.DOTALL)
_MACRO_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class MarkerHit:
    """An export marker found in the raw source."""

    offset: int
    row: int
    marker: GMarker


@dataclass(frozen=True)
class AnnotationHit:
    """A nullability annotation found in the raw source."""

    offset: int
    text: str


@dataclass
class PreparedSource:
    """Header bytes with markers and annotations blanked out.

    Attributes:
        source: Bytes handed to tree-sitter; same length as the original.
        markers: Marker hits in source order.
        annotations: Nullability annotation hits in source order.
    """

    source: bytes
    markers: List[MarkerHit] = field(default_factory=list)
    annotations: List[AnnotationHit] = field(default_factory=list)

    def annotations_between(self, start: int, end: int) -> List[str]:
        """Return annotation texts with ``start <= offset < end``."""
        return [hit.text for hit in self.annotations if start <= hit.offset < end]


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for C/C++ headers.

    Returns:
        A Parser instance configured with the C++ language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"int TWFoo(void);")
    """
    parser = Parser(CPP_LANGUAGE)
    logger.debug("Created tree-sitter C++ parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of header source.

    Args:
        source: UTF-8 encoded bytes, already passed through ``prepare_source``.

    Returns:
        A Tree object representing the parsed AST.

    Raises:
        TypeError: If source is not bytes.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug(f"Parsed {len(source)} bytes of header source")
    return tree


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and missing nodes in a parsed tree."""
    count = 0
    stack: List[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        stack.extend(node.children)
    return count


def _comment_spans(source: bytes) -> List[Tuple[int, int]]:
    return [(m.start(), m.end()) for m in _COMMENT_RE.finditer(source)]


def _inside(spans: List[Tuple[int, int]], offset: int) -> bool:
    return any(start <= offset < end for start, end in spans)


def _blank(buffer: bytearray, start: int, end: int) -> None:
    for idx in range(start, end):
        if buffer[idx] not in (0x0A, 0x0D):
            buffer[idx] = 0x20


def _build_marker_re(marker_kinds: Dict[str, GMarkerKind]) -> "re.Pattern[bytes]":
    extra = [re.escape(name) for name in marker_kinds if name not in MARKER_KINDS]
    pattern = MARKER_PATTERN
    if extra:
        pattern = rf"(?:{MARKER_PATTERN}|\b(?:{'|'.join(extra)})\b(?:\s*\([^()]*\))?)"
    return re.compile(pattern.encode("ascii"))


def prepare_source(
    source: bytes,
    marker_aliases: Optional[Dict[str, GMarkerKind]] = None,
) -> PreparedSource:
    """Record and blank out markers, guard macros and nullability annotations.

    Args:
        source: Raw header bytes.
        marker_aliases: Extra macro names to read as markers, merged over the
            built-in vocabulary.

    Returns:
        PreparedSource ready for ``parse_bytes``.
    """
    marker_kinds = dict(MARKER_KINDS)
    if marker_aliases:
        marker_kinds.update(marker_aliases)

    comments = _comment_spans(source)
    buffer = bytearray(source)
    markers: List[MarkerHit] = []
    annotations: List[AnnotationHit] = []

    for match in _build_marker_re(marker_kinds).finditer(source):
        if _inside(comments, match.start()):
            continue
        text = _SPACE_RE.sub(" ", match.group(0).decode("utf-8")).strip()
        name = _MACRO_NAME_RE.match(text).group(0)
        kind = marker_kinds.get(name, GMarkerKind.OTHER)
        row = source.count(b"\n", 0, match.start())
        markers.append(MarkerHit(offset=match.start(), row=row, marker=GMarker(kind=kind, text=text)))
        _blank(buffer, match.start(), match.end())

    guard_re = re.compile(
        rb"\b(?:" + b"|".join(re.escape(m.encode("ascii")) for m in sorted(TRANSPARENT_MACROS)) + rb")\b"
    )
    for match in guard_re.finditer(source):
        if not _inside(comments, match.start()):
            _blank(buffer, match.start(), match.end())

    annotation_re = re.compile(
        rb"\b(?:" + b"|".join(re.escape(a.encode("ascii")) for a in sorted(NULLABILITY_ANNOTATIONS)) + rb")\b"
    )
    for match in annotation_re.finditer(source):
        if _inside(comments, match.start()):
            continue
        annotations.append(AnnotationHit(offset=match.start(), text=match.group(0).decode("ascii")))
        _blank(buffer, match.start(), match.end())

    logger.debug(
        "Prepared header source: %d markers, %d annotations",
        len(markers),
        len(annotations),
    )
    return PreparedSource(source=bytes(buffer), markers=markers, annotations=annotations)


def parse_header_bytes(
    source: bytes,
    marker_aliases: Optional[Dict[str, GMarkerKind]] = None,
) -> Tuple[Tree, PreparedSource]:
    """Prepare and parse header bytes in one step."""
    prepared = prepare_source(source, marker_aliases=marker_aliases)
    return parse_bytes(prepared.source), prepared


def parse_header_file(
    file_path: str,
    marker_aliases: Optional[Dict[str, GMarkerKind]] = None,
) -> Tuple[Tree, PreparedSource]:
    """Parse a header file from disk.

    Args:
        file_path: Path to the header.
        marker_aliases: Extra marker macro names.

    Returns:
        A tuple of (Tree, PreparedSource).

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except IOError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree, prepared = parse_header_bytes(source_bytes, marker_aliases=marker_aliases)

    if tree.root_node.has_error:
        logger.warning(f"File {file_path} contains syntax errors")

    logger.info(f"Successfully parsed file: {file_path}")
    return tree, prepared
