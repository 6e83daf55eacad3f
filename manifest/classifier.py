"""
Classification engine and manifest aggregator.

The engine makes exactly one pass over one header's declaration stream,
routes each declaration to its converter and hands the record to the
aggregator. Nothing is shared between headers; the only side effect is the
skip notice for declarations that are not exported.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from grammar.models import (
    GDeclaration,
    GEnumDecl,
    GFunctionDecl,
    GHeader,
    GHeaderInclude,
    GOther,
    GStructDecl,
    GStructIndicator,
)
from manifest.converters import (
    convert_deinit,
    convert_enum,
    convert_function,
    convert_import,
    convert_init,
    convert_property,
    convert_struct,
    convert_struct_indicator,
)
from manifest.models import (
    DeinitInfo,
    EnumInfo,
    FileInfo,
    FunctionInfo,
    ImportInfo,
    InitInfo,
    PropertyInfo,
    StructInfo,
)
from manifest.rules import DEFAULT_FUNCTION_RULES, Route, RoutingRule, route_function
from manifest.types import NamedKind, TypeKindTable

logger = logging.getLogger(__name__)

ManifestRecord = Union[
    ImportInfo,
    StructInfo,
    InitInfo,
    DeinitInfo,
    EnumInfo,
    FunctionInfo,
    PropertyInfo,
]

_FUNCTION_CONVERTERS = {
    Route.INIT: convert_init,
    Route.DEINIT: convert_deinit,
    Route.FUNCTION: convert_function,
    Route.PROPERTY: convert_property,
}


@dataclass(frozen=True)
class SkipNotice:
    """Diagnostic for a function declaration that carries no export marker."""

    file_name: str
    declaration: str


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of one header's pass."""

    file_info: FileInfo
    skipped: tuple[SkipNotice, ...] = ()


class ManifestAggregator:
    """Sole owner of one header's seven manifest lists.

    Records are only ever appended; ``finish`` freezes them into a
    ``FileInfo`` and closes the aggregator.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lists: dict[Route, List[ManifestRecord]] = {route: [] for route in Route}
        self._finished = False

    def append(self, route: Route, record: ManifestRecord) -> None:
        if self._finished:
            raise RuntimeError(f"Manifest for {self.name} is already finished")
        self._lists[route].append(record)

    def finish(self) -> FileInfo:
        if self._finished:
            raise RuntimeError(f"Manifest for {self.name} is already finished")
        self._finished = True
        return FileInfo(
            name=self.name,
            imports=tuple(self._lists[Route.IMPORT]),
            structs=tuple(self._lists[Route.STRUCT]),
            inits=tuple(self._lists[Route.INIT]),
            deinits=tuple(self._lists[Route.DEINIT]),
            enums=tuple(self._lists[Route.ENUM]),
            functions=tuple(self._lists[Route.FUNCTION]),
            properties=tuple(self._lists[Route.PROPERTY]),
        )


def header_stem(path: str) -> str:
    """File stem of a header path: ``include/TWFoo.h`` -> ``TWFoo``."""
    return os.path.splitext(os.path.basename(path))[0]


@dataclass
class ClassificationEngine:
    """Routes declarations of a single header to converters.

    Attributes:
        name: Manifest name (header stem).
        kinds: Named-type table; a private copy is extended with every struct
            and enum classified during the pass.
        rules: Ordered function routing rules.
    """

    name: str
    kinds: TypeKindTable = field(default_factory=TypeKindTable)
    rules: Sequence[RoutingRule] = DEFAULT_FUNCTION_RULES

    def __post_init__(self) -> None:
        self.kinds = self.kinds.copy()
        self._aggregator = ManifestAggregator(self.name)
        self._skipped: List[SkipNotice] = []

    def classify(self, decl: GDeclaration) -> Optional[Route]:
        """Classify one declaration and append its record.

        Returns:
            The route taken, or None for ignored and skipped declarations.
        """
        if isinstance(decl, GHeaderInclude):
            self._aggregator.append(Route.IMPORT, convert_import(decl))
            return Route.IMPORT

        if isinstance(decl, GStructIndicator):
            self.kinds.register(decl.name, NamedKind.STRUCT)
            self._aggregator.append(Route.STRUCT, convert_struct_indicator(decl))
            return Route.STRUCT

        if isinstance(decl, GStructDecl):
            # Register first so self-referencing fields resolve.
            self.kinds.register(decl.name, NamedKind.STRUCT)
            self._aggregator.append(Route.STRUCT, convert_struct(decl, self.kinds))
            return Route.STRUCT

        if isinstance(decl, GEnumDecl):
            self.kinds.register(decl.name, NamedKind.ENUM)
            self._aggregator.append(Route.ENUM, convert_enum(decl))
            return Route.ENUM

        if isinstance(decl, GFunctionDecl):
            route = route_function(decl, self.rules)
            if route is None:
                self._skipped.append(SkipNotice(file_name=self.name, declaration=decl.name))
                logger.info("Skipped: %s", decl.name)
                return None
            record = _FUNCTION_CONVERTERS[route](decl, self.kinds)
            self._aggregator.append(route, record)
            return route

        if not isinstance(decl, GOther):
            logger.warning("Ignoring unexpected declaration type %s", type(decl).__name__)
        return None

    def run(self, declarations: Sequence[GDeclaration]) -> ClassificationResult:
        """Classify every declaration in order and freeze the manifest.

        Raises:
            ManifestError: On the first conversion failure; no partial
                manifest is returned.
        """
        for decl in declarations:
            self.classify(decl)
        file_info = self._aggregator.finish()
        logger.debug(
            "Classified %s: %d records, %d skipped",
            self.name,
            file_info.record_count(),
            len(self._skipped),
        )
        return ClassificationResult(file_info=file_info, skipped=tuple(self._skipped))


def classify_declarations(
    name: str,
    declarations: Sequence[GDeclaration],
    kinds: Optional[TypeKindTable] = None,
    rules: Sequence[RoutingRule] = DEFAULT_FUNCTION_RULES,
) -> ClassificationResult:
    """Run one classification pass over a declaration stream."""
    engine = ClassificationEngine(
        name=name,
        kinds=kinds if kinds is not None else TypeKindTable(),
        rules=rules,
    )
    return engine.run(declarations)


def classify_header(
    header: GHeader,
    kinds: Optional[TypeKindTable] = None,
    rules: Sequence[RoutingRule] = DEFAULT_FUNCTION_RULES,
) -> ClassificationResult:
    """Classify a header read by the grammar package."""
    return classify_declarations(header_stem(header.path), header.declarations, kinds, rules)
