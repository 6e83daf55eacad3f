"""
Routing rules for function declarations.

Each rule pairs a predicate with the manifest list it routes to. Rules are
evaluated in order and the first match wins; a declaration matching no rule
is not exported.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from grammar.models import GFunctionDecl, GMarkerKind

CONSTRUCTOR_NAME_TOKEN: str = "Create"
DESTRUCTOR_NAME_TOKEN: str = "Delete"


class Route(Enum):
    """Manifest list a declaration is appended to."""

    IMPORT = "imports"
    STRUCT = "structs"
    INIT = "inits"
    DEINIT = "deinits"
    ENUM = "enums"
    FUNCTION = "functions"
    PROPERTY = "properties"


def is_exported_method(decl: GFunctionDecl) -> bool:
    return decl.markers.contains(
        GMarkerKind.EXPORT_METHOD,
        GMarkerKind.EXPORT_STATIC_METHOD,
    )


def is_exported_property(decl: GFunctionDecl) -> bool:
    return decl.markers.contains(
        GMarkerKind.EXPORT_PROPERTY,
        GMarkerKind.EXPORT_STATIC_PROPERTY,
    )


def is_constructor_name(name: str) -> bool:
    return CONSTRUCTOR_NAME_TOKEN in name


def is_destructor_name(name: str) -> bool:
    return DESTRUCTOR_NAME_TOKEN in name


@dataclass(frozen=True)
class RoutingRule:
    """A named predicate and its target list."""

    name: str
    predicate: Callable[[GFunctionDecl], bool]
    route: Route

    def matches(self, decl: GFunctionDecl) -> bool:
        return self.predicate(decl)


DEFAULT_FUNCTION_RULES: tuple[RoutingRule, ...] = (
    RoutingRule(
        name="exported-constructor",
        predicate=lambda d: is_exported_method(d) and is_constructor_name(d.name),
        route=Route.INIT,
    ),
    RoutingRule(
        name="exported-destructor",
        predicate=lambda d: is_exported_method(d) and is_destructor_name(d.name),
        route=Route.DEINIT,
    ),
    RoutingRule(
        name="exported-method",
        predicate=is_exported_method,
        route=Route.FUNCTION,
    ),
    RoutingRule(
        name="exported-property",
        predicate=is_exported_property,
        route=Route.PROPERTY,
    ),
)


def route_function(
    decl: GFunctionDecl,
    rules: Sequence[RoutingRule] = DEFAULT_FUNCTION_RULES,
) -> Optional[Route]:
    """Return the route of the first matching rule, or None if not exported."""
    for rule in rules:
        if rule.matches(decl):
            return rule.route
    return None
