"""Error taxonomy for manifest extraction.

All four kinds describe a malformed or unsupported input shape; none of them
is retryable.
"""

from __future__ import annotations

from typing import Optional


class ManifestError(Exception):
    """Base class for conversion failures.

    Attributes:
        name: Name of the offending declaration, path or type.
        reason: Optional short explanation.
    """

    kind: str = "ManifestError"

    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        self.name = name
        self.reason = reason
        message = f"{self.kind}: {name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BadImport(ManifestError):
    """An include path could not be split into valid segments."""

    kind = "BadImport"


class BadObject(ManifestError):
    """A struct, enum, constructor, destructor or function failed conversion."""

    kind = "BadObject"


class BadProperty(ManifestError):
    """A property failed conversion or breaks the accessor contract."""

    kind = "BadProperty"


class BadType(ManifestError):
    """A type expression maps to no primitive and no known named type."""

    kind = "BadType"
