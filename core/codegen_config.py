"""Manifest generator configuration.

Loads an optional YAML/JSON config file describing where manifests go,
which extra names count as structs/enums and which extra macros act as
export markers. Environment variables (a ``.env`` file is honoured) override
the output locations and strictness.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from grammar.config import HEADER_EXTENSIONS
from grammar.models import GMarkerKind
from manifest.types import NamedKind, TypeKindTable

logger = logging.getLogger(__name__)

# Idempotent; does nothing if already loaded or missing
load_dotenv()

DEFAULT_OUTPUT_DIR: str = "out"
DEFAULT_REPORT_DIR: str = "output/run_reports"


class ConfigValidationError(RuntimeError):
    """Raised when the config file is unusable."""


@dataclass(frozen=True)
class CodegenConfig:
    """Settings for one manifest extraction run."""

    header_suffixes: tuple[str, ...] = tuple(sorted(HEADER_EXTENSIONS))
    output_dir: str = DEFAULT_OUTPUT_DIR
    report_dir: str = DEFAULT_REPORT_DIR
    known_types: dict[str, NamedKind] = field(default_factory=dict)
    marker_aliases: dict[str, GMarkerKind] = field(default_factory=dict)
    continue_on_error: bool = True

    def type_table(self) -> TypeKindTable:
        """Kind table seeded with ``known_types``."""
        return TypeKindTable(self.known_types)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def _load_payload(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigValidationError(f"Config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigValidationError(f"Failed to parse config at {config_path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigValidationError(
            f"Unexpected config payload type: {type(payload).__name__}"
        )
    return payload


def _parse_known_types(raw: Any, strict: bool) -> dict[str, NamedKind]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError("known_types must be a mapping of name -> struct|enum")

    known: dict[str, NamedKind] = {}
    for name, kind in raw.items():
        try:
            known[str(name)] = NamedKind(str(kind).strip().lower())
        except ValueError:
            msg = f"known_types['{name}'] must be 'struct' or 'enum', got {kind!r}"
            if strict:
                raise ConfigValidationError(msg) from None
            logger.warning("%s; ignoring", msg)
    return known


def _parse_marker_aliases(raw: Any, strict: bool) -> dict[str, GMarkerKind]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError("marker_aliases must be a mapping of macro -> marker kind")

    aliases: dict[str, GMarkerKind] = {}
    for macro, kind in raw.items():
        try:
            aliases[str(macro)] = GMarkerKind(str(kind).strip().lower())
        except ValueError:
            msg = f"marker_aliases['{macro}'] has unknown marker kind {kind!r}"
            if strict:
                raise ConfigValidationError(msg) from None
            logger.warning("%s; ignoring", msg)
    return aliases


def load_codegen_config(
    path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> CodegenConfig:
    """Load generator settings from file and environment.

    Args:
        path: Optional YAML or JSON config file.
        strict: Reject unknown kinds instead of dropping them. Defaults to
            ``STRICT_CONFIG_VALIDATION``.

    Returns:
        The resolved configuration.

    Raises:
        ConfigValidationError: If the file is missing, unparsable or has
            malformed sections.
    """
    if strict is None:
        strict = resolve_strict_config_validation()

    payload = _load_payload(path) if path else {}

    suffixes_raw = payload.get("header_suffixes")
    if suffixes_raw is None:
        header_suffixes = tuple(sorted(HEADER_EXTENSIONS))
    elif isinstance(suffixes_raw, list) and suffixes_raw:
        header_suffixes = tuple(
            s if str(s).startswith(".") else f".{s}" for s in (str(x).strip() for x in suffixes_raw)
        )
    else:
        raise ConfigValidationError("header_suffixes must be a non-empty list")

    continue_on_error = payload.get("continue_on_error", True)
    if not isinstance(continue_on_error, bool):
        raise ConfigValidationError(
            f"continue_on_error must be true or false, got {continue_on_error!r}"
        )

    output_dir = os.getenv("MANIFEST_OUTPUT_DIR") or str(payload.get("output_dir", DEFAULT_OUTPUT_DIR))
    report_dir = os.getenv("MANIFEST_REPORT_DIR") or str(payload.get("report_dir", DEFAULT_REPORT_DIR))

    config = CodegenConfig(
        header_suffixes=header_suffixes,
        output_dir=output_dir,
        report_dir=report_dir,
        known_types=_parse_known_types(payload.get("known_types"), strict),
        marker_aliases=_parse_marker_aliases(payload.get("marker_aliases"), strict),
        continue_on_error=continue_on_error,
    )
    logger.debug("Loaded codegen config: %s", config)
    return config
