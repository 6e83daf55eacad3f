"""Core shared configuration, logging and run-artifact utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_header,
    get_run_id,
    header_scope,
    set_run_id,
)
from core.codegen_config import (
    CodegenConfig,
    ConfigValidationError,
    load_codegen_config,
    resolve_strict_config_validation,
)
from core.run_artifacts import report_path, write_run_report

__all__ = [
    "configure_structured_logging",
    "get_header",
    "get_run_id",
    "header_scope",
    "set_run_id",
    "CodegenConfig",
    "ConfigValidationError",
    "load_codegen_config",
    "resolve_strict_config_validation",
    "report_path",
    "write_run_report",
]
