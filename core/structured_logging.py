"""Log record context for manifest runs.

Every line logged during a run carries the run id (also the run report's
file name) and the stem of the header being classified, so the lines of one
failing header can be grepped out of a directory run.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

UNSET = "-"

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | header=%(header)s | "
    "%(name)s | %(message)s"
)

_run_id: contextvars.ContextVar[str] = contextvars.ContextVar("manifest_run_id", default=UNSET)
_header: contextvars.ContextVar[str] = contextvars.ContextVar("manifest_header", default=UNSET)


class _ManifestContextFilter(logging.Filter):
    """Stamps ``run_id`` and ``header`` onto records before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id.get()
        record.header = _header.get()
        return True


_CONTEXT_FILTER = _ManifestContextFilter()


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Install ``LOG_FORMAT`` and the context filter on the root handlers.

    Safe to call more than once; existing handlers are reformatted rather
    than duplicated.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    for handler in root.handlers:
        if _CONTEXT_FILTER not in handler.filters:
            handler.addFilter(_CONTEXT_FILTER)


def set_run_id(run_id: str | None = None) -> str:
    """Start a run; a fresh UUID is used when ``run_id`` is not given."""
    value = run_id or uuid.uuid4().hex
    _run_id.set(value)
    return value


def get_run_id() -> str:
    return _run_id.get()


def get_header() -> str:
    return _header.get()


@contextmanager
def header_scope(header: str) -> Iterator[None]:
    """Attribute log lines emitted in the block to ``header``."""
    token = _header.set(header)
    try:
        yield
    finally:
        _header.reset(token)
