"""Run report artifacts for manifest extraction runs."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DEFAULT_REPORT_DIR = "output/run_reports"


def report_path(run_id: str, output_dir: str = DEFAULT_REPORT_DIR) -> Path:
    """Location of the JSON report for ``run_id``."""
    return Path(output_dir) / f"{run_id}.json"


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = DEFAULT_REPORT_DIR,
) -> str:
    """Write a JSON run report and return its path.

    ``run_id`` and ``timestamp_utc`` are added unless the report already
    carries them.
    """
    path = report_path(run_id, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return str(path)
