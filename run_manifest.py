#!/usr/bin/env python3
"""
Command-line driver: C header directory -> one YAML manifest per header.

Usage:
    python run_manifest.py --header-dir include/TrustWalletCore
    python run_manifest.py --header-dir include --output-dir out --config codegen.yml
    python run_manifest.py --header-dir include --fail-fast
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from core.codegen_config import ConfigValidationError, load_codegen_config
from core.run_artifacts import write_run_report
from core.structured_logging import configure_structured_logging, set_run_id
from manifest.errors import ManifestError
from manifest.extractor import process_header_dir, write_manifests

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="C Header Interface Manifest Extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_manifest.py --header-dir include/TrustWalletCore\n"
            "  python run_manifest.py --header-dir include --config codegen.yml --fail-fast\n"
        ),
    )

    parser.add_argument(
        "--header-dir",
        required=True,
        help="Directory containing the C headers to process.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for <header>.yaml manifests. Default: config output_dir ('out').",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML/JSON generator config file.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory for the JSON run report. Default: config report_dir.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Stop at the first header that fails instead of skipping it.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)
    configure_structured_logging(getattr(logging, args.log_level))
    run_id = set_run_id()

    try:
        config = load_codegen_config(args.config)
    except ConfigValidationError as e:
        logger.error(f"Config error: {e}")
        return 1

    output_dir = args.output_dir or config.output_dir
    report_dir = args.report_dir or config.report_dir
    continue_on_error = config.continue_on_error and not args.fail_fast

    logger.info(f"Header directory : {os.path.abspath(args.header_dir)}")
    logger.info(f"Output directory : {os.path.abspath(output_dir)}")

    t0 = time.time()
    try:
        run = process_header_dir(args.header_dir, config, continue_on_error=continue_on_error)
        write_manifests(run.file_infos, output_dir)
    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except (ManifestError, ValueError) as e:
        logger.error(f"Manifest extraction aborted: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    report = run.to_report()
    report["elapsed_seconds"] = round(time.time() - t0, 3)
    report_file = write_run_report(report, run_id, output_dir=report_dir)
    logger.info(f"Run report written to {report_file}")

    for failure in run.failures:
        logger.error(f"{failure.name}: {failure.error_kind}: {failure.message}")

    if not run.ok:
        logger.warning(f"{len(run.failures)} headers failed")
        return 1

    logger.info(f"Extraction finished: {run.stats}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
