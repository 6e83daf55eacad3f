"""
High-level orchestrator for manifest extraction.

This module provides the entry points for turning single headers or whole
header directories into manifests, and for writing those manifests to disk.
Each header gets its own independent classification pass; a failing header
is recorded and never affects the manifests of the others.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.codegen_config import CodegenConfig
from core.structured_logging import header_scope
from grammar.config import HEADER_EXTENSIONS
from grammar.models import GEnumDecl, GHeader, GStructDecl, GStructIndicator
from grammar.reader import read_header_file
from manifest.classifier import ClassificationResult, SkipNotice, classify_header, header_stem
from manifest.errors import BadType, ManifestError
from manifest.models import FileInfo
from manifest.rules import DEFAULT_FUNCTION_RULES, RoutingRule
from manifest.serialization import dump_file_info
from manifest.types import NamedKind, TypeKindTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderFailure:
    """A header whose manifest could not be produced."""

    file_path: str
    name: str
    error_kind: str
    message: str


class ManifestStats:
    """Statistics for a manifest extraction run."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.records_extracted = 0
        self.declarations_skipped = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "records_extracted": self.records_extracted,
            "declarations_skipped": self.declarations_skipped,
        }

    def __str__(self) -> str:
        return (
            f"ManifestStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, records={self.records_extracted}, "
            f"skipped={self.declarations_skipped})"
        )


@dataclass
class ManifestRun:
    """Result of processing a set of headers.

    Attributes:
        results: Successful passes keyed by manifest name, in processing order.
        failures: Headers that failed, with their error kind.
        stats: Aggregate counters.
    """

    results: Dict[str, ClassificationResult] = field(default_factory=dict)
    failures: List[HeaderFailure] = field(default_factory=list)
    stats: ManifestStats = field(default_factory=ManifestStats)

    @property
    def file_infos(self) -> List[FileInfo]:
        return [result.file_info for result in self.results.values()]

    @property
    def skipped(self) -> List[SkipNotice]:
        return [notice for result in self.results.values() for notice in result.skipped]

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_report(self) -> Dict[str, Any]:
        """Summary suitable for ``write_run_report``."""
        return {
            "status": "success" if self.ok else "failed",
            "stats": self.stats.to_dict(),
            "manifests": list(self.results),
            "failures": [
                {
                    "file_path": f.file_path,
                    "name": f.name,
                    "error_kind": f.error_kind,
                    "message": f.message,
                }
                for f in self.failures
            ],
            "skipped": [
                {"file": notice.file_name, "declaration": notice.declaration}
                for notice in self.skipped
            ],
        }


def discover_header_files(
    directory: str,
    suffixes: Iterable[str] = HEADER_EXTENSIONS,
) -> List[str]:
    """Recursively discover header files in a directory.

    Args:
        directory: Root directory to search.
        suffixes: File extensions to accept.

    Returns:
        Sorted list of absolute paths.
    """
    wanted = set(suffixes)
    headers = []
    directory = os.path.abspath(directory)

    logger.info(f"Discovering header files in {directory}")

    for root, dirs, files in os.walk(directory):
        # Skip hidden directories and common build/cache directories
        dirs[:] = [d for d in dirs if not d.startswith('.') and d not in {
            'build', 'cmake-build-debug', 'cmake-build-release',
            'node_modules', 'venv', '__pycache__', 'dist', 'out'
        }]

        for file in files:
            if os.path.splitext(file)[1] in wanted:
                headers.append(os.path.join(root, file))

    logger.info(f"Found {len(headers)} header files")
    return sorted(headers)


def build_type_index(headers: Sequence[GHeader], seed: Optional[TypeKindTable] = None) -> TypeKindTable:
    """Index struct and enum names declared across a set of headers.

    A name declared with conflicting kinds keeps its first kind; the conflict
    is logged and left for the classifying pass of the offending header to
    report.
    """
    index = seed.copy() if seed is not None else TypeKindTable()
    for header in headers:
        for decl in header.declarations:
            if isinstance(decl, (GStructIndicator, GStructDecl)):
                kind = NamedKind.STRUCT
            elif isinstance(decl, GEnumDecl):
                kind = NamedKind.ENUM
            else:
                continue
            try:
                index.register(decl.name, kind)
            except BadType as exc:
                logger.warning("Type index conflict in %s: %s", header.path, exc)
    logger.debug(f"Indexed {len(index)} named types")
    return index


def extract_file_info(
    header: GHeader,
    kinds: Optional[TypeKindTable] = None,
    rules: Sequence[RoutingRule] = DEFAULT_FUNCTION_RULES,
) -> ClassificationResult:
    """Classify one already-read header.

    Args:
        header: Declaration stream from the header reader.
        kinds: Named-type table to resolve struct/enum references. The pass
            works on a copy.
        rules: Function routing rules.

    Returns:
        ClassificationResult with the frozen manifest and skip notices.

    Raises:
        ManifestError: On the first conversion failure.
    """
    name = header_stem(header.path)
    with header_scope(name):
        try:
            result = classify_header(header, kinds=kinds, rules=rules)
        except ManifestError as e:
            logger.error("Classification of %s failed: %s", header.path, e)
            raise
        logger.info(
            "Extracted %d records from %s (%d skipped)",
            result.file_info.record_count(),
            header.path,
            len(result.skipped),
        )
    return result


def extract_header_file(
    file_path: str,
    config: Optional[CodegenConfig] = None,
    kinds: Optional[TypeKindTable] = None,
) -> ClassificationResult:
    """Read and classify a single header file.

    Named types are resolved against ``kinds`` when given, otherwise against
    the configured known types plus the header's own declarations.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a header.
        ManifestError: On the first conversion failure.
    """
    config = config or CodegenConfig()
    header = read_header_file(file_path, marker_aliases=config.marker_aliases)
    if kinds is None:
        kinds = build_type_index([header], seed=config.type_table())
    return extract_file_info(header, kinds=kinds)


def _failure(file_path: str, exc: Exception) -> HeaderFailure:
    kind = exc.kind if isinstance(exc, ManifestError) else type(exc).__name__
    return HeaderFailure(
        file_path=file_path,
        name=header_stem(file_path),
        error_kind=kind,
        message=str(exc),
    )


def process_header_dir(
    directory: str,
    config: Optional[CodegenConfig] = None,
    continue_on_error: Optional[bool] = None,
) -> ManifestRun:
    """Produce one manifest per header in a directory tree.

    All headers are read first so that struct and enum names declared in any
    of them resolve in all of them; each header is then classified on its
    own.

    Args:
        directory: Root directory to process.
        config: Generator settings; defaults are used when None.
        continue_on_error: Keep going after a failing header. Defaults to
            ``config.continue_on_error``.

    Returns:
        ManifestRun with per-header results, failures and stats.

    Raises:
        FileNotFoundError: If directory does not exist.
        ManifestError: On the first failure when not continuing on error.
    """
    config = config or CodegenConfig()
    if continue_on_error is None:
        continue_on_error = config.continue_on_error

    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    run = ManifestRun()
    header_files = discover_header_files(directory, config.header_suffixes)
    if not header_files:
        logger.warning(f"No header files found in {directory}")
        return run

    headers: List[GHeader] = []
    for file_path in header_files:
        try:
            headers.append(read_header_file(file_path, marker_aliases=config.marker_aliases))
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Cannot read {file_path}: {e}")
            run.failures.append(_failure(file_path, e))
            run.stats.files_failed += 1
            if not continue_on_error:
                raise

    index = build_type_index(headers, seed=config.type_table())
    logger.info(f"Processing {len(headers)} headers from {directory}")

    seen_names = {failure.name for failure in run.failures}
    for header in headers:
        name = header_stem(header.path)
        if name in seen_names:
            e = ValueError(f"Duplicate manifest name '{name}' for {header.path}")
            logger.error(str(e))
            run.failures.append(_failure(header.path, e))
            run.stats.files_failed += 1
            if not continue_on_error:
                raise e
            continue

        seen_names.add(name)
        try:
            result = extract_file_info(header, kinds=index)
        except ManifestError as e:
            run.failures.append(_failure(header.path, e))
            run.stats.files_failed += 1
            if not continue_on_error:
                raise
            continue

        run.results[name] = result
        run.stats.files_processed += 1
        run.stats.records_extracted += result.file_info.record_count()
        run.stats.declarations_skipped += len(result.skipped)

    logger.info(f"Manifest extraction complete: {run.stats}")
    return run


def write_manifests(file_infos: Iterable[FileInfo], output_dir: str) -> List[str]:
    """Write one ``<name>.yaml`` per manifest and return the paths written."""
    os.makedirs(output_dir, exist_ok=True)
    paths = []
    for info in file_infos:
        path = os.path.join(output_dir, f"{info.name}.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(dump_file_info(info))
        paths.append(path)
    logger.info(f"Wrote {len(paths)} manifests to {output_dir}")
    return paths
