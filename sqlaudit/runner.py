"""Scan a directory tree concurrently and merge per-file results."""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlaudit.config_runtime import build_vocabulary, load_runtime_config
from sqlaudit.discovery import discover_files
from sqlaudit.exceptions import ParseFailure
from sqlaudit.scanner import Finding, MissingVariableFinding, ScanVocabulary, scan_source
from sqlaudit.utils.logging import logger


@dataclass
class ScanRun:
    """Outcome of one audit run."""

    root: Path
    results: dict[str, list[Finding]] = field(default_factory=dict)
    skipped: list[dict[str, str]] = field(default_factory=list)
    files_scanned: int = 0

    def get_summary_stats(self) -> dict[str, Any]:
        """Counts per finding type across the run."""
        stats = {
            "files_scanned": self.files_scanned,
            "files_with_findings": len(self.results),
            "files_skipped": len(self.skipped),
            "total_findings": 0,
            "by_type": {},
        }
        for findings in self.results.values():
            stats["total_findings"] += len(findings)
            for finding in findings:
                stats["by_type"][finding.type_tag] = stats["by_type"].get(finding.type_tag, 0) + 1
        return stats

    @property
    def has_missing_declarations(self) -> bool:
        return any(
            isinstance(f, MissingVariableFinding) for fs in self.results.values() for f in fs
        )


def scan_file(
    path: Path, vocabulary: ScanVocabulary, max_file_size: int | None = None
) -> list[Finding]:
    """Read and scan one file.

    Raises:
        ParseFailure: the file is missing, unreadable, too large or unparsable
    """
    try:
        if max_file_size is not None and path.stat().st_size > max_file_size:
            raise ParseFailure(str(path), f"larger than {max_file_size} bytes")
        source = path.read_bytes()
    except OSError as e:
        raise ParseFailure(str(path), e.strerror or str(e)) from e
    return scan_source(source, str(path), vocabulary)


def run_scan(
    root: Path | str,
    config: dict[str, Any] | None = None,
    exclude_patterns: list[str] | None = None,
    max_workers: int | None = None,
) -> ScanRun:
    """Scan every candidate file under root.

    Files are independent; each is scanned on a worker thread and its result
    merged by relative path. Unparsable files are logged and skipped.
    """
    root = Path(root).resolve()
    config = config or load_runtime_config(str(root if root.is_dir() else root.parent))
    vocabulary = build_vocabulary(config)

    files = discover_files(
        root,
        extensions=config["scan"]["extensions"],
        exclude_patterns=exclude_patterns,
    )
    run = ScanRun(root=root)
    if not files:
        logger.info(f"No source files found under {root}")
        return run

    base = root if root.is_dir() else root.parent
    max_file_size = config["limits"]["max_file_size"]
    workers = max_workers or config["limits"]["max_workers"] or min(8, os.cpu_count() or 4)
    logger.info(f"Scanning {len(files)} files with {workers} workers...")

    results: dict[str, list[Finding]] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(scan_file, path, vocabulary, max_file_size): path for path in files}

        for future in as_completed(futures):
            rel_path = futures[future].relative_to(base).as_posix()
            try:
                findings = future.result()
            except ParseFailure as e:
                logger.warning(f"Skipping {rel_path}: {e.reason}")
                run.skipped.append({"path": rel_path, "reason": e.reason})
                continue

            run.files_scanned += 1
            if findings:
                results[rel_path] = findings

    run.results = dict(sorted(results.items()))
    run.skipped.sort(key=lambda s: s["path"])
    logger.info(
        f"Scanned {run.files_scanned} files: {len(run.results)} with findings, "
        f"{len(run.skipped)} skipped"
    )
    return run
