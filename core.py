#!/usr/bin/env python3
"""
Core operations shared between MCP server and CLI.
Locates TestNG reports, checks thresholds and rewrites them as JUnit XML.
"""

import glob
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from testng_junit.config import PluginConfig, validate_config
from testng_junit.converter import convert_report
from testng_junit.errors import AlreadyConvertedError, DiscoveryError
from testng_junit.evaluator import UnstableWarning, evaluate_report
from testng_junit.junit_writer import write_report
from testng_junit.testng_parser import TestNGParser

logger = logging.getLogger(__name__)

STATUS_CONVERTED = "converted"
STATUS_CHECKED = "checked"
STATUS_SKIPPED = "skipped"

# Global parser (singleton)
_parser = None


def get_parser() -> TestNGParser:
    """Get or create the TestNGParser singleton."""
    global _parser
    if _parser is None:
        _parser = TestNGParser()
    return _parser


@dataclass
class FileResult:
    """Outcome for one report file."""
    path: str
    status: str
    suites: int = 0
    tests: int = 0
    failures: int = 0
    skipped: int = 0
    warnings: list[UnstableWarning] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "status": self.status,
            "suites": self.suites,
            "tests": self.tests,
            "failures": self.failures,
            "skipped": self.skipped,
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class RunResult:
    """Outcome of a successful run. Failed runs raise instead."""
    files: list[FileResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def warnings(self) -> list[UnstableWarning]:
        return [w for f in self.files for w in f.warnings]

    @property
    def unstable(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict:
        return {
            "status": "unstable" if self.unstable else "success",
            "unstable": self.unstable,
            "dry_run": self.dry_run,
            "files_processed": len(self.files),
            "files": [f.to_dict() for f in self.files],
        }


def locate_files(pattern: str) -> list[str]:
    """Return files matching the pattern, in filesystem listing order.

    '**' matches any number of directories, as in Ant-style patterns. Hidden
    files and directories match like any other.
    """
    try:
        matches = glob.glob(pattern, recursive=True, include_hidden=True)
    except (OSError, ValueError) as e:
        raise DiscoveryError(f"invalid report filename pattern {pattern!r}: {e}") from e
    return [m for m in matches if Path(m).is_file()]


def process_file(path: str, config: PluginConfig, dry_run: bool = False,
                 log: Optional[logging.Logger] = None) -> FileResult:
    """Parse, evaluate, convert and (unless dry_run) overwrite one report.

    Raises:
        ReportParseError: the file is not a readable TestNG report
        ValidationError: a failed-build threshold was exceeded
        ReportWriteError: the converted report could not be written
    """
    log = log or logger
    log.info(f"Processing file: {path}")

    try:
        report = get_parser().parse_file(path)
    except AlreadyConvertedError:
        if not config.skip_converted:
            raise
        log.warning(f"Skipping {path}: already in JUnit format")
        return FileResult(path=path, status=STATUS_SKIPPED)

    warnings = evaluate_report(report, config, log=log)
    junit = convert_report(report)

    result = FileResult(
        path=path,
        status=STATUS_CHECKED if dry_run else STATUS_CONVERTED,
        suites=len(report.suites),
        tests=sum(s.tests for s in report.suites),
        failures=sum(s.failures for s in report.suites),
        skipped=sum(s.skipped for s in report.suites),
        warnings=warnings,
    )

    if dry_run:
        log.info(f"Checked {path}: {result.tests} tests, {result.failures} failed, {result.skipped} skipped")
        return result

    write_report(junit, path)
    log.info(f"Successfully converted {path} to JUnit format")
    return result


def run(config: PluginConfig, dry_run: bool = False,
        log: Optional[logging.Logger] = None) -> RunResult:
    """
    Convert every report matching config.report_filename_pattern.

    Files are handled one after another; the first error of any kind stops the
    run and propagates to the caller. Files converted before the failing one
    stay converted.

    Args:
        config: Validated or unvalidated plugin settings
        dry_run: Parse, evaluate and convert without writing anything
        log: Logger for progress and unstable warnings

    Returns:
        RunResult with per-file outcomes and the unstable flag
    """
    log = log or logger
    validate_config(config)

    files = locate_files(config.report_filename_pattern)
    if not files:
        if config.fail_if_no_results:
            raise DiscoveryError("no TestNG XML report files found")
        log.info(f"No files found matching {config.report_filename_pattern}; nothing to do")
        return RunResult(dry_run=dry_run)

    log.debug(f"Found {len(files)} report files")
    result = RunResult(dry_run=dry_run)
    for path in files:
        result.files.append(process_file(path, config, dry_run=dry_run, log=log))

    if result.unstable:
        log.warning(f"Build is UNSTABLE: {len(result.warnings)} unstable thresholds exceeded")
    return result
