"""TestNG to JUnit report conversion."""

import logging
import math
import re

from .models import (
    Failure, JUnitCase, JUnitReport, JUnitSuite, Skipped, Suite, TestClass,
    TestMethod, TestNGReport,
)

logger = logging.getLogger(__name__)

FAILURE_TYPE = "Failure"

_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def convert_report(report: TestNGReport) -> JUnitReport:
    """Map a TestNG report onto a JUnit report. Never fails."""
    return JUnitReport(suites=[convert_suite(suite) for suite in report.suites])


def convert_suite(suite: Suite) -> JUnitSuite:
    return JUnitSuite(
        name=suite.name,
        tests=suite.tests,
        failures=suite.failures,
        skipped=suite.skipped,
        time=format_seconds(suite.duration_ms),
        cases=[convert_method(method, test_class) for test_class, method in suite.iter_methods()],
    )


def convert_method(method: TestMethod, test_class: TestClass) -> JUnitCase:
    # Case time stays in the source's milliseconds string
    case = JUnitCase(name=method.name, classname=test_class.name, time=method.duration_ms)
    if method.failed:
        case.failure = Failure(
            message=method.exception_message or "",
            type=FAILURE_TYPE,
            stack_trace=method.stack_trace or "",
        )
    elif method.skipped:
        case.skipped = Skipped()
    return case


def format_seconds(duration_ms: str) -> str:
    """'1500' -> '1.500'. Unparsable durations count as zero."""
    if duration_ms and _DECIMAL.fullmatch(duration_ms):
        millis = float(duration_ms)
    else:
        if duration_ms:
            logger.debug(f"Treating unparsable duration {duration_ms!r} as 0")
        millis = 0.0
    if not math.isfinite(millis):
        logger.debug(f"Treating non-finite duration {duration_ms!r} as 0")
        millis = 0.0
    return f"{millis / 1000:.3f}"
