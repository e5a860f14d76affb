"""JUnit XML serialization and atomic file output."""

import logging
import os
import shutil
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Union

from .errors import ReportWriteError
from .models import JUnitCase, JUnitReport, JUnitSuite

logger = logging.getLogger(__name__)

INDENT = "  "


def to_element(report: JUnitReport) -> ET.Element:
    root = ET.Element("testsuites")
    for suite in report.suites:
        root.append(_suite_element(suite))
    return root


def _suite_element(suite: JUnitSuite) -> ET.Element:
    el = ET.Element("testsuite", {
        "name": suite.name,
        "tests": str(suite.tests),
        "failures": str(suite.failures),
        "skipped": str(suite.skipped),
        "time": suite.time,
    })
    for case in suite.cases:
        el.append(_case_element(case))
    return el


def _case_element(case: JUnitCase) -> ET.Element:
    el = ET.Element("testcase", {"name": case.name, "classname": case.classname, "time": case.time})
    if case.failure is not None:
        failure = ET.SubElement(el, "failure", {
            "message": case.failure.message,
            "type": case.failure.type,
        })
        failure.text = case.failure.stack_trace
    if case.skipped is not None:
        ET.SubElement(el, "skipped")
    return el


def serialize(report: JUnitReport) -> bytes:
    """Render the report as UTF-8 XML indented by two spaces."""
    root = to_element(report)
    ET.indent(root, space=INDENT)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def write_report(report: JUnitReport, path: Union[str, Path]) -> None:
    """Replace the file at path with the serialized report.

    The data goes to a temporary file in the same directory first and is renamed
    over the target, so readers never see a partially written report.
    """
    # Write through symlinks to the file they point at
    path = Path(os.path.realpath(path))
    try:
        data = serialize(report)
    except (TypeError, ValueError) as e:
        raise ReportWriteError(f"failed to marshal JUnit XML: {e}") from e

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if path.exists():
            shutil.copymode(path, tmp_name)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ReportWriteError(f"failed to write {path}: {e}") from e

    logger.debug(f"Wrote {len(data)} bytes to {path}")
