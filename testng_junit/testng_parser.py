"""TestNG XML report parser."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from .errors import AlreadyConvertedError, ReportParseError
from .models import Param, Suite, TestClass, TestMethod, TestNGReport

logger = logging.getLogger(__name__)

TESTNG_ROOT = "testng-results"
JUNIT_ROOTS = ("testsuites", "testsuite")

_TRUE = {"1", "t", "true"}
_FALSE = {"0", "f", "false"}


class TestNGParser:
    """Decodes testng-results documents into the report model.

    Missing numeric or boolean attributes read as zero/false; present but
    unparsable ones are a parse error.
    """

    def parse_file(self, path: Union[str, Path]) -> TestNGReport:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ReportParseError(path, e) from e
        return self.parse_bytes(data, source=str(path))

    def parse_bytes(self, data: bytes, source: str = "<bytes>") -> TestNGReport:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise ReportParseError(source, e) from e

        if root.tag in JUNIT_ROOTS:
            raise AlreadyConvertedError(source, f"root element <{root.tag}> is already JUnit XML")
        if root.tag != TESTNG_ROOT:
            raise ReportParseError(
                source, f"expected element type <{TESTNG_ROOT}> but have <{root.tag}>"
            )

        try:
            report = TestNGReport(suites=[self._parse_suite(el) for el in root.findall("suite")])
        except ValueError as e:
            raise ReportParseError(source, e) from e

        logger.debug(f"Parsed {len(report.suites)} suites from {source}")
        return report

    def _parse_suite(self, el: ET.Element) -> Suite:
        return Suite(
            name=el.get("name", ""),
            duration_ms=el.get("duration-ms", ""),
            tests=_int_attr(el, "tests"),
            failures=_int_attr(el, "failures"),
            skipped=_int_attr(el, "skipped"),
            classes=[self._parse_class(c) for c in _suite_classes(el)],
        )

    def _parse_class(self, el: ET.Element) -> TestClass:
        return TestClass(
            name=el.get("name", ""),
            methods=[self._parse_method(m) for m in el.findall("test-method")],
        )

    def _parse_method(self, el: ET.Element) -> TestMethod:
        exception = el.find("exception")
        return TestMethod(
            name=el.get("name", ""),
            class_name=el.get("class", ""),
            status=el.get("status", ""),
            duration_ms=el.get("duration-ms", ""),
            is_config=_bool_attr(el, "is-config"),
            exception_message=_child_text(exception, "message"),
            stack_trace=_child_text(exception, "full-stacktrace"),
            params=[
                Param(name=p.get("name", ""), value="".join(p.itertext()).strip())
                for p in el.findall("params/param")
            ],
        )


def _suite_classes(suite: ET.Element):
    """Yield class elements directly under the suite or under its <test> blocks."""
    for child in suite:
        if child.tag == "class":
            yield child
        elif child.tag == "test":
            yield from child.findall("class")


def _child_text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    if parent is None:
        return None
    child = parent.find(tag)
    if child is None:
        return None
    return "".join(child.itertext())


def _int_attr(el: ET.Element, name: str) -> int:
    raw = el.get(name, "").strip()
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"attribute {name}={raw!r} on <{el.tag}> is not an integer") from None


def _bool_attr(el: ET.Element, name: str) -> bool:
    raw = el.get(name, "").strip().lower()
    if not raw:
        return False
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"attribute {name}={raw!r} on <{el.tag}> is not a boolean")
