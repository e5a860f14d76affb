"""
Data models for TestNG source reports and JUnit destination reports.
"""

from dataclasses import dataclass, field
from typing import Optional


STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"
STATUS_SKIP = "SKIP"


@dataclass
class Param:
    """A parameter passed to a test method."""
    name: str
    value: str = ""


@dataclass
class TestMethod:
    """A TestNG test method or configuration method."""
    name: str
    class_name: str = ""
    status: str = ""
    duration_ms: str = ""
    is_config: bool = False
    exception_message: Optional[str] = None
    stack_trace: Optional[str] = None
    params: list[Param] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAIL

    @property
    def skipped(self) -> bool:
        return self.status == STATUS_SKIP


@dataclass
class TestClass:
    """A TestNG class holding test methods."""
    name: str
    methods: list[TestMethod] = field(default_factory=list)


@dataclass
class Suite:
    """A TestNG suite. Counts are taken as reported, never recomputed."""
    name: str
    duration_ms: str = ""
    tests: int = 0
    failures: int = 0
    skipped: int = 0
    classes: list[TestClass] = field(default_factory=list)

    def iter_methods(self):
        for test_class in self.classes:
            for method in test_class.methods:
                yield test_class, method


@dataclass
class TestNGReport:
    """Root of a parsed testng-results document."""
    suites: list[Suite] = field(default_factory=list)


@dataclass
class Failure:
    """Failure detail attached to a JUnit test case."""
    message: str = ""
    type: str = "Failure"
    stack_trace: str = ""


@dataclass
class Skipped:
    """Empty marker for a skipped JUnit test case."""


@dataclass
class JUnitCase:
    """A JUnit test case. No failure and no skipped marker means it passed."""
    name: str
    classname: str
    time: str = ""
    failure: Optional[Failure] = None
    skipped: Optional[Skipped] = None


@dataclass
class JUnitSuite:
    """A JUnit test suite."""
    name: str
    tests: int = 0
    failures: int = 0
    skipped: int = 0
    time: str = "0.000"
    cases: list[JUnitCase] = field(default_factory=list)


@dataclass
class JUnitReport:
    """Root of a testsuites document."""
    suites: list[JUnitSuite] = field(default_factory=list)
