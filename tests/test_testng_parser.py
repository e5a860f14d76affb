"""Tests for TestNG XML parser."""

import pytest

from testng_junit.errors import AlreadyConvertedError, ReportParseError
from testng_junit.testng_parser import TestNGParser

from samples import JUNIT_DOCUMENT, SAMPLE_TESTNG


@pytest.fixture
def parser():
    return TestNGParser()


class TestSuiteParsing:

    def test_suite_attributes(self, parser):
        suite = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0]
        assert suite.name == "Regression"
        assert suite.duration_ms == "1500"
        assert suite.tests == 4
        assert suite.failures == 1
        assert suite.skipped == 1

    def test_counts_are_taken_as_reported(self, parser):
        xml = b"""<testng-results>
          <suite name="s" tests="10" failures="7" skipped="0">
            <class name="A"><test-method name="t" status="PASS"/></class>
          </suite>
        </testng-results>"""
        suite = parser.parse_bytes(xml).suites[0]
        assert suite.tests == 10
        assert suite.failures == 7

    def test_missing_attributes_default_to_zero(self, parser):
        suite = parser.parse_bytes(b'<testng-results><suite name="s"/></testng-results>').suites[0]
        assert suite.tests == 0
        assert suite.failures == 0
        assert suite.skipped == 0
        assert suite.duration_ms == ""
        assert suite.classes == []

    def test_empty_report(self, parser):
        assert parser.parse_bytes(b"<testng-results/>").suites == []

    def test_classes_in_document_order(self, parser):
        suite = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0]
        assert [c.name for c in suite.classes] == ["com.example.LoginTest", "com.example.CartTest"]

    def test_classes_nested_under_test_blocks(self, parser):
        xml = b"""<testng-results>
          <suite name="s" tests="2">
            <class name="Direct"><test-method name="a" status="PASS"/></class>
            <test name="block">
              <class name="Nested"><test-method name="b" status="SKIP"/></class>
            </test>
          </suite>
        </testng-results>"""
        suite = parser.parse_bytes(xml).suites[0]
        assert [c.name for c in suite.classes] == ["Direct", "Nested"]
        assert suite.classes[1].methods[0].name == "b"


class TestMethodParsing:

    def test_method_fields(self, parser):
        login = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0].classes[0]
        method = login.methods[1]
        assert method.name == "testValidLogin"
        assert method.class_name == "com.example.LoginTest"
        assert method.status == "PASS"
        assert method.duration_ms == "120"
        assert method.is_config is False

    def test_config_flag(self, parser):
        login = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0].classes[0]
        assert login.methods[0].is_config is True

    def test_exception_details(self, parser):
        method = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0].classes[0].methods[2]
        assert method.exception_message == "boom"
        assert method.stack_trace == "trace..."

    def test_no_exception(self, parser):
        method = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0].classes[0].methods[1]
        assert method.exception_message is None
        assert method.stack_trace is None

    def test_params(self, parser):
        method = parser.parse_bytes(SAMPLE_TESTNG.encode()).suites[0].classes[0].methods[1]
        assert len(method.params) == 1
        assert method.params[0].name == "user"
        assert method.params[0].value == "alice"


class TestParseErrors:

    def test_malformed_xml(self, parser):
        with pytest.raises(ReportParseError) as exc:
            parser.parse_bytes(b"<testng-results><suite>", source="broken.xml")
        assert "broken.xml" in str(exc.value)

    def test_non_integer_count(self, parser):
        with pytest.raises(ReportParseError, match="tests"):
            parser.parse_bytes(b'<testng-results><suite name="s" tests="many"/></testng-results>')

    def test_invalid_config_flag(self, parser):
        xml = b"""<testng-results><suite name="s"><class name="A">
            <test-method name="t" is-config="maybe"/>
        </class></suite></testng-results>"""
        with pytest.raises(ReportParseError, match="is-config"):
            parser.parse_bytes(xml)

    def test_unexpected_root(self, parser):
        with pytest.raises(ReportParseError, match="testng-results"):
            parser.parse_bytes(b"<results/>")

    def test_junit_root_is_already_converted(self, parser):
        with pytest.raises(AlreadyConvertedError):
            parser.parse_bytes(JUNIT_DOCUMENT.encode())

    def test_missing_file(self, parser, tmp_path):
        with pytest.raises(ReportParseError) as exc:
            parser.parse_file(tmp_path / "missing.xml")
        assert "missing.xml" in str(exc.value)

    def test_parse_file(self, parser, report_dir):
        report = parser.parse_file(report_dir / "testng-results.xml")
        assert len(report.suites) == 1
