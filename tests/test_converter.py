"""Tests for TestNG to JUnit conversion."""

import pytest

from testng_junit import models
from testng_junit.converter import convert_report, format_seconds
from testng_junit.testng_parser import TestNGParser

from samples import SAMPLE_TESTNG


@pytest.fixture
def junit():
    return convert_report(TestNGParser().parse_bytes(SAMPLE_TESTNG.encode()))


class TestSuiteConversion:

    def test_counts_copied(self, junit):
        suite = junit.suites[0]
        assert suite.name == "Regression"
        assert suite.tests == 4
        assert suite.failures == 1
        assert suite.skipped == 1

    def test_duration_in_seconds(self, junit):
        assert junit.suites[0].time == "1.500"

    def test_cases_flattened_in_document_order(self, junit):
        cases = junit.suites[0].cases
        assert [(c.classname, c.name) for c in cases] == [
            ("com.example.LoginTest", "setUp"),
            ("com.example.LoginTest", "testValidLogin"),
            ("com.example.LoginTest", "testInvalidLogin"),
            ("com.example.CartTest", "testCheckout"),
            ("com.example.CartTest", "testAddItem"),
        ]

    def test_empty_report(self):
        assert convert_report(models.TestNGReport()).suites == []


class TestFormatSeconds:

    @pytest.mark.parametrize("millis,expected", [
        ("1500", "1.500"),
        ("0", "0.000"),
        ("1", "0.001"),
        ("123456", "123.456"),
        ("999", "0.999"),
        ("+1500", "1.500"),
        (".5e3", "0.500"),
        ("1.5e3", "1.500"),
    ])
    def test_conversion(self, millis, expected):
        assert format_seconds(millis) == expected

    @pytest.mark.parametrize("millis", ["", "abc", "12ms", "nan", "inf", " 1500 ", "1_500", "0x10", "1e999"])
    def test_unparsable_is_zero(self, millis):
        assert format_seconds(millis) == "0.000"


class TestCaseConversion:

    def test_failed_case(self, junit):
        case = junit.suites[0].cases[2]
        assert case.failure is not None
        assert case.failure.message == "boom"
        assert case.failure.type == "Failure"
        assert case.failure.stack_trace == "trace..."
        assert case.skipped is None

    def test_failed_case_without_exception(self):
        suite = models.Suite(name="s", classes=[
            models.TestClass(name="A", methods=[models.TestMethod(name="t", status="FAIL")]),
        ])
        case = convert_report(models.TestNGReport(suites=[suite])).suites[0].cases[0]
        assert case.failure.message == ""
        assert case.failure.stack_trace == ""

    def test_skipped_case(self, junit):
        case = junit.suites[0].cases[3]
        assert case.skipped is not None
        assert case.failure is None

    def test_passed_case(self, junit):
        case = junit.suites[0].cases[4]
        assert case.failure is None
        assert case.skipped is None

    def test_unknown_status_is_pass(self):
        suite = models.Suite(name="s", classes=[
            models.TestClass(name="A", methods=[models.TestMethod(name="t", status="SUCCESS_PERCENTAGE_FAILURE")]),
        ])
        case = convert_report(models.TestNGReport(suites=[suite])).suites[0].cases[0]
        assert case.failure is None
        assert case.skipped is None

    def test_case_time_unchanged(self, junit):
        assert junit.suites[0].cases[1].time == "120"

    def test_config_methods_kept(self, junit):
        assert junit.suites[0].cases[0].name == "setUp"

    def test_classname_from_owning_class(self):
        method = models.TestMethod(name="t", class_name="other.Name", status="PASS")
        suite = models.Suite(name="s", classes=[models.TestClass(name="owner.Class", methods=[method])])
        case = convert_report(models.TestNGReport(suites=[suite])).suites[0].cases[0]
        assert case.classname == "owner.Class"
