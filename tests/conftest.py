"""Shared fixtures for converter tests."""

import pytest

from testng_junit.config import PluginConfig

from samples import SAMPLE_TESTNG


@pytest.fixture
def config():
    return PluginConfig(report_filename_pattern="*.xml", threshold_mode=1)


@pytest.fixture
def report_dir(tmp_path):
    """Directory holding one TestNG report."""
    (tmp_path / "testng-results.xml").write_text(SAMPLE_TESTNG)
    return tmp_path
