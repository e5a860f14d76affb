#!/usr/bin/env python3
"""
MCP Server for testng-junit.
Provides tools for checking TestNG reports against thresholds and converting them to JUnit XML.
"""

import os
import logging
import json
import asyncio
from fastmcp import FastMCP

# Local imports
import core
from testng_junit.config import PluginConfig
from testng_junit.errors import ReportError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastMCP server
mcp = FastMCP("testng-junit")


def _make_config(pattern, threshold_mode, failed_fails, failed_skips, unstable_fails,
                 unstable_skips, failure_on_failed_test_config, fail_if_no_results,
                 skip_converted) -> PluginConfig:
    return PluginConfig(
        report_filename_pattern=pattern,
        threshold_mode=threshold_mode,
        failed_fails=failed_fails,
        failed_skips=failed_skips,
        unstable_fails=unstable_fails,
        unstable_skips=unstable_skips,
        failure_on_failed_test_config=failure_on_failed_test_config,
        fail_if_no_results=fail_if_no_results,
        skip_converted=skip_converted,
    )


def _run_tool(name: str, config: PluginConfig, dry_run: bool) -> str:
    try:
        result = core.run(config, dry_run=dry_run)
        return json.dumps(result.to_dict(), indent=2)
    except ReportError as e:
        logger.error(f"{name} failed: {e}")
        return json.dumps({"error": str(e), "error_type": type(e).__name__})
    except Exception as e:
        logger.error(f"Error in {name}: {str(e)}", exc_info=True)
        return json.dumps({"error": str(e), "error_type": type(e).__name__})


@mcp.tool(
    name="convert_reports",
    description="""Check TestNG XML reports against thresholds and rewrite them in place as JUnit XML.
        Processing stops at the first file that fails.
        Args:
            pattern: Glob for report files, '**' matches nested directories (e.g. "target/**/testng-results.xml")
            threshold_mode: 1 = absolute counts, 2 = percentage of tests in each suite
            failed_fails: Failed tests (or percent) allowed before failing, 0 disables (default: 0)
            failed_skips: Skipped tests (or percent) allowed before failing, 0 disables (default: 0)
            unstable_fails: Failed tests allowed before the result is marked unstable, 0 disables (default: 0)
            unstable_skips: Skipped tests allowed before the result is marked unstable, 0 disables (default: 0)
            failure_on_failed_test_config: Fail when a configuration method failed (default: false)
            fail_if_no_results: Fail when nothing matches the pattern (default: false)
            skip_converted: Skip files that are already JUnit XML instead of failing (default: false)
    """
)
async def convert_reports(
    pattern: str,
    threshold_mode: int,
    failed_fails: int = 0,
    failed_skips: int = 0,
    unstable_fails: int = 0,
    unstable_skips: int = 0,
    failure_on_failed_test_config: bool = False,
    fail_if_no_results: bool = False,
    skip_converted: bool = False
) -> str:
    config = _make_config(pattern, threshold_mode, failed_fails, failed_skips, unstable_fails,
                          unstable_skips, failure_on_failed_test_config, fail_if_no_results,
                          skip_converted)
    return _run_tool("convert_reports", config, dry_run=False)


@mcp.tool(
    name="check_reports",
    description="""Check TestNG XML reports against thresholds without modifying them.
        Takes the same arguments as convert_reports and returns the same summary,
        including the unstable flag and per-suite unstable warnings.
    """
)
async def check_reports(
    pattern: str,
    threshold_mode: int,
    failed_fails: int = 0,
    failed_skips: int = 0,
    unstable_fails: int = 0,
    unstable_skips: int = 0,
    failure_on_failed_test_config: bool = False,
    fail_if_no_results: bool = False,
    skip_converted: bool = False
) -> str:
    config = _make_config(pattern, threshold_mode, failed_fails, failed_skips, unstable_fails,
                          unstable_skips, failure_on_failed_test_config, fail_if_no_results,
                          skip_converted)
    return _run_tool("check_reports", config, dry_run=True)


async def main():
    port = int(os.getenv("FASTMCP_PORT", "8978"))
    logger.info(f"Starting testng-junit MCP server on port {port}")
    await mcp.run_async(transport="sse", host="0.0.0.0", port=port)


if __name__ == "__main__":
    asyncio.run(main())
