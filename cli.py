#!/usr/bin/env python3
"""CLI for the TestNG to JUnit report converter."""

import argparse
import json
import logging
import sys

import core
from testng_junit.config import LogLevel, load_config
from testng_junit.errors import ReportError



def setup_logging(level: LogLevel = LogLevel.INFO, verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.logging_level,
        format='%(levelname)s: %(message)s'
    )


def build_config(args):
    """Load settings from .env/YAML/environment and apply command-line overrides."""
    config = load_config(config_file=args.config)
    return config.with_overrides(
        report_filename_pattern=args.pattern,
        failed_fails=args.failed_fails,
        failed_skips=args.failed_skips,
        failure_on_failed_test_config=args.failure_on_failed_test_config,
        unstable_fails=args.unstable_fails,
        unstable_skips=args.unstable_skips,
        threshold_mode=args.threshold_mode,
        fail_if_no_results=args.fail_if_no_results,
        log_level=args.log_level,
        skip_converted=args.skip_converted,
    )


def _run(args, dry_run: bool):
    try:
        config = build_config(args)
        setup_logging(config.log_level, args.verbose)
        result = core.run(config, dry_run=dry_run)
    except ReportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_summary(result)

    if result.unstable:
        return args.unstable_exit_code
    return 0


def _print_summary(result: core.RunResult):
    """Print human-readable summary."""
    verb = "Checked" if result.dry_run else "Converted"
    if not result.files:
        print("No report files found")
        return

    for f in result.files:
        if f.status == core.STATUS_SKIPPED:
            print(f"  - {f.path}: skipped (already JUnit)")
        else:
            print(f"  - {f.path}: {f.tests} tests, {f.failures} failed, {f.skipped} skipped")

    print(f"{verb} {len(result.files)} file(s)")
    if result.unstable:
        print(f"UNSTABLE: {len(result.warnings)} unstable threshold(s) exceeded")
        for w in result.warnings:
            print(f"  - [{w.suite}] {w.message}")


def cmd_convert(args):
    """Convert TestNG reports in place."""
    return _run(args, dry_run=False)


def cmd_check(args):
    """Evaluate thresholds without rewriting any file."""
    return _run(args, dry_run=True)


def _add_run_arguments(p):
    p.add_argument('--pattern', '-p', help='Glob for TestNG report files (PLUGIN_REPORT_FILENAME_PATTERN)')
    p.add_argument('--config', '-c', help='YAML settings file')
    p.add_argument('--failed-fails', type=int, help='Failed tests allowed before the build fails (0 = no limit)')
    p.add_argument('--failed-skips', type=int, help='Skipped tests allowed before the build fails (0 = no limit)')
    p.add_argument('--unstable-fails', type=int, help='Failed tests allowed before the build is unstable (0 = no limit)')
    p.add_argument('--unstable-skips', type=int, help='Skipped tests allowed before the build is unstable (0 = no limit)')
    p.add_argument('--threshold-mode', type=int, choices=[1, 2],
                   help='1 = absolute counts, 2 = percentage of tests')
    p.add_argument('--failure-on-failed-test-config', action='store_true', default=None,
                   help='Fail when a configuration method failed')
    p.add_argument('--fail-if-no-results', action='store_true', default=None,
                   help='Fail when no report files match the pattern')
    p.add_argument('--skip-converted', action='store_true', default=None,
                   help='Skip files that are already JUnit XML instead of failing')
    p.add_argument('--log-level', choices=[level.value for level in LogLevel] + ['warning'])
    p.add_argument('--unstable-exit-code', type=int, default=0,
                   help='Exit code when the build is unstable (default: 0)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')


def main(argv=None):
    parser = argparse.ArgumentParser(description='Convert TestNG XML reports to JUnit XML')
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('convert', help='Check thresholds and rewrite reports as JUnit XML')
    _add_run_arguments(p)

    p = sub.add_parser('check', help='Check thresholds without rewriting reports')
    _add_run_arguments(p)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cmds = {
        'convert': cmd_convert,
        'check': cmd_check,
    }
    return cmds[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
