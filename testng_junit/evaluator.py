"""Threshold evaluation for TestNG suites.

Failed-build thresholds raise ValidationError. Unstable thresholds never do:
they are logged as warnings and handed back to the caller as values.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import PluginConfig, ThresholdMode
from .errors import ConfigError, ValidationError
from .models import Suite, TestNGReport

logger = logging.getLogger(__name__)


@dataclass
class UnstableWarning:
    """An unstable threshold crossed by one suite."""
    suite: str
    kind: str
    threshold: int
    actual: int

    @property
    def message(self) -> str:
        return (
            f"Number of {self.kind} tests exceeded unstable threshold: "
            f"provided threshold={self.threshold}, actual {self.kind}={self.actual}; "
            f"marking build as UNSTABLE"
        )

    def to_dict(self) -> dict:
        return {
            "suite": self.suite,
            "kind": self.kind,
            "threshold": self.threshold,
            "actual": self.actual,
            "message": self.message,
        }


def evaluate_report(report: TestNGReport, config: PluginConfig,
                    log: Optional[logging.Logger] = None) -> list[UnstableWarning]:
    """Evaluate every suite in document order, stopping at the first failure."""
    _check_mode(config)
    warnings = []
    for suite in report.suites:
        warnings.extend(evaluate_suite(suite, config, log=log))
    return warnings


def evaluate_suite(suite: Suite, config: PluginConfig,
                   log: Optional[logging.Logger] = None) -> list[UnstableWarning]:
    """Check one suite against the thresholds.

    Raises:
        ConfigError: threshold_mode is neither absolute nor percentage
        ValidationError: a failed-build threshold is exceeded, or a configuration
            method failed while failure_on_failed_test_config is set
    """
    mode = _check_mode(config)
    if mode == ThresholdMode.ABSOLUTE:
        check_absolute_thresholds(suite, config)
    else:
        check_percentage_thresholds(suite, config)

    warnings = check_unstable_thresholds(suite, config, log=log)
    check_config_failures(suite, config)
    return warnings


def check_absolute_thresholds(suite: Suite, config: PluginConfig) -> None:
    if config.failed_fails > 0 and suite.failures > config.failed_fails:
        raise ValidationError(
            "number of failed tests exceeded the failure threshold: "
            f"provided threshold={config.failed_fails}, actual failed={suite.failures}"
        )
    if config.failed_skips > 0 and suite.skipped > config.failed_skips:
        raise ValidationError(
            "number of skipped tests exceeded the failure threshold: "
            f"provided threshold={config.failed_skips}, actual skipped={suite.skipped}"
        )


def check_percentage_thresholds(suite: Suite, config: PluginConfig) -> None:
    if suite.tests == 0:
        return

    failure_rate = failure_rate_of(suite)
    skip_rate = skip_rate_of(suite)

    if config.failed_fails > 0 and failure_rate > config.failed_fails:
        raise ValidationError(
            "failure rate exceeded the failure threshold: "
            f"provided threshold={config.failed_fails}%, actual failure rate={failure_rate:.2f}%"
        )
    if config.failed_skips > 0 and skip_rate > config.failed_skips:
        raise ValidationError(
            "skip rate exceeded the failure threshold: "
            f"provided threshold={config.failed_skips}%, actual skip rate={skip_rate:.2f}%"
        )


def check_unstable_thresholds(suite: Suite, config: PluginConfig,
                              log: Optional[logging.Logger] = None) -> list[UnstableWarning]:
    """Always count based, whatever the threshold mode."""
    log = log or logger
    warnings = []
    if config.unstable_fails > 0 and suite.failures > config.unstable_fails:
        warnings.append(UnstableWarning(suite.name, "failed", config.unstable_fails, suite.failures))
    if config.unstable_skips > 0 and suite.skipped > config.unstable_skips:
        warnings.append(UnstableWarning(suite.name, "skipped", config.unstable_skips, suite.skipped))
    for warning in warnings:
        log.warning(warning.message)
    return warnings


def check_config_failures(suite: Suite, config: PluginConfig) -> None:
    if not config.failure_on_failed_test_config:
        return
    for test_class, method in suite.iter_methods():
        if method.is_config and method.failed:
            raise ValidationError(
                f"a configuration method failed: class={test_class.name}, method={method.name}"
            )


def failure_rate_of(suite: Suite) -> float:
    return suite.failures / suite.tests * 100


def skip_rate_of(suite: Suite) -> float:
    return suite.skipped / suite.tests * 100


def _check_mode(config: PluginConfig) -> ThresholdMode:
    try:
        return ThresholdMode(config.threshold_mode)
    except ValueError:
        raise ConfigError(
            "invalid thresholdMode: must be 1 (absolute) or 2 (percentage)"
        ) from None
