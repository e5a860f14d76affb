"""Plugin settings: the immutable run configuration and how it is loaded.

Values are merged from a .env file, an optional YAML file and the PLUGIN_*
environment variables, each overriding the previous one. This is the only
module that looks at the process environment; everything downstream receives
a PluginConfig.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from enum import Enum, IntEnum
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "TESTNG_JUNIT_CONFIG"
ENV_PREFIX = "PLUGIN_"


class ThresholdMode(IntEnum):
    """Basis for the failed-build thresholds."""
    ABSOLUTE = 1
    PERCENTAGE = 2


class LogLevel(Enum):
    """Log verbosity names accepted from PLUGIN_LOG_LEVEL."""
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    PANIC = "panic"

    @classmethod
    def parse(cls, value: Union[str, "LogLevel"]) -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        name = str(value).strip().lower()
        if name == "warning":
            name = "warn"
        try:
            return cls(name)
        except ValueError:
            raise ConfigError(f"invalid log level: {value!r}") from None

    @property
    def logging_level(self) -> int:
        return {
            LogLevel.TRACE: logging.DEBUG,
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARN: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.FATAL: logging.CRITICAL,
            LogLevel.PANIC: logging.CRITICAL,
        }[self]


@dataclass(frozen=True)
class PluginConfig:
    """Settings for one conversion run. threshold_mode has no usable default."""
    report_filename_pattern: str = ""
    failed_fails: int = 0
    failed_skips: int = 0
    failure_on_failed_test_config: bool = False
    unstable_fails: int = 0
    unstable_skips: int = 0
    threshold_mode: int = 0
    fail_if_no_results: bool = False
    log_level: LogLevel = LogLevel.INFO
    skip_converted: bool = False

    def with_overrides(self, **overrides) -> "PluginConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "log_level" in changes:
            changes["log_level"] = LogLevel.parse(changes["log_level"])
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["log_level"] = self.log_level.value
        return data


# Environment variable -> PluginConfig field
ENV_FIELDS = {
    "PLUGIN_REPORT_FILENAME_PATTERN": "report_filename_pattern",
    "PLUGIN_FAILED_FAILS": "failed_fails",
    "PLUGIN_FAILED_SKIPS": "failed_skips",
    "PLUGIN_FAILURE_ON_FAILED_TEST_CONFIG": "failure_on_failed_test_config",
    "PLUGIN_UNSTABLE_FAILS": "unstable_fails",
    "PLUGIN_UNSTABLE_SKIPS": "unstable_skips",
    "PLUGIN_THRESHOLD_MODE": "threshold_mode",
    "PLUGIN_FAIL_IF_NO_RESULTS": "fail_if_no_results",
    "PLUGIN_LOG_LEVEL": "log_level",
    "PLUGIN_SKIP_CONVERTED": "skip_converted",
}

_INT_FIELDS = {"failed_fails", "failed_skips", "unstable_fails", "unstable_skips", "threshold_mode"}
_BOOL_FIELDS = {"failure_on_failed_test_config", "fail_if_no_results", "skip_converted"}

_TRUE = {"1", "t", "true", "yes", "y", "on"}
_FALSE = {"0", "f", "false", "no", "n", "off"}


def validate_config(config: PluginConfig) -> None:
    """Reject settings the run cannot start with. Raises ConfigError."""
    if not config.report_filename_pattern:
        raise ConfigError("missing required parameter: ReportFilenamePattern")
    if min(config.failed_fails, config.failed_skips,
           config.unstable_fails, config.unstable_skips) < 0:
        raise ConfigError("threshold values must be non-negative")
    if config.threshold_mode not in (ThresholdMode.ABSOLUTE, ThresholdMode.PERCENTAGE):
        raise ConfigError("thresholdMode must be 1 (absolute) or 2 (percentage)")


def load_config(config_file: Optional[Union[str, Path]] = None,
                environ: Optional[Mapping[str, str]] = None,
                env_file: Optional[Union[str, Path]] = None) -> PluginConfig:
    """Build a PluginConfig from .env, YAML and environment, lowest priority first.

    Args:
        config_file: Optional YAML file with PluginConfig field names as keys
        environ: Environment mapping, defaults to os.environ
        env_file: .env file; defaults to $TESTNG_JUNIT_CONFIG, then ./.env

    The result is not validated; call validate_config before using it.
    """
    environ = os.environ if environ is None else environ
    values = {}

    for key, value in _read_env_file(env_file, environ).items():
        if key in ENV_FIELDS and value != "":
            values[ENV_FIELDS[key]] = value

    if config_file:
        values.update(_read_yaml(config_file))

    for key, name in ENV_FIELDS.items():
        value = environ.get(key)
        if value is not None and value != "":
            values[name] = value

    return PluginConfig(**{name: _coerce(name, value) for name, value in values.items()})


def _read_env_file(env_file, environ: Mapping[str, str]) -> dict:
    paths = [env_file] if env_file else [environ.get(CONFIG_PATH_ENV), Path.cwd() / '.env']
    for p in paths:
        if p and Path(p).is_file():
            config = {}
            for line in Path(p).read_text().splitlines():
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    config[key.strip()] = value.strip().strip('"\'')
            logger.debug(f"Loaded settings from {p}")
            return config
    return {}


def _read_yaml(config_file) -> dict:
    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to load config file {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_file} must contain a mapping")

    known = {f.name for f in fields(PluginConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown settings in {config_file}: {', '.join(unknown)}")
    return {k: v for k, v in data.items() if v is not None}


def _coerce(name: str, value):
    if name in _INT_FIELDS:
        if isinstance(value, bool):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if name in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigError(f"{name} must be a boolean, got {value!r}")
    if name == "log_level":
        return LogLevel.parse(value)
    return str(value)
