"""Errors raised while converting TestNG reports. Every one of them ends the run."""


class ReportError(Exception):
    """Base class for all conversion run failures."""


class ConfigError(ReportError):
    """Invalid or missing plugin settings."""


class DiscoveryError(ReportError):
    """No report files could be located."""


class ReportParseError(ReportError):
    """A source report could not be decoded."""

    def __init__(self, path, cause):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"failed to parse TestNG XML {self.path}: {cause}")


class AlreadyConvertedError(ReportParseError):
    """The source file is already in JUnit shape."""


class ValidationError(ReportError):
    """A failure threshold was exceeded or a configuration method failed."""


class ReportWriteError(ReportError):
    """The converted report could not be serialized or written."""
