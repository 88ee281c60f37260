"""Exceptions raised by the benchmark harness."""


class BenchmarkError(Exception):
    """Base class for harness errors."""


class SetupError(BenchmarkError):
    """One-time suite setup failed; the whole run is aborted."""

    def __init__(self, suite: str, params: dict, cause: Exception):
        self.suite = suite
        self.params = params
        self.cause = cause
        super().__init__(f"setup of {suite} {params} failed: {cause}")


class ConfigurationError(BenchmarkError):
    """Unknown suite or malformed parameter override."""
