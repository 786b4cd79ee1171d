"""
Error classes for sparkserve.

The hierarchy mirrors where each error is handled:
- ConfigError: Fatal at startup (preset directory, launcher binary, settings)
- PresetNotFoundError: Recoverable lookup failure, mapped to 404 by the HTTP layer
- ExecutionError: Launcher failures, recovered locally by the submitter

Anything that is not a SparkServeError is unexpected and is reported to
HTTP callers as an opaque "unexpected error".
"""

from typing import Optional, Sequence


class SparkServeError(Exception):
    """Base exception for sparkserve."""
    pass


class ConfigError(SparkServeError):
    """Configuration error - aborts process start."""
    pass


class ConfigDirMissing(ConfigError):
    """The preset directory does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f'directory for spark configuration presets not found ("{path}")')


class ConfigDirUnreadable(ConfigError):
    """The preset directory exists but cannot be enumerated."""

    def __init__(self, path, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        message = f'error reading preset directory ("{path}")'
        if cause is not None:
            message = f"{message}, {cause}"
        super().__init__(message)


class NoPresetsFound(ConfigError):
    """The preset directory was scanned but no preset could be registered."""

    def __init__(self, path):
        self.path = path
        super().__init__(
            "no presets found, please add some presets to the spark "
            f'configuration preset directory: "{path}"'
        )


class LauncherNotFound(ConfigError):
    """The spark home directory or the spark-submit binary is missing."""

    def __init__(self, path):
        self.path = path
        super().__init__(f'spark-submit launcher not found ("{path}")')


class PresetNotFoundError(SparkServeError):
    """
    Raised when a submission names a preset that is not registered.

    Kept distinct from generic failures so the HTTP layer can answer 404.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"preset not found: {name}")


class ExecutionError(SparkServeError):
    """Base for failures while running the launcher binary."""
    pass


class LauncherError(ExecutionError):
    """
    The launcher failed to start or exited non-zero.

    Attributes:
        args_list: Arguments the launcher was invoked with
        returncode: Exit status, or None if the process never started
        output: Captured combined output (empty when not captured)
    """

    def __init__(
        self,
        message: str,
        args_list: Sequence[str] = (),
        returncode: Optional[int] = None,
        output: str = "",
    ):
        self.args_list = list(args_list)
        self.returncode = returncode
        self.output = output
        super().__init__(message)


class RetriesExceeded(ExecutionError):
    """All attempts of a retry loop failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"retries exceeded after {attempts} attempts")
