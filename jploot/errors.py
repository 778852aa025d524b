"""Error types raised by the packaging pipeline."""


class JplootError(RuntimeError):
    """Base class for every packaging failure."""


class ConfigurationError(JplootError):
    """Raised when a required parameter is missing or invalid."""


class ToolFailure(JplootError):
    """Raised when an external command exits with a non-zero status.

    :ivar command: The command that was run.
    :ivar exit_code: Its exit status.
    """

    def __init__(self, message: str, *, command: list[str], exit_code: int) -> None:
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.exit_code: int = exit_code


class ValidationFailure(JplootError):
    """Raised when a tool reported success but its output is unusable."""


class IOFailure(JplootError):
    """Raised when a filesystem operation fails."""
