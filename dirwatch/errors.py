"""
Exception classes for dirwatch.

Start-time errors propagate to the caller and abort startup. Runtime errors
reported by the notifier are logged by the processing loop and never stop it.
"""

from typing import Optional


class DirwatchError(Exception):
    """Base class for all dirwatch errors."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class NotifierInitError(DirwatchError):
    """The underlying watch mechanism could not be allocated."""

    pass


class TargetNotFoundError(DirwatchError):
    """The watch target does not exist or is not a directory."""

    pass


class WatchRegistrationError(DirwatchError):
    """The notifier rejected the watch target."""

    pass


class NotifierRuntimeError(DirwatchError):
    """Failure reported asynchronously by the notifier while running."""

    pass


class MonitorStateError(DirwatchError):
    """A lifecycle method was called in a state that does not allow it."""

    pass
