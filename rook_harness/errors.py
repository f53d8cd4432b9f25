"""
Exceptions raised by the Rook test harness.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .model import OperationResult
    from .objects import CommandResult


class HarnessError(Exception):
    """Base class for all harness errors."""


class UnsupportedPlatformError(HarnessError, ValueError):
    """The requested platform is outside the supported set."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Unsupported Rook Platform Type: {platform}")


class NotYetImplementedError(HarnessError, NotImplementedError):
    """The operation has no implementation for the selected platform."""

    def __init__(self, operation: str, platform: Optional[str] = None):
        self.operation = operation
        self.platform = platform
        where = f" on {platform}" if platform else ""
        super().__init__(f"{operation} is not yet implemented{where}")


class ResourceNotReadyError(HarnessError, TimeoutError):
    """A bounded poll gave up before the resource reached the expected state."""

    def __init__(self, kind: str, name: str, state: str, timeout: float):
        self.kind = kind
        self.name = name
        self.state = state
        self.timeout = timeout
        super().__init__(f"{kind} {name} did not reach state {state} within {timeout}s")


class RemoteCommandError(HarnessError):
    """A command run through a transport client failed."""

    def __init__(self, message: str, result: "CommandResult"):
        self.result = result
        detail = result.stderr.strip() or result.error or result.stdout.strip()
        super().__init__(f"{message} (exit code {result.exit_code}): {detail}")


class RestApiError(HarnessError):
    """The Rook management API answered with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        result: Optional["OperationResult"] = None,
    ):
        self.status_code = status_code
        self.result = result
        super().__init__(message)


class DuplicateResourceError(RestApiError):
    """A resource with the same identity already exists in scope."""
