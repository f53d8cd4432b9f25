"""
Value objects describing a command invocation and its captured output.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import RemoteCommandError


@dataclass(frozen=True)
class CommandArgs:
    """Arguments for a single command invocation."""

    command: str
    sub_command: str = ""
    cmd_args: List[str] = field(default_factory=list)
    optional_args: List[str] = field(default_factory=list)
    pipe_to_stdin: Optional[str] = None
    environment: List[str] = field(default_factory=list)

    def as_command(self) -> List[str]:
        """Return the argv list for this invocation."""
        argv = [self.command]
        if self.sub_command:
            argv.append(self.sub_command)
        argv.extend(self.cmd_args)
        argv.extend(self.optional_args)
        return argv


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and self.error is None

    def check(self, message: str = "Command failed") -> "CommandResult":
        """
        Raise if the command did not succeed.

        Args:
            message: Prefix for the error message

        Returns:
            This result, for chaining

        Raises:
            RemoteCommandError: If the exit code is non-zero or an error was captured
        """
        if not self.ok:
            raise RemoteCommandError(message, self)
        return self
