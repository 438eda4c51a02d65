"""Command definitions for the text protocol.

GlazeWM takes plain-text commands over the socket, one per frame:

    query monitors
    query workspaces
    query windows
    query focused
    command <args>
    command --id <subject> <args>

Commands carry no correlation id; the response is matched by turn order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandType(str, Enum):
    """All supported command prefixes."""

    QUERY_MONITORS = "query monitors"
    QUERY_WORKSPACES = "query workspaces"
    QUERY_WINDOWS = "query windows"
    QUERY_FOCUSED = "query focused"
    COMMAND = "command"


@dataclass(frozen=True)
class Command:
    """A command from client to window manager.

    Example:
        Command.run("focus --workspace 1").to_text()
        # -> "command focus --workspace 1"

        Command.run("close", subject="w1").to_text()
        # -> "command --id w1 close"
    """

    type: CommandType
    args: str | None = None
    subject: str | None = None

    def to_text(self) -> str:
        """Render the wire text for this command."""
        if self.type != CommandType.COMMAND:
            return self.type.value
        if self.subject:
            return f"{self.type.value} --id {self.subject} {self.args}"
        return f"{self.type.value} {self.args}"

    def __str__(self) -> str:
        return self.to_text()

    # Convenience factories
    @classmethod
    def query_monitors(cls) -> Command:
        return cls(CommandType.QUERY_MONITORS)

    @classmethod
    def query_workspaces(cls) -> Command:
        return cls(CommandType.QUERY_WORKSPACES)

    @classmethod
    def query_windows(cls) -> Command:
        return cls(CommandType.QUERY_WINDOWS)

    @classmethod
    def query_focused(cls) -> Command:
        return cls(CommandType.QUERY_FOCUSED)

    @classmethod
    def run(cls, args: str, subject: str | None = None) -> Command:
        """Create a WM command, optionally targeted at a container id."""
        args = args.strip()
        if not args:
            raise ValueError("Command arguments must not be empty")
        return cls(CommandType.COMMAND, args=args, subject=subject or None)
