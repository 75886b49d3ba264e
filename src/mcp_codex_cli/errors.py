"""Application-level exception types for mcp-codex-cli."""

from __future__ import annotations


class CodexCliError(Exception):
    """Base exception for mcp-codex-cli."""


class CommandError(CodexCliError):
    """Base exception for a failed external command invocation."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command


class CommandSpawnError(CommandError):
    """Raised when the external command could not be started."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(command, f"Failed to start {command}: {reason}")
        self.reason = reason


class CommandExitError(CommandError):
    """Raised when the external command exits with a non-zero code."""

    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        super().__init__(command, f"Command {command} exited with code {returncode}: {stderr}")
        self.returncode = returncode
        self.stderr = stderr


class CommandTimeoutError(CommandError):
    """Raised when the external command outlives its timeout and gets killed."""

    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(command, f"Command {command} timed out after {timeout:g} seconds")
        self.timeout = timeout


class ToolError(CodexCliError):
    """Base exception for tool dispatch errors."""


class UnknownToolError(ToolError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidToolArgumentsError(ToolError):
    """Raised when tool arguments fail validation."""
