"""Exception types raised while turning an input line into a running command."""

from __future__ import annotations


class ShellError(Exception):
    """Base exception for myshell."""


class EmptyInput(ShellError):
    """Raised when a line holds no tokens to dispatch."""

    def __init__(self) -> None:
        super().__init__("Empty input")


class ProcessCreationFailed(ShellError):
    """Raised when the operating system refuses to create a child process."""

    def __init__(self, argv: tuple[str, ...] | list[str], reason: str = "") -> None:
        self.argv = tuple(argv)
        self.reason = reason
        message = "Failed to create child process"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CommandNotFound(ShellError):
    """Raised when the fallback chain runs out of reinterpretation attempts."""

    def __init__(self, name: str, attempts: int) -> None:
        self.name = name
        self.attempts = attempts
        super().__init__(f"Command not found: {name}")


class CommandAlreadyExecuted(ShellError):
    """Raised when a command object is executed a second time."""
