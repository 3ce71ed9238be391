"""Data models for myshell."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionRequest:
    """Arguments and background flag for one external program launch."""

    argv: tuple[str, ...]
    background: bool = False

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass
class ExecutionResult:
    """Outcome of running one command."""

    exit_code: int | None = 0
    pid: int | None = None
    background: bool = False
    attempts: int = 0
