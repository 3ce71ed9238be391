"""Sequential command execution."""

from __future__ import annotations

import logging

from myshell.core.commands import Command
from myshell.core.dispatcher import CommandDispatcher
from myshell.services.reaper import ProcessReaper
from myshell.storage.models import ExecutionResult

logger = logging.getLogger(__name__)


class CommandRunner:
    """Run commands one at a time, each to completion."""

    def __init__(self, dispatcher: CommandDispatcher, reaper: ProcessReaper | None = None) -> None:
        self.dispatcher = dispatcher
        self.reaper = reaper

    def execute(self, command: Command) -> ExecutionResult:
        if self.reaper is not None:
            self.reaper.reap()
        logger.debug("Executing %s", type(command).__name__)
        result = command.execute()
        logger.debug("Finished %s: %s", type(command).__name__, result)
        return result

    def run_line(self, line: str) -> ExecutionResult:
        """Dispatch a raw line and execute the resulting command."""
        return self.execute(self.dispatcher.dispatch(line))
