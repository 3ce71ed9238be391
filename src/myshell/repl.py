"""Read-eval loop around the command runner."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import TextIO

from rich.console import Console

from myshell.config import AppConfig
from myshell.core.dispatcher import CommandDispatcher
from myshell.core.runner import CommandRunner
from myshell.errors import ShellError
from myshell.services.reaper import ProcessReaper
from myshell.storage.history import HistoryLog

logger = logging.getLogger(__name__)


class Repl:
    """Prompt, read a line, run it, repeat until end of input."""

    def __init__(
        self,
        config: AppConfig,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        error_console: Console | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.error_console = error_console or Console(stderr=True)
        self.history = HistoryLog(config.history_path)
        self.reaper = ProcessReaper(interval=config.shell.reap_interval)
        dispatcher = CommandDispatcher(
            config.shell,
            self.history,
            env=env,
            stdout=stdout,
            reaper=self.reaper,
        )
        self.runner = CommandRunner(dispatcher, reaper=self.reaper)

    def run_once(self, line: str) -> bool:
        """Run one line. Returns ``True`` if it executed without error."""
        if not line.strip():
            return False
        try:
            self.runner.run_line(line)
        except ShellError as e:
            logger.info("Line failed: %r (%s)", line, e)
            self.error_console.print(f"Error: {e}", style="red", markup=False, highlight=False)
            return False
        self.history.append(line)
        return True

    def run(self) -> None:
        self.reaper.start()
        try:
            while True:
                self.stdout.write(self.config.shell.prompt)
                self.stdout.flush()
                line = self.stdin.readline()
                if not line:
                    break
                self.run_once(line.rstrip("\n"))
        finally:
            self.reaper.stop()
            pending = self.reaper.active
            if pending:
                logger.warning("Leaving with background processes still running: %s", pending)
