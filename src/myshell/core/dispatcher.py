"""Turn an input line into a command variant."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TextIO

from myshell.config import ShellConfig
from myshell.core.commands import Command, EchoCommand, ExitCommand, ExternalCommand, HistoryCommand
from myshell.core.tokenizer import tokenize
from myshell.errors import EmptyInput
from myshell.services.reaper import ProcessReaper
from myshell.storage.history import HistoryLog
from myshell.storage.models import ExecutionRequest

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Select a command variant from the first token of a line.

    Construction only; nothing is read, written or spawned here.
    """

    def __init__(
        self,
        config: ShellConfig,
        history: HistoryLog,
        env: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
        reaper: ProcessReaper | None = None,
    ) -> None:
        self.config = config
        self.history = history
        self.env = env
        self.stdout = stdout
        self.reaper = reaper

    def dispatch(self, line: str) -> Command:
        parsed = tokenize(line, self.config.background_marker)
        if not parsed.tokens:
            raise EmptyInput()

        name = parsed.tokens[0]
        if name == self.config.exit_keyword:
            return ExitCommand(stdout=self.stdout)
        if name == self.config.history_keyword:
            return HistoryCommand(self.history, stdout=self.stdout)
        if name == self.config.echo_keyword:
            return EchoCommand(parsed.tokens, env=self.env, stdout=self.stdout)

        logger.debug("External command %s (background=%s)", parsed.tokens, parsed.background)
        return ExternalCommand(
            ExecutionRequest(argv=tuple(parsed.tokens), background=parsed.background),
            interpreter=self.config.interpreter,
            max_fallback_depth=self.config.max_fallback_depth,
            env=self.env,
            stdout=self.stdout,
            reaper=self.reaper,
        )
