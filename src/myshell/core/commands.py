"""Command variants produced by the dispatcher.

The set of variants is closed: ``EchoCommand``, ``ExitCommand``,
``HistoryCommand`` and ``ExternalCommand``. Each instance is built for one
input line and may be executed once.
"""

from __future__ import annotations

import abc
import errno
import logging
import os
import subprocess
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, TextIO

from myshell.core.expander import expand_variables
from myshell.errors import CommandAlreadyExecuted, CommandNotFound, ProcessCreationFailed
from myshell.storage.history import HistoryLog
from myshell.storage.models import ExecutionRequest, ExecutionResult

if TYPE_CHECKING:
    from myshell.services.reaper import ProcessReaper

logger = logging.getLogger(__name__)

DEFAULT_INTERPRETER = "/bin/sh"
DEFAULT_FALLBACK_DEPTH = 1
# POSIX shells exit with this status when a command name cannot be resolved
INTERPRETER_NOT_FOUND_STATUS = 127

# errno values meaning the child was created but its image could not be replaced
EXEC_FAILURE_ERRNOS = frozenset({errno.ENOENT, errno.EACCES, errno.ENOEXEC, errno.ENOTDIR, errno.EISDIR})


class Command(abc.ABC):
    """A unit of work bound to a single input line."""

    def __init__(self, stdout: TextIO | None = None) -> None:
        self._stdout = stdout
        self._executed = False

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def execute(self) -> ExecutionResult:
        if self._executed:
            raise CommandAlreadyExecuted(f"{type(self).__name__} has already been executed")
        self._executed = True
        return self._run()

    @abc.abstractmethod
    def _run(self) -> ExecutionResult: ...


class EchoCommand(Command):
    """Print every argument after the command name, expanded, followed by a space."""

    def __init__(
        self,
        args: list[str],
        env: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        super().__init__(stdout)
        self.args = list(args)
        self.env = env

    def _run(self) -> ExecutionResult:
        out = self.stdout
        for arg in self.args[1:]:
            out.write(expand_variables(arg, self.env) + " ")
        out.write("\n")
        out.flush()
        return ExecutionResult(exit_code=0)


class ExitCommand(Command):
    """Terminate the hosting process with status 0.

    Termination is immediate: buffered output is not flushed and nothing
    queued after this command runs.
    """

    def _run(self) -> ExecutionResult:
        logger.info("Exit requested")
        os._exit(0)


class HistoryCommand(Command):
    """List the history log as ``<n>. <line>``, numbering from 1."""

    def __init__(self, history: HistoryLog, stdout: TextIO | None = None) -> None:
        super().__init__(stdout)
        self.history = history

    def _run(self) -> ExecutionResult:
        out = self.stdout
        for count, line in enumerate(self.history.lines(), start=1):
            out.write(f"{count}. {line}\n")
        out.flush()
        return ExecutionResult(exit_code=0)


class ExternalCommand(Command):
    """Spawn an external program in the foreground or background.

    When the program image cannot be loaded the fallback chain runs instead
    of reporting the failure:

    1. If the program name is a set environment variable, its value is
       printed.
    2. Otherwise the name, minus one leading ``$``, is handed to the
       interpreter as ``<interpreter> -c <name>``. This is retried at most
       ``max_fallback_depth`` times before ``CommandNotFound`` is raised.
       A foreground interpreter exiting with status 127 also raises
       ``CommandNotFound``. A background reinterpretation is not waited on,
       so this case goes undetected there.
    """

    def __init__(
        self,
        request: ExecutionRequest,
        interpreter: str = DEFAULT_INTERPRETER,
        max_fallback_depth: int = DEFAULT_FALLBACK_DEPTH,
        env: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
        reaper: ProcessReaper | None = None,
    ) -> None:
        super().__init__(stdout)
        self.request = request
        self.interpreter = interpreter
        self.max_fallback_depth = max_fallback_depth
        self.env = env
        self.reaper = reaper

    @property
    def background(self) -> bool:
        return self.request.background

    def _run(self) -> ExecutionResult:
        request = self.request
        depth = 0
        attempts = 0

        while True:
            attempts += 1
            try:
                process = self._spawn(request)
            except OSError as e:
                if e.errno not in EXEC_FAILURE_ERRNOS:
                    logger.error("Process creation failed for %s: %s", request.argv, e)
                    raise ProcessCreationFailed(request.argv, e.strerror or str(e)) from e

                logger.debug("Exec failed for %s (%s), trying fallback", request.program, e.strerror)
                value = self._lookup(request.program)
                if value is not None:
                    self.stdout.write(value + "\n")
                    self.stdout.flush()
                    return ExecutionResult(exit_code=0, background=request.background, attempts=attempts)

                if depth >= self.max_fallback_depth:
                    logger.warning("Command not found after %d attempt(s): %s", attempts, self.request.program)
                    raise CommandNotFound(self.request.program, attempts) from e

                depth += 1
                request = self._reinterpret(request)
                continue

            return self._finish(process, request, attempts, reinterpreted=depth > 0)

    def _lookup(self, name: str) -> str | None:
        env = os.environ if self.env is None else self.env
        return env.get(name)

    def _reinterpret(self, request: ExecutionRequest) -> ExecutionRequest:
        name = request.program
        if name.startswith("$"):
            name = name[1:]
        return ExecutionRequest(argv=(self.interpreter, "-c", name), background=request.background)

    def _spawn(self, request: ExecutionRequest) -> subprocess.Popen:
        # Keep our buffered output ahead of the child's
        self.stdout.flush()
        sys.stderr.flush()
        env = None if self.env is None else dict(self.env)
        process = subprocess.Popen(list(request.argv), env=env)
        logger.debug("Spawned pid %d: %s", process.pid, request.argv)
        return process

    def _finish(
        self,
        process: subprocess.Popen,
        request: ExecutionRequest,
        attempts: int,
        reinterpreted: bool = False,
    ) -> ExecutionResult:
        if request.background:
            if self.reaper is not None:
                self.reaper.track(process)
            else:
                logger.warning("Background pid %d started without a reaper", process.pid)
            return ExecutionResult(exit_code=None, pid=process.pid, background=True, attempts=attempts)

        exit_code = process.wait()
        logger.info("pid %d exited with status %d", process.pid, exit_code)
        if reinterpreted and exit_code == INTERPRETER_NOT_FOUND_STATUS:
            logger.warning("Interpreter could not resolve %s", self.request.program)
            raise CommandNotFound(self.request.program, attempts)
        return ExecutionResult(exit_code=exit_code, pid=process.pid, attempts=attempts)
