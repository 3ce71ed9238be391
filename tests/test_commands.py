"""Tests for the command variants."""

from __future__ import annotations

import errno
import io
import os
import signal
import sys
import time
from unittest.mock import MagicMock, patch

import pytest

from myshell.core.commands import EchoCommand, ExitCommand, ExternalCommand, HistoryCommand
from myshell.errors import CommandAlreadyExecuted, CommandNotFound, ProcessCreationFailed
from myshell.services.reaper import ProcessReaper
from myshell.storage.history import HistoryLog
from myshell.storage.models import ExecutionRequest

MISSING = "myshell-test-no-such-program"


def _not_found() -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, "No such file or directory")


class TestEchoCommand:
    def test_expands_and_keeps_trailing_space(self, stdout):
        EchoCommand(["echo", "$HOME", "foo"], env={"HOME": "/root"}, stdout=stdout).execute()
        assert stdout.getvalue() == "/root foo \n"

    def test_unset_variable(self, stdout):
        EchoCommand(["echo", "$UNSET_VAR"], env={}, stdout=stdout).execute()
        assert stdout.getvalue() == " \n"

    def test_no_arguments(self, stdout):
        EchoCommand(["echo"], env={}, stdout=stdout).execute()
        assert stdout.getvalue() == "\n"

    def test_result(self, stdout):
        result = EchoCommand(["echo", "hi"], env={}, stdout=stdout).execute()
        assert result.exit_code == 0
        assert result.pid is None

    def test_executes_once(self, stdout):
        command = EchoCommand(["echo", "hi"], env={}, stdout=stdout)
        command.execute()
        with pytest.raises(CommandAlreadyExecuted):
            command.execute()
        assert stdout.getvalue() == "hi \n"


class TestExitCommand:
    def test_exits_with_zero(self):
        with patch("myshell.core.commands.os._exit") as mock_exit:
            ExitCommand().execute()
        mock_exit.assert_called_once_with(0)


class TestHistoryCommand:
    def test_numbered_listing(self, tmp_path, stdout):
        path = tmp_path / "history.txt"
        path.write_text("ls\npwd\n")
        HistoryCommand(HistoryLog(path), stdout=stdout).execute()
        assert stdout.getvalue() == "1. ls\n2. pwd\n"

    def test_numbering_restarts(self, tmp_path):
        path = tmp_path / "history.txt"
        path.write_text("ls\npwd\n")
        first, second = io.StringIO(), io.StringIO()
        HistoryCommand(HistoryLog(path), stdout=first).execute()
        HistoryCommand(HistoryLog(path), stdout=second).execute()
        assert first.getvalue() == second.getvalue() == "1. ls\n2. pwd\n"

    def test_does_not_modify_log(self, tmp_path, stdout):
        path = tmp_path / "history.txt"
        path.write_text("ls\n")
        HistoryCommand(HistoryLog(path), stdout=stdout).execute()
        assert path.read_text() == "ls\n"

    def test_missing_log(self, tmp_path, stdout):
        result = HistoryCommand(HistoryLog(tmp_path / "none.txt"), stdout=stdout).execute()
        assert stdout.getvalue() == ""
        assert result.exit_code == 0


class TestExternalCommand:
    def test_foreground_waits(self, stdout):
        request = ExecutionRequest(argv=(sys.executable, "-c", "import time; time.sleep(0.3)"))
        start = time.monotonic()
        result = ExternalCommand(request, stdout=stdout).execute()
        elapsed = time.monotonic() - start
        assert elapsed >= 0.25
        assert result.exit_code == 0
        assert result.pid is not None
        assert result.background is False

    def test_exit_status_is_exposed(self, stdout):
        request = ExecutionRequest(argv=(sys.executable, "-c", "raise SystemExit(3)"))
        result = ExternalCommand(request, stdout=stdout).execute()
        assert result.exit_code == 3
        assert result.attempts == 1

    def test_background_returns_immediately(self, stdout):
        reaper = ProcessReaper()
        request = ExecutionRequest(argv=(sys.executable, "-c", "import time; time.sleep(5)"), background=True)
        start = time.monotonic()
        result = ExternalCommand(request, stdout=stdout, reaper=reaper).execute()
        elapsed = time.monotonic() - start
        try:
            assert elapsed < 2.0
            assert result.background is True
            assert result.exit_code is None
            assert reaper.active == [result.pid]
        finally:
            os.kill(result.pid, signal.SIGKILL)
            deadline = time.monotonic() + 5
            while reaper.active and time.monotonic() < deadline:
                reaper.reap()
                time.sleep(0.02)
        assert reaper.active == []

    def test_fallback_prints_variable_value(self, env, stdout):
        env["MYSHELL_FALLBACK_VALUE"] = "hello"
        request = ExecutionRequest(argv=("MYSHELL_FALLBACK_VALUE",))
        result = ExternalCommand(request, env=env, stdout=stdout).execute()
        assert stdout.getvalue() == "hello\n"
        assert result.exit_code == 0
        assert result.attempts == 1

    def test_fallback_reinterprets_with_interpreter(self, stdout):
        proc = MagicMock(pid=4242)
        proc.wait.return_value = 0
        with patch("myshell.core.commands.subprocess.Popen", side_effect=[_not_found(), proc]) as mock_popen:
            result = ExternalCommand(ExecutionRequest(argv=("$NAME",)), env={}, stdout=stdout).execute()
        assert mock_popen.call_count == 2
        assert mock_popen.call_args_list[1].args[0] == ["/bin/sh", "-c", "NAME"]
        assert result.exit_code == 0
        assert result.attempts == 2

    def test_interpreter_not_found_status_raises(self, stdout):
        proc = MagicMock(pid=4242)
        proc.wait.return_value = 127
        with patch("myshell.core.commands.subprocess.Popen", side_effect=[_not_found(), proc]):
            with pytest.raises(CommandNotFound) as exc_info:
                ExternalCommand(ExecutionRequest(argv=(MISSING,)), env={}, stdout=stdout).execute()
        assert exc_info.value.attempts == 2
        assert exc_info.value.name == MISSING

    def test_status_127_from_direct_program_is_returned(self, stdout):
        request = ExecutionRequest(argv=(sys.executable, "-c", "raise SystemExit(127)"))
        result = ExternalCommand(request, stdout=stdout).execute()
        assert result.exit_code == 127

    def test_unknown_command_with_default_interpreter(self, env, stdout):
        command = ExternalCommand(ExecutionRequest(argv=(MISSING,)), env=env, stdout=stdout)
        with pytest.raises(CommandNotFound) as exc_info:
            command.execute()
        assert exc_info.value.attempts == 2

    def test_fallback_keeps_background_flag(self, stdout):
        proc = MagicMock(pid=4242)
        reaper = ProcessReaper()
        request = ExecutionRequest(argv=(MISSING,), background=True)
        with patch("myshell.core.commands.subprocess.Popen", side_effect=[_not_found(), proc]):
            result = ExternalCommand(request, env={}, stdout=stdout, reaper=reaper).execute()
        assert result.background is True
        assert reaper.active == [4242]
        proc.wait.assert_not_called()

    def test_fallback_depth_limit(self, stdout):
        with patch("myshell.core.commands.subprocess.Popen", side_effect=_not_found()) as mock_popen:
            with pytest.raises(CommandNotFound) as exc_info:
                ExternalCommand(ExecutionRequest(argv=(MISSING,)), env={}, stdout=stdout).execute()
        assert mock_popen.call_count == 2
        assert exc_info.value.attempts == 2
        assert exc_info.value.name == MISSING

    def test_configured_fallback_depth(self, stdout):
        with patch("myshell.core.commands.subprocess.Popen", side_effect=_not_found()) as mock_popen:
            with pytest.raises(CommandNotFound):
                ExternalCommand(
                    ExecutionRequest(argv=(MISSING,)),
                    max_fallback_depth=3,
                    env={},
                    stdout=stdout,
                ).execute()
        assert mock_popen.call_count == 4

    def test_zero_fallback_depth(self, stdout):
        with patch("myshell.core.commands.subprocess.Popen", side_effect=_not_found()) as mock_popen:
            with pytest.raises(CommandNotFound):
                ExternalCommand(
                    ExecutionRequest(argv=(MISSING,)),
                    max_fallback_depth=0,
                    env={},
                    stdout=stdout,
                ).execute()
        assert mock_popen.call_count == 1

    def test_unresolvable_with_real_processes(self, env, stdout):
        command = ExternalCommand(
            ExecutionRequest(argv=(MISSING,)),
            interpreter="/nonexistent/myshell-sh",
            env=env,
            stdout=stdout,
        )
        with pytest.raises(CommandNotFound):
            command.execute()
        assert stdout.getvalue() == ""

    def test_process_creation_failure(self, stdout):
        error = BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch("myshell.core.commands.subprocess.Popen", side_effect=error) as mock_popen:
            with pytest.raises(ProcessCreationFailed) as exc_info:
                ExternalCommand(ExecutionRequest(argv=("ls",)), env={}, stdout=stdout).execute()
        assert mock_popen.call_count == 1
        assert exc_info.value.argv == ("ls",)
