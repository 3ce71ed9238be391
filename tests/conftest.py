"""Shared test fixtures."""

from __future__ import annotations

import io
import os

import pytest

from myshell.config import AppConfig, HistoryConfig, LoggingConfig, ShellConfig
from myshell.core.dispatcher import CommandDispatcher
from myshell.storage.history import HistoryLog


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.myshell and MYSHELL_* overrides."""
    import myshell.config as cfg_module

    for name in list(os.environ):
        if name.startswith("MYSHELL_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(cfg_module, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(cfg_module, "CONFIG_FILE", tmp_path / "config" / "config.toml")
    cfg_module.reset_config()


@pytest.fixture
def app_config(tmp_path):
    """Create a test configuration."""
    return AppConfig(
        shell=ShellConfig(reap_interval=0.05),
        history=HistoryConfig(file=str(tmp_path / "history.txt")),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "test.log")),
    )


@pytest.fixture
def history_log(app_config):
    return HistoryLog(app_config.history_path)


@pytest.fixture
def stdout():
    return io.StringIO()


@pytest.fixture
def env():
    return {"PATH": os.environ.get("PATH", "/usr/bin:/bin"), "HOME": "/root"}


@pytest.fixture
def dispatcher(app_config, history_log, env, stdout):
    return CommandDispatcher(app_config.shell, history_log, env=env, stdout=stdout)
