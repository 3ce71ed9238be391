"""Configuration management using TOML + environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

CONFIG_DIR = Path.home() / ".myshell"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class ShellConfig:
    prompt: str = "myshell> "
    background_marker: str = "&"
    exit_keyword: str = "exit"
    history_keyword: str = "myhistory"
    echo_keyword: str = "echo"
    interpreter: str = "/bin/sh"
    max_fallback_depth: int = 1
    reap_interval: float = 1.0


@dataclass
class HistoryConfig:
    file: str = "history.txt"


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: str = "~/.myshell/myshell.log"


@dataclass
class AppConfig:
    shell: ShellConfig = field(default_factory=ShellConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def history_path(self) -> Path:
        return Path(self.history.file).expanduser()


def ensure_config_dir() -> None:
    """Create config directory with secure permissions."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    os.chmod(CONFIG_DIR, 0o700)


def load_config() -> AppConfig:
    """Load configuration from TOML file with env var overrides."""
    config = AppConfig()

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "rb") as f:
            data = tomllib.load(f)

        shell = data.get("shell", {})
        config.shell.prompt = shell.get("prompt", config.shell.prompt)
        config.shell.background_marker = shell.get("background_marker", config.shell.background_marker)
        config.shell.exit_keyword = shell.get("exit_keyword", config.shell.exit_keyword)
        config.shell.history_keyword = shell.get("history_keyword", config.shell.history_keyword)
        config.shell.echo_keyword = shell.get("echo_keyword", config.shell.echo_keyword)
        config.shell.interpreter = shell.get("interpreter", config.shell.interpreter)
        config.shell.max_fallback_depth = shell.get("max_fallback_depth", config.shell.max_fallback_depth)
        config.shell.reap_interval = shell.get("reap_interval", config.shell.reap_interval)

        history = data.get("history", {})
        config.history.file = history.get("file", config.history.file)

        logging_cfg = data.get("logging", {})
        config.logging.level = logging_cfg.get("level", config.logging.level)
        config.logging.file = logging_cfg.get("file", config.logging.file)

    # Environment variable overrides
    if env_prompt := os.environ.get("MYSHELL_PROMPT"):
        config.shell.prompt = env_prompt
    if env_interpreter := os.environ.get("MYSHELL_INTERPRETER"):
        config.shell.interpreter = env_interpreter
    if env_depth := os.environ.get("MYSHELL_FALLBACK_DEPTH"):
        config.shell.max_fallback_depth = int(env_depth)
    if env_history := os.environ.get("MYSHELL_HISTORY_FILE"):
        config.history.file = env_history
    if env_log_level := os.environ.get("MYSHELL_LOG_LEVEL"):
        config.logging.level = env_log_level

    return config


def save_config(config: AppConfig) -> None:
    """Save configuration to TOML file."""
    ensure_config_dir()

    data = {
        "shell": {
            "prompt": config.shell.prompt,
            "background_marker": config.shell.background_marker,
            "exit_keyword": config.shell.exit_keyword,
            "history_keyword": config.shell.history_keyword,
            "echo_keyword": config.shell.echo_keyword,
            "interpreter": config.shell.interpreter,
            "max_fallback_depth": config.shell.max_fallback_depth,
            "reap_interval": config.shell.reap_interval,
        },
        "history": {
            "file": config.history.file,
        },
        "logging": {
            "level": config.logging.level,
            "file": config.logging.file,
        },
    }

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(CONFIG_FILE, 0o600)


# Global singleton
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or load the global config singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global config (for testing)."""
    global _config
    _config = None
