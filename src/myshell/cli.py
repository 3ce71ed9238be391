"""CLI entry point using typer."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from myshell import __version__
from myshell.config import CONFIG_FILE, AppConfig, load_config, save_config
from myshell.core.commands import HistoryCommand
from myshell.repl import Repl
from myshell.storage.history import HistoryLog
from myshell.utils.system import check_history_file, check_interpreter

app = typer.Typer(
    name="myshell",
    help="A minimal interactive command interpreter.",
    add_completion=False,
)
console = Console()


def setup_logging(config: AppConfig) -> None:
    log_path = Path(config.logging.file).expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(str(log_path))],
    )


def _load_config_or_exit() -> AppConfig:
    try:
        return load_config()
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Start the interactive shell when no subcommand is given."""
    if ctx.invoked_subcommand is None:
        run(history=None)


@app.command()
def run(
    history: str = typer.Option(None, "--history", "-H", help="History file to use"),
) -> None:
    """Start the interactive shell."""
    config = _load_config_or_exit()
    if history:
        config.history.file = history

    valid, resolved = check_history_file(config.history.file)
    if not valid:
        console.print(f"[red]{resolved}[/red]")
        raise typer.Exit(1)

    installed, info = check_interpreter(config.shell.interpreter)
    if not installed:
        console.print(f"[yellow]Warning: {info}[/yellow]")
        console.print("Fallback reinterpretation will fail.\n")

    setup_logging(config)
    logging.getLogger(__name__).info("Starting shell with history %s", resolved)

    try:
        Repl(config).run()
    except KeyboardInterrupt:
        console.print()


@app.command()
def history(
    file: str = typer.Option(None, "--file", "-f", help="History file to read"),
) -> None:
    """Print the numbered command history."""
    config = _load_config_or_exit()
    path = file or config.history.file
    HistoryCommand(HistoryLog(path)).execute()


@app.command()
def config(
    key: str = typer.Argument(None, help="Config key (e.g., shell.interpreter)"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """View or modify configuration."""
    cfg = _load_config_or_exit()

    if key is None:
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("shell.prompt", repr(cfg.shell.prompt))
        table.add_row("shell.background_marker", cfg.shell.background_marker)
        table.add_row("shell.exit_keyword", cfg.shell.exit_keyword)
        table.add_row("shell.history_keyword", cfg.shell.history_keyword)
        table.add_row("shell.echo_keyword", cfg.shell.echo_keyword)
        table.add_row("shell.interpreter", cfg.shell.interpreter)
        table.add_row("shell.max_fallback_depth", str(cfg.shell.max_fallback_depth))
        table.add_row("shell.reap_interval", str(cfg.shell.reap_interval))
        table.add_row("history.file", cfg.history.file)
        table.add_row("logging.level", cfg.logging.level)
        table.add_row("logging.file", cfg.logging.file)

        console.print(table)
        return

    if value is None:
        console.print("[red]Usage: myshell config <key> <value>[/red]")
        raise typer.Exit(1)

    parts = key.split(".")
    if len(parts) != 2:
        console.print("[red]Key format: section.key (e.g., shell.interpreter)[/red]")
        raise typer.Exit(1)

    section, attr = parts
    section_map = {"shell": cfg.shell, "history": cfg.history, "logging": cfg.logging}

    if section not in section_map:
        console.print(f"[red]Unknown section: {section}[/red]")
        raise typer.Exit(1)

    obj = section_map[section]
    if not hasattr(obj, attr):
        console.print(f"[red]Unknown key: {key}[/red]")
        raise typer.Exit(1)

    current = getattr(obj, attr)
    try:
        if isinstance(current, bool):
            typed_value = value.lower() in ("true", "1", "yes")
        elif isinstance(current, int):
            typed_value = int(value)
        elif isinstance(current, float):
            typed_value = float(value)
        else:
            typed_value = value
    except ValueError:
        console.print(f"[red]Invalid value type for {key}[/red]")
        raise typer.Exit(1)

    setattr(obj, attr, typed_value)
    save_config(cfg)
    console.print(f"[green]{key} = {typed_value}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"myshell v{__version__}")

    cfg = _load_config_or_exit()
    installed, info = check_interpreter(cfg.shell.interpreter)
    if installed:
        console.print(f"Interpreter: {info}")
    else:
        console.print("Interpreter: [yellow]not found[/yellow]")

    console.print(f"Python: {sys.version.split()[0]}")
    console.print(f"Config: {CONFIG_FILE}")


if __name__ == "__main__":
    app()
