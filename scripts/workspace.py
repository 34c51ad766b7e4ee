#!/usr/bin/env python3
"""
Workspace CLI

Lists directories the way the editor's file tree does and watches a directory
for changes, printing one line per change signal.

Examples:\n

    workspace.py ls paper/                 # Visible entries, directories first

    workspace.py ls paper/ --all           # Raw listing, including build artifacts

    workspace.py watch paper/ -d 0.5       # Coalesce bursts within 0.5s
"""

import time
from pathlib import Path

import typer
from typing_extensions import Annotated

from texpane.contexts.workspace import (
    ChangeNotifier,
    DirectoryWatcher,
    IOFailure,
    WatchSetupFailure,
    list_directory,
    visible_nodes,
)
from texpane.contexts.workspace.watcher import WATCH_DEBOUNCE_S
from texpane.utils.logger import setup_logger
from texpane.utils.timestamp import now_exact

app = typer.Typer(
    add_completion=False,
    help="List and watch editor workspaces",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("ls")
def ls_command(
    directory: Annotated[Path, typer.Argument(help="Directory to list")],
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Show build artifacts and keep OS order"),
    ] = False,
):
    """List the immediate children of a directory."""
    setup_logger(context_name="workspace", console_level="WARNING")

    try:
        nodes = list_directory(directory)
    except IOFailure as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not show_all:
        nodes = visible_nodes(nodes)

    for node in nodes:
        if node.is_dir:
            typer.secho(f"{node.name}/", fg=typer.colors.BLUE, bold=True)
        else:
            typer.echo(node.name)


@app.command("watch")
def watch_command(
    directory: Annotated[Path, typer.Argument(help="Directory to watch recursively")],
    debounce: Annotated[
        float,
        typer.Option("--debounce", "-d", help="Coalesce change bursts (seconds, 0 = off)", min=0),
    ] = WATCH_DEBOUNCE_S,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every filesystem event"),
    ] = False,
):
    """
    Watch a directory and print a line on every change signal. Stop with Ctrl+C.
    """
    setup_logger(context_name="workspace", console_level="DEBUG" if verbose else "INFO")

    notifier = ChangeNotifier()
    notifier.subscribe(lambda: typer.echo(f"{now_exact()}  {notifier.event_name}"))

    watcher = DirectoryWatcher(debounce_seconds=debounce)
    try:
        watcher.watch(directory, on_change=notifier.notify)
    except WatchSetupFailure as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop_all()


if __name__ == "__main__":
    app()
