"""
Boundary layer consumed by the presentation layer.

Every operation returns a CommandResult rather than raising: failures reach the
editor as human-readable messages and never take the host process down.

Usage:
    commands = Commands(notifier=ChangeNotifier(asyncio.get_running_loop()))
    commands.notifier.subscribe(refresh_sidebar)
    commands.watch("/work/thesis")

    listing = commands.list_directory("/work/thesis")
    if listing.ok:
        show(visible_nodes(listing.value))

    result = await commands.save_and_compile("/work/thesis/main.tex", text)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from texpane.contexts.rendering.orchestrator import CompileOrchestrator
from texpane.contexts.workspace import file_ops
from texpane.contexts.workspace.file_tree import list_directory
from texpane.contexts.workspace.logger import _log_error
from texpane.contexts.workspace.notifier import ChangeNotifier
from texpane.contexts.workspace.watcher import DirectoryWatcher
from texpane.utils.exceptions import TexpaneError

PathLike = Union[str, Path]

COMPILABLE_SUFFIX = ".tex"


@dataclass
class CommandResult:
    """
    Outcome of one boundary operation.

    Attributes:
        ok: Whether the operation succeeded
        value: Operation result (None for operations without one)
        error: Failure message (None on success)
    """

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "CommandResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "CommandResult":
        return cls(ok=False, error=error)


def _run(operation: str, func: Callable[..., Any], *args) -> CommandResult:
    try:
        return CommandResult.success(func(*args))
    except TexpaneError as e:
        _log_error(f"{operation} failed: {e}")
        return CommandResult.failure(str(e))


class Commands:
    """Operations exposed to the editor, sharing one watcher, notifier and orchestrator."""

    def __init__(
        self,
        notifier: Optional[ChangeNotifier] = None,
        watcher: Optional[DirectoryWatcher] = None,
        orchestrator: Optional[CompileOrchestrator] = None,
    ):
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self.watcher = watcher if watcher is not None else DirectoryWatcher()
        self.orchestrator = orchestrator if orchestrator is not None else CompileOrchestrator()

    # Filesystem

    def list_directory(self, path: PathLike) -> CommandResult:
        return _run("list_directory", list_directory, path)

    def read_file(self, path: PathLike) -> CommandResult:
        return _run("read_file", file_ops.read_file, path)

    def write_file(self, path: PathLike, content: str) -> CommandResult:
        return _run("write_file", file_ops.write_file, path, content)

    def create_file(self, path: PathLike) -> CommandResult:
        return _run("create_file", file_ops.create_file, path)

    def create_directory(self, path: PathLike) -> CommandResult:
        return _run("create_directory", file_ops.create_directory, path)

    def delete(self, path: PathLike) -> CommandResult:
        return _run("delete", file_ops.delete, path)

    def move(self, source: PathLike, destination: PathLike) -> CommandResult:
        return _run("move", file_ops.move, source, destination)

    # Watching

    def watch(self, path: PathLike) -> CommandResult:
        """Start (or join) the watch session for path; signals go to self.notifier."""

        def start() -> str:
            session = self.watcher.watch(path, on_change=self.notifier.notify)
            return str(session.root_path)

        return _run("watch", start)

    def unwatch(self, path: PathLike) -> CommandResult:
        return _run("unwatch", self.watcher.unwatch, path)

    def shutdown(self) -> None:
        """Stop every watch session."""
        self.watcher.stop_all()

    # Compilation

    async def compile(self, source_path: PathLike) -> CommandResult:
        try:
            output_path = await self.orchestrator.compile_preview_async(source_path)
        except TexpaneError as e:
            _log_error(f"compile failed: {e}")
            return CommandResult.failure(str(e))
        return CommandResult.success(output_path)

    async def save_and_compile(self, path: PathLike, content: str) -> CommandResult:
        """
        Save the editor buffer, then compile it if it is a LaTeX source.

        Returns:
            CommandResult whose value is the artifact path, or None for non-LaTeX files
        """
        saved = self.write_file(path, content)
        if not saved.ok:
            return saved

        if not str(path).lower().endswith(COMPILABLE_SUFFIX):
            return CommandResult.success(None)
        return await self.compile(path)
