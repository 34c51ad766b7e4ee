"""
Directory listing for the file tree.

Lists the immediate children of a directory, classified as file or directory.
Listings are produced fresh on every call and never cached; the presentation
layer re-lists whenever a watch session signals a change.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from texpane.contexts.workspace.exceptions import IOFailure
from texpane.contexts.workspace.logger import _log_debug, _log_error

# Compilation by-products hidden from the tree view (directories are always shown)
HIDDEN_EXTENSIONS = (".aux", ".out", ".toc", ".synctex.gz", ".fls", ".fdb_latexmk", ".pdf")


@dataclass(frozen=True)
class FileNode:
    """
    One child of a listed directory.

    Attributes:
        name: Final path component
        path: Absolute path of the child
        is_dir: Whether the child is a directory (symlinks resolved)
    """

    name: str
    path: str
    is_dir: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "path": self.path, "is_dir": self.is_dir}


def list_directory(directory_path: Union[str, Path]) -> List[FileNode]:
    """
    List the immediate children of a directory in OS enumeration order.

    Each child is stat-ed to decide is_dir, so symlinked directories count as
    directories and the result reflects the filesystem at listing time.

    Args:
        directory_path: Directory to list

    Returns:
        One FileNode per child (order unspecified)

    Raises:
        IOFailure: If the path does not exist, is not a directory, or is not readable
    """
    directory = Path(directory_path).expanduser().absolute()

    try:
        # Materialize first so a mid-iteration error never yields a truncated listing
        children = list(directory.iterdir())
    except (OSError, ValueError) as e:
        _log_error(f"Failed to list directory {directory}: {e}")
        raise IOFailure("Failed to list directory", path=directory, original_error=e) from e

    nodes = [
        FileNode(name=child.name, path=str(child), is_dir=child.is_dir()) for child in children
    ]
    _log_debug(f"Listed {directory}: {len(nodes)} entries")
    return nodes


def _sort_key(node: FileNode) -> Tuple[bool, str]:
    return (not node.is_dir, node.name.lower())


def visible_nodes(
    nodes: Iterable[FileNode], hidden_extensions: Tuple[str, ...] = HIDDEN_EXTENSIONS
) -> List[FileNode]:
    """
    Prepare a listing for display: drop build artifacts, directories first, then by name.

    Args:
        nodes: Listing from list_directory()
        hidden_extensions: File suffixes to hide (case-insensitive)

    Returns:
        New sorted list; the input is not modified
    """
    hidden = tuple(ext.lower() for ext in hidden_extensions)
    shown = [node for node in nodes if node.is_dir or not node.name.lower().endswith(hidden)]
    return sorted(shown, key=_sort_key)
