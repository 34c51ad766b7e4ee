"""
File operations requested by the editor.

Each operation is a single blocking OS call. Failures, including paths the OS
cannot represent and text that cannot be encoded, are raised as IOFailure
carrying the underlying error text; nothing is retried.
"""

import shutil
from pathlib import Path
from typing import Union

from texpane.contexts.workspace.exceptions import IOFailure
from texpane.contexts.workspace.logger import _log_error, log_file_operation

PathLike = Union[str, Path]


def read_file(path: PathLike) -> str:
    """Read a UTF-8 text file."""
    path = Path(path)
    log_file_operation("Reading file", path)
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, ValueError) as e:
        _log_error(f"Error reading file {path}: {e}")
        raise IOFailure("Failed to read file", path=path, original_error=e) from e


def write_file(path: PathLike, content: str) -> None:
    """Write text to a file, replacing any previous content."""
    path = Path(path)
    log_file_operation("Saving file", path, chars=len(content))
    try:
        # Encode before opening so unencodable text never truncates the file
        data = content.encode("utf-8")
        with open(path, "wb") as f:
            f.write(data)
    except (OSError, ValueError) as e:
        _log_error(f"Error writing file {path}: {e}")
        raise IOFailure("Failed to write file", path=path, original_error=e) from e


def create_file(path: PathLike) -> None:
    """Create an empty file (truncates an existing one)."""
    path = Path(path)
    log_file_operation("Creating file", path)
    try:
        with open(path, "w", encoding="utf-8"):
            pass
    except (OSError, ValueError) as e:
        _log_error(f"Error creating file {path}: {e}")
        raise IOFailure("Failed to create file", path=path, original_error=e) from e


def create_directory(path: PathLike) -> None:
    """Create a directory and any missing parents. Existing directories are fine."""
    path = Path(path)
    log_file_operation("Creating directory", path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as e:
        _log_error(f"Error creating directory {path}: {e}")
        raise IOFailure("Failed to create directory", path=path, original_error=e) from e


def delete(path: PathLike) -> None:
    """Delete a file, or a directory with all of its contents."""
    path = Path(path)
    log_file_operation("Deleting node", path)
    try:
        # A symlink to a directory is removed as a link, never followed
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except (OSError, ValueError) as e:
        _log_error(f"Error deleting {path}: {e}")
        raise IOFailure("Failed to delete", path=path, original_error=e) from e


def move(source: PathLike, destination: PathLike) -> None:
    """Move or rename a file or directory."""
    source = Path(source)
    destination = Path(destination)
    log_file_operation("Moving node", source, destination=destination)
    try:
        source.rename(destination)
    except (OSError, ValueError) as e:
        _log_error(f"Error moving {source} to {destination}: {e}")
        raise IOFailure(f"Failed to move to {destination}", path=source, original_error=e) from e
