"""
Output path derivation.

Backends disagree on where the PDF lands: the system compiler is given a fixed
job name, the others name the PDF after the source file. Both rules put the
artifact next to the source.
"""

from pathlib import Path
from typing import Union

from texpane.contexts.rendering.exceptions import InvalidPath

PREVIEW_JOBNAME = "preview"
OUTPUT_SUFFIX = ".pdf"


def resolve_source(source_path: Union[str, Path]) -> Path:
    """
    Make a source path absolute and check that it names a file in an existing directory.

    Raises:
        InvalidPath: If the path is empty or contains NUL, has no parent directory,
            or the parent does not exist
    """
    if not str(source_path).strip():
        raise InvalidPath("Invalid file path: empty path")
    if "\0" in str(source_path):
        raise InvalidPath("Invalid file path: contains a NUL character")

    path = Path(source_path).expanduser().absolute()
    if path.parent == path or not path.name:
        raise InvalidPath("Invalid file path: no parent directory", path)
    if not path.parent.is_dir():
        raise InvalidPath("Invalid file path: parent directory does not exist", path)
    return path


def output_directory(source_path: Path) -> Path:
    """Directory the artifact is written to (the source's parent)."""
    return source_path.parent


def source_stem(source_path: Path) -> str:
    """
    File name without its final extension.

    Raises:
        InvalidPath: If the path has no file name to take a stem from
    """
    stem = source_path.stem
    if not stem:
        raise InvalidPath("Invalid file path: no file stem", source_path)
    return stem


def jobname_output_path(source_path: Path, jobname: str = PREVIEW_JOBNAME) -> Path:
    """Artifact path for a fixed job name, independent of the source name."""
    return output_directory(source_path) / f"{jobname}{OUTPUT_SUFFIX}"


def stem_output_path(source_path: Path) -> Path:
    """Artifact path mirroring the source file's stem."""
    return output_directory(source_path) / f"{source_stem(source_path)}{OUTPUT_SUFFIX}"


def log_path(output_path: Path) -> Path:
    """LaTeX .log file written beside an artifact."""
    return output_path.with_suffix(".log")
