"""Custom exceptions for the rendering context."""

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from texpane.utils.exceptions import TexpaneError

if TYPE_CHECKING:
    from texpane.contexts.rendering.compiler import CompileResult


class InvalidPath(TexpaneError):
    """
    Exception raised when an output path cannot be derived from a source path.

    Attributes:
        message: Error description
        path: The offending source path
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.message = message
        self.path = path

        if path is not None:
            super().__init__(f"{message}: {path}")
        else:
            super().__init__(message)


class CompileFailure(TexpaneError):
    """
    Exception raised when a backend fails to produce the artifact.

    Attributes:
        message: Error description including the backend diagnostic
        result: The failed CompileResult (None if the backend never ran)
    """

    def __init__(self, message: str, result: Optional["CompileResult"] = None):
        self.message = message
        self.result = result
        super().__init__(message)
