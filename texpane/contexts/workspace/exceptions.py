"""Custom exceptions for the workspace context."""

from pathlib import Path
from typing import Optional, Union

from texpane.utils.exceptions import TexpaneError


class IOFailure(TexpaneError):
    """
    Exception raised when a filesystem operation fails.

    The OS error text is preserved verbatim in the message.

    Attributes:
        message: Error description
        path: Path the operation targeted
        original_error: The underlying OSError or ValueError
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.path = Path(path) if path is not None else None
        self.original_error = original_error

        parts = [message]
        if original_error is not None:
            parts.append(str(original_error))

        super().__init__(": ".join(parts))


class WatchSetupFailure(TexpaneError):
    """
    Exception raised when a watch session cannot be established.

    Attributes:
        message: Error description
        path: Root path that was to be watched
        original_error: The underlying error, if any
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.path = Path(path) if path is not None else None
        self.original_error = original_error

        parts = [message]
        if path is not None:
            parts.append(f"Path: {path}")
        if original_error is not None:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))
