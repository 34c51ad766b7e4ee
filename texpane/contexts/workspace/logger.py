"""
Workspace context logger.

Provides logging interface for workspace context with automatic [workspace] prefix.
All workspace modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[workspace]"


def _log_info(message: str) -> None:
    """Log info message with [workspace] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [workspace] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [workspace] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [workspace] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def _log_exception(message: str) -> None:
    """Log error message with [workspace] prefix and the active traceback."""
    logger.opt(exception=True).error(f"{CONTEXT_PREFIX} {message}")


# High-level workspace-specific logging helpers


def log_file_operation(operation: str, path, **details) -> None:
    """Log a file operation with optional key=value details."""
    suffix = "".join(f", {key}={value}" for key, value in details.items())
    _log_info(f"{operation}: {path}{suffix}")


def log_watch_started(root_path, debounce_seconds: float) -> None:
    """Log start of a watch session."""
    _log_info(f"Started watching: {root_path}")
    if debounce_seconds > 0:
        _log_debug(f"  Debounce: {debounce_seconds:.2f}s")


def log_watch_stopped(root_path) -> None:
    """Log end of a watch session."""
    _log_info(f"Stopped watching: {root_path}")


def log_watch_event(event_type: str, src_path: str, dest_path: str = "") -> None:
    """Log a single filesystem event at debug level."""
    if dest_path:
        _log_debug(f"Event: {event_type} - {src_path} -> {dest_path}")
    else:
        _log_debug(f"Event: {event_type} - {src_path}")
