"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from pathlib import Path

from loguru import logger

CONTEXT_PREFIX = "[render]"


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compilation_start(source_path: Path, backend_name: str, output_path: Path) -> None:
    """Log start of compilation with context."""
    _log_info(f"Compilation requested for: {source_path}")
    _log_debug(f"  Backend: {backend_name}")
    _log_debug(f"  Output directory: {output_path.parent}")
    _log_debug(f"  Target PDF: {output_path}")


def log_process_output(label: str, stdout: str, stderr: str) -> None:
    """
    Log captured compiler streams at debug level.

    Uses opt(raw=True) to bypass the format template so multi-line output keeps
    its original layout instead of gaining a timestamp on every line.
    """
    if stdout:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\n{label} STDOUT:\n{'=' * 80}\n{stdout}\n")
    if stderr:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\n{label} STDERR:\n{'=' * 80}\n{stderr}\n")


def log_compilation_result(
    source_path: Path,
    result,  # CompileResult
    verbose: bool = False,
) -> None:
    """
    Log compilation result with diagnostics.

    Args:
        source_path: Compiled document
        result: CompileResult from a backend
        verbose: Show more errors/warnings (default: False)
    """
    name = source_path.name
    if result.success:
        _log_success(f"Compilation successful: {result.output_path}")
        _log_success(f"{name}: {len(result.warnings)} warnings ({result.elapsed_s:.2f}s)")
    else:
        _log_error(f"Compilation failed: {result.diagnostic}")
        _log_error(f"{name}: {len(result.errors)} errors ({result.elapsed_s:.2f}s)")
        error_limit = 10 if verbose else 5
        for i, err in enumerate(result.errors[:error_limit], 1):
            _log_error(f"  Error {i}: {err}")
        if len(result.errors) > error_limit:
            _log_error(f"  ... and {len(result.errors) - error_limit} more errors")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings detected")
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")
