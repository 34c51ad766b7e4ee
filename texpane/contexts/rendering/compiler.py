"""
LaTeX Compilation Module

Shared compilation machinery used by every backend: request/result types,
external compiler process execution with timeout and cancellation, and
LaTeX log parsing for errors and warnings.
"""

import re
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from texpane.contexts.rendering.paths import log_path

# How often a running compiler is checked for cancellation/deadline
POLL_INTERVAL_S = 0.2

FALLBACK_DIAGNOSTIC = "Compilation failed without diagnostic output"

# LaTeX error lines: "! Error message"
ERROR_LINE_PATTERN = re.compile(r"^! (.+)$", re.MULTILINE)

# Errors that pdflatex reports without a leading "!"
UNPREFIXED_ERROR_PATTERNS = [
    re.compile(r"(Undefined control sequence.*?)$", re.MULTILINE),
    re.compile(r"(File ended while scanning use of.*?)$", re.MULTILINE),
    re.compile(r"(Emergency stop.*?)$", re.MULTILINE),
]

WARNING_PATTERNS = [
    re.compile(r"LaTeX Warning: (.+)"),
    re.compile(r"Package \w+ Warning: (.+)"),
    re.compile(r"Overfull \\hbox \((.+)\)"),
    re.compile(r"Underfull \\hbox \((.+)\)"),
]


@dataclass(frozen=True)
class CompileRequest:
    """Single-use request to compile one document."""

    source_path: Path


@dataclass
class CompileResult:
    """
    Result of compiling one document.

    Exactly one of success or failure: a successful result always has an
    output_path, a failed one never does and always has a diagnostic.

    Attributes:
        success: Whether the backend produced the artifact
        output_path: Absolute path of the artifact (None if failed)
        diagnostic: Human-readable failure description ("" on success)
        stdout: Captured standard output of the backend
        stderr: Captured standard error of the backend
        errors: LaTeX errors parsed from the .log file
        warnings: LaTeX warnings parsed from the .log file
        elapsed_s: Wall time spent in the backend
        page_count: Pages in the artifact (None if unknown)
        backend: Name of the backend that ran
    """

    success: bool
    output_path: Optional[Path] = None
    diagnostic: str = ""
    stdout: str = ""
    stderr: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    elapsed_s: float = 0.0
    page_count: Optional[int] = None
    backend: str = ""

    def __post_init__(self):
        if self.success and self.output_path is None:
            raise ValueError("A successful CompileResult requires an output_path")
        if not self.success:
            if self.output_path is not None:
                raise ValueError("A failed CompileResult cannot carry an output_path")
            if not self.diagnostic.strip():
                self.diagnostic = FALLBACK_DIAGNOSTIC

    @classmethod
    def succeeded(cls, output_path: Path, **kwargs) -> "CompileResult":
        return cls(success=True, output_path=output_path, **kwargs)

    @classmethod
    def failed(cls, diagnostic: str, **kwargs) -> "CompileResult":
        return cls(success=False, diagnostic=diagnostic, **kwargs)


@dataclass
class ProcessOutput:
    """Captured outcome of one external compiler run."""

    returncode: Optional[int]
    stdout: str
    stderr: str
    timed_out: bool = False
    cancelled: bool = False


def run_compiler_process(
    cmd: Sequence[str],
    cwd: Path,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> ProcessOutput:
    """
    Run an external compiler, capturing both output streams.

    The process is killed when the timeout elapses or cancel is set; whatever
    output it produced up to then is still returned.

    Args:
        cmd: Executable and arguments
        cwd: Working directory for the process
        timeout: Seconds before the process is killed (None = no limit)
        cancel: Event that, once set, kills the process

    Returns:
        ProcessOutput (returncode is None if the process was killed)

    Raises:
        OSError: If the executable cannot be started
    """
    # Keep a console window from flashing up on Windows
    creationflags = subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0

    process = subprocess.Popen(
        list(cmd),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
        creationflags=creationflags,
    )

    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        try:
            stdout, stderr = process.communicate(timeout=POLL_INTERVAL_S)
            return ProcessOutput(returncode=process.returncode, stdout=stdout, stderr=stderr)
        except subprocess.TimeoutExpired:
            cancelled = cancel is not None and cancel.is_set()
            timed_out = deadline is not None and time.monotonic() >= deadline
            if not (cancelled or timed_out):
                continue

            process.kill()
            stdout, stderr = process.communicate()
            return ProcessOutput(
                returncode=None,
                stdout=stdout or "",
                stderr=stderr or "",
                timed_out=timed_out and not cancelled,
                cancelled=cancelled,
            )


def parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse LaTeX log file for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings)
    """
    errors = [match.group(1).strip() for match in ERROR_LINE_PATTERN.finditer(log_content)]

    for pattern in UNPREFIXED_ERROR_PATTERNS:
        match = pattern.search(log_content)
        if match and match.group(1).strip() not in errors:
            errors.append(match.group(1).strip())

    warnings = []
    for pattern in WARNING_PATTERNS:
        warnings.extend(match.group(1).strip() for match in pattern.finditer(log_content))

    return errors, warnings


def collect_log_diagnostics(output_path: Path) -> Tuple[List[str], List[str]]:
    """Errors and warnings from the .log file beside output_path, if one was written."""
    log_file = log_path(output_path)
    if not log_file.exists():
        return [], []

    try:
        # pdflatex writes log files in latin-1 (font metadata contains non-UTF-8)
        log_content = log_file.read_text(encoding="latin-1")
    except OSError:
        return [], []
    return parse_latex_log(log_content)


def last_nonempty_line(text: str) -> str:
    """Last line of text that is not blank, stripped ("" if none)."""
    for line in reversed(text.splitlines()):
        if line.strip():
            return line.strip()
    return ""
