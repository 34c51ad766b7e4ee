"""
Compiler backends.

Three interchangeable ways to turn a .tex file into a PDF, chosen once at
configuration time:

- SystemBinaryBackend: a compiler found on the system (pdflatex by default),
  run with a fixed job name so the artifact is always <dir>/preview.pdf
- SidecarProcessBackend: a compiler executable bundled with the application
  (tectonic by default), writing <dir>/<stem>.pdf
- EmbeddedLibraryBackend: an in-process engine called with the source text,
  whose returned bytes are written to <dir>/<stem>.pdf

All backends return a CompileResult instead of raising, and capture stdout and
stderr on success as well as on failure.
"""

import contextlib
import importlib
import io
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from dotenv import load_dotenv

from texpane.contexts.rendering.compiler import (
    CompileRequest,
    CompileResult,
    ProcessOutput,
    collect_log_diagnostics,
    last_nonempty_line,
    run_compiler_process,
)
from texpane.contexts.rendering.logger import (
    _log_debug,
    _log_error,
    log_process_output,
)
from texpane.contexts.rendering.paths import (
    PREVIEW_JOBNAME,
    jobname_output_path,
    log_path,
    stem_output_path,
)

load_dotenv()

_SIDECAR_NAME = "tectonic.exe" if sys.platform == "win32" else "tectonic"
_BUNDLED_SIDECAR = Path(__file__).resolve().parents[2] / "bin" / _SIDECAR_NAME

TEXPANE_BACKEND = os.getenv("TEXPANE_BACKEND", "system")
LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
SIDECAR_PATH = Path(os.getenv("SIDECAR_PATH", str(_BUNDLED_SIDECAR)))
EMBEDDED_ENGINE = os.getenv("EMBEDDED_ENGINE", "")
COMPILE_TIMEOUT_S = float(os.getenv("COMPILE_TIMEOUT_S", "120"))

# In-process engine: full source text in, PDF bytes out
Engine = Callable[[str], bytes]

# Held around each engine call; stdout/stderr redirection replaces the process-wide streams
_ENGINE_LOCK = threading.Lock()


class BackendChoice(str, Enum):
    SYSTEM_BINARY = "system"
    SIDECAR = "sidecar"
    EMBEDDED = "embedded"


class CompilerBackend(ABC):
    """Common contract: compile one whole document into one artifact."""

    name: str = ""

    @abstractmethod
    def output_path_for(self, source_path: Path) -> Path:
        """Where this backend writes the artifact for source_path."""

    @abstractmethod
    def compile(
        self, request: CompileRequest, cancel: Optional[threading.Event] = None
    ) -> CompileResult:
        """Compile request.source_path. Never raises for compilation problems."""


class SubprocessBackend(CompilerBackend):
    """
    Backend that runs an external compiler executable.

    Subclasses supply the command line and how a failure diagnostic is pulled
    out of the captured streams. The process runs in the output directory and
    is killed after timeout seconds or when cancel is set.
    """

    label: str = "COMPILER"

    def __init__(
        self, executable: Union[str, Path], timeout: Optional[float] = COMPILE_TIMEOUT_S
    ):
        self.executable = str(executable)
        self.timeout = timeout

    @abstractmethod
    def build_command(self, source_path: Path, output_path: Path) -> List[str]:
        """Argument list for one compilation."""

    @abstractmethod
    def diagnostic_from(self, output: ProcessOutput) -> str:
        """Failure text for a run that exited with non-zero status."""

    def compile(
        self, request: CompileRequest, cancel: Optional[threading.Event] = None
    ) -> CompileResult:
        source_path = request.source_path
        output_path = self.output_path_for(source_path)

        # A log left by an earlier run would be mistaken for this run's diagnostics
        stale_log = log_path(output_path)
        try:
            stale_log.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            _log_error(f"Cannot remove stale log {stale_log}: {e}")
            return CompileResult.failed(
                f"Cannot remove stale log {stale_log}: {e}", backend=self.name
            )

        cmd = self.build_command(source_path, output_path)
        _log_debug(f"Running: {' '.join(cmd)}")

        start_time = time.time()
        try:
            output = run_compiler_process(
                cmd, cwd=output_path.parent, timeout=self.timeout, cancel=cancel
            )
        except OSError as e:
            _log_error(f"Failed to execute {self.executable}: {e}")
            return CompileResult.failed(
                f"Failed to execute {self.executable}: {e}",
                elapsed_s=time.time() - start_time,
                backend=self.name,
            )
        elapsed_s = time.time() - start_time

        log_process_output(self.label, output.stdout, output.stderr)
        errors, warnings = collect_log_diagnostics(output_path)
        details = dict(
            stdout=output.stdout,
            stderr=output.stderr,
            errors=errors,
            warnings=warnings,
            elapsed_s=elapsed_s,
            backend=self.name,
        )

        if output.cancelled:
            return CompileResult.failed("Compilation cancelled", **details)
        if output.timed_out:
            timeout_message = f"Compilation timed out after {self.timeout:g}s"
            return CompileResult.failed(timeout_message, **details)
        if output.returncode != 0:
            _log_debug(f"{self.label} exited with code: {output.returncode}")
            diagnostic = self.diagnostic_from(output)
            if not diagnostic:
                diagnostic = f"{self.label} exited with status {output.returncode}"
            return CompileResult.failed(diagnostic, **details)

        return CompileResult.succeeded(output_path, **details)


class SystemBinaryBackend(SubprocessBackend):
    """
    System-installed compiler (pdflatex-compatible command line).

    Output always lands at <source dir>/preview.pdf, whatever the source is called.
    """

    name = BackendChoice.SYSTEM_BINARY.value
    label = "PDFLATEX"

    def __init__(
        self,
        executable: Union[str, Path] = LATEX_COMPILER,
        timeout: Optional[float] = COMPILE_TIMEOUT_S,
        jobname: str = PREVIEW_JOBNAME,
    ):
        super().__init__(executable, timeout)
        self.jobname = jobname

    def output_path_for(self, source_path: Path) -> Path:
        return jobname_output_path(source_path, self.jobname)

    def build_command(self, source_path: Path, output_path: Path) -> List[str]:
        return [
            self.executable,
            "-interaction=nonstopmode",
            "-output-directory",
            str(output_path.parent),
            f"-jobname={self.jobname}",
            str(source_path),
        ]

    def diagnostic_from(self, output: ProcessOutput) -> str:
        snippet = last_nonempty_line(output.stdout)
        return f"STDOUT Snippet: {snippet}" if snippet else ""


class SidecarProcessBackend(SubprocessBackend):
    """
    Compiler executable shipped with the application.

    Output lands at <source dir>/<source stem>.pdf.
    """

    name = BackendChoice.SIDECAR.value
    label = "SIDECAR"

    def __init__(
        self,
        executable: Union[str, Path] = SIDECAR_PATH,
        timeout: Optional[float] = COMPILE_TIMEOUT_S,
    ):
        super().__init__(executable, timeout)

    def output_path_for(self, source_path: Path) -> Path:
        return stem_output_path(source_path)

    def build_command(self, source_path: Path, output_path: Path) -> List[str]:
        return [self.executable, "--outdir", str(output_path.parent), str(source_path)]

    def diagnostic_from(self, output: ProcessOutput) -> str:
        return output.stderr.strip()


def load_engine(engine_spec: str) -> Engine:
    """
    Import an engine given as "package.module:function".

    Raises:
        ValueError: If engine_spec is malformed or does not name a callable
        ImportError: If the module cannot be imported
    """
    module_name, _, attribute = engine_spec.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Engine must be given as 'module:function', got: {engine_spec!r}")

    module = importlib.import_module(module_name)
    engine = getattr(module, attribute, None)
    if not callable(engine):
        raise ValueError(f"Engine {engine_spec!r} is not callable")
    return engine


class EmbeddedLibraryBackend(CompilerBackend):
    """
    In-process compilation.

    The engine receives the full source text and returns the PDF as bytes;
    this backend writes them to <source dir>/<source stem>.pdf. Anything the
    engine prints is captured as stdout/stderr. One engine call runs at a time
    per process. The engine cannot be interrupted, so cancel only prevents the
    artifact from being written.
    """

    name = BackendChoice.EMBEDDED.value

    def __init__(self, engine: Optional[Engine] = None, engine_spec: str = EMBEDDED_ENGINE):
        self._engine = engine
        self.engine_spec = engine_spec

    def output_path_for(self, source_path: Path) -> Path:
        return stem_output_path(source_path)

    def _resolve_engine(self) -> Engine:
        if self._engine is None:
            if not self.engine_spec:
                raise ValueError("No embedded engine configured (set EMBEDDED_ENGINE)")
            self._engine = load_engine(self.engine_spec)
        return self._engine

    def compile(
        self, request: CompileRequest, cancel: Optional[threading.Event] = None
    ) -> CompileResult:
        source_path = request.source_path
        output_path = self.output_path_for(source_path)
        start_time = time.time()

        try:
            engine = self._resolve_engine()
        except (ImportError, ValueError) as e:
            _log_error(f"Embedded engine unavailable: {e}")
            return CompileResult.failed(f"Embedded engine unavailable: {e}", backend=self.name)

        try:
            source_text = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return CompileResult.failed(f"Failed to read source: {e}", backend=self.name)

        stdout, stderr = io.StringIO(), io.StringIO()
        try:
            with _ENGINE_LOCK:
                with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
                    pdf_bytes = engine(source_text)
        except Exception as e:
            log_process_output("ENGINE", stdout.getvalue(), stderr.getvalue())
            return CompileResult.failed(
                str(e) or type(e).__name__,
                stdout=stdout.getvalue(),
                stderr=stderr.getvalue(),
                elapsed_s=time.time() - start_time,
                backend=self.name,
            )

        log_process_output("ENGINE", stdout.getvalue(), stderr.getvalue())
        details = dict(
            stdout=stdout.getvalue(),
            stderr=stderr.getvalue(),
            elapsed_s=time.time() - start_time,
            backend=self.name,
        )

        if cancel is not None and cancel.is_set():
            return CompileResult.failed("Compilation cancelled", **details)
        if not isinstance(pdf_bytes, (bytes, bytearray)):
            return CompileResult.failed(
                f"Embedded engine returned {type(pdf_bytes).__name__}, expected bytes", **details
            )

        try:
            output_path.write_bytes(bytes(pdf_bytes))
        except OSError as e:
            return CompileResult.failed(f"Failed to write {output_path}: {e}", **details)

        return CompileResult.succeeded(output_path, **details)


def build_backend(choice: Union[BackendChoice, str, None] = None) -> CompilerBackend:
    """
    Construct the configured backend.

    Args:
        choice: Backend to build (default: TEXPANE_BACKEND environment variable)

    Raises:
        ValueError: If choice is not a known backend
    """
    choice = BackendChoice(choice or TEXPANE_BACKEND)

    if choice is BackendChoice.SYSTEM_BINARY:
        return SystemBinaryBackend()
    if choice is BackendChoice.SIDECAR:
        return SidecarProcessBackend()
    return EmbeddedLibraryBackend()
