"""
Compile orchestration.

Validates the source path, hands the request to the configured backend and
turns the backend's result into either an artifact path or a CompileFailure.
The backend is fixed when the orchestrator is built; requests never choose it.
"""

import asyncio
import threading
from pathlib import Path
from typing import Optional, Union

from texpane.contexts.rendering.backends import BackendChoice, CompilerBackend, build_backend
from texpane.contexts.rendering.compiler import CompileRequest, CompileResult
from texpane.contexts.rendering.exceptions import CompileFailure
from texpane.contexts.rendering.logger import (
    _log_debug,
    log_compilation_result,
    log_compilation_start,
)
from texpane.contexts.rendering.paths import resolve_source, source_stem
from texpane.utils.pdf_processing import page_count

FAILURE_HEADLINE = "Compilation failed. Check logs for details."


class CompileOrchestrator:
    """
    Single entry point for compiling documents.

    Usage:
        orchestrator = CompileOrchestrator()                   # backend from TEXPANE_BACKEND
        pdf = orchestrator.compile_preview("/work/thesis.tex")  # raises CompileFailure

        pdf = await orchestrator.compile_preview_async("/work/thesis.tex")
    """

    def __init__(
        self,
        backend: Optional[CompilerBackend] = None,
        choice: Union[BackendChoice, str, None] = None,
        verbose: bool = False,
    ):
        self.backend = backend if backend is not None else build_backend(choice)
        self.verbose = verbose

    def compile(
        self, source_path: Union[str, Path], cancel: Optional[threading.Event] = None
    ) -> CompileResult:
        """
        Compile a document and return the full result.

        A backend success whose artifact does not exist is reported as a failure.

        Raises:
            InvalidPath: If source_path has no usable parent directory or file stem
        """
        source = resolve_source(source_path)
        source_stem(source)

        request = CompileRequest(source_path=source)
        log_compilation_start(source, self.backend.name, self.backend.output_path_for(source))

        result = self.backend.compile(request, cancel=cancel)

        if result.success:
            if result.output_path.exists():
                result.page_count = page_count(result.output_path)
            else:
                result = CompileResult.failed(
                    f"PDF file was not generated: {result.output_path}",
                    stdout=result.stdout,
                    stderr=result.stderr,
                    errors=result.errors,
                    warnings=result.warnings,
                    elapsed_s=result.elapsed_s,
                    backend=result.backend,
                )

        log_compilation_result(source, result, verbose=self.verbose)
        return result

    def compile_preview(
        self, source_path: Union[str, Path], cancel: Optional[threading.Event] = None
    ) -> str:
        """
        Compile a document and return the absolute path of the artifact.

        Raises:
            InvalidPath: If source_path has no usable parent directory or file stem
            CompileFailure: If the backend failed; carries the CompileResult
        """
        result = self.compile(source_path, cancel=cancel)
        if not result.success:
            raise CompileFailure(describe_failure(result), result=result)
        return str(result.output_path.absolute())

    async def compile_preview_async(self, source_path: Union[str, Path]) -> str:
        """
        compile_preview() on a worker thread, keeping the event loop responsive.

        Cancelling the awaiting task kills the running compiler process.
        """
        cancel = threading.Event()
        try:
            return await asyncio.to_thread(self.compile_preview, source_path, cancel)
        except asyncio.CancelledError:
            _log_debug(f"Compilation of {source_path} cancelled by caller")
            cancel.set()
            raise


def describe_failure(result: CompileResult) -> str:
    """One message for the presentation layer: headline, diagnostic, first LaTeX error."""
    parts = [FAILURE_HEADLINE, result.diagnostic]
    if result.errors and result.errors[0] not in result.diagnostic:
        parts.append(f"First error: {result.errors[0]}")
    return "\n".join(parts)
