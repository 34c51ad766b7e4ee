"""Unit tests for CompileOrchestrator with an in-memory backend."""

import asyncio
import threading
import time
from pathlib import Path
from typing import Optional

import pytest

from texpane.contexts.rendering.backends import CompilerBackend, SystemBinaryBackend
from texpane.contexts.rendering.compiler import CompileRequest, CompileResult
from texpane.contexts.rendering.exceptions import CompileFailure, InvalidPath
from texpane.contexts.rendering.orchestrator import (
    FAILURE_HEADLINE,
    CompileOrchestrator,
    describe_failure,
)


class RecordingBackend(CompilerBackend):
    """Backend that writes a stub PDF (or fails) and records its requests."""

    name = "recording"

    def __init__(self, fail_with: Optional[str] = None, write_output: bool = True):
        self.fail_with = fail_with
        self.write_output = write_output
        self.requests = []

    def output_path_for(self, source_path: Path) -> Path:
        return source_path.with_suffix(".pdf")

    def compile(self, request: CompileRequest, cancel: Optional[threading.Event] = None):
        self.requests.append(request)
        if self.fail_with:
            return CompileResult.failed(
                self.fail_with, stderr="captured stderr", errors=["Missing $ inserted."]
            )
        output_path = self.output_path_for(request.source_path)
        if self.write_output:
            output_path.write_bytes(b"%PDF-1.4\n%%EOF\n")
        return CompileResult.succeeded(output_path, stdout="captured stdout")


@pytest.mark.unit
def test_compile_preview_returns_absolute_artifact_path(valid_tex):
    """Test that a successful compile returns the artifact path as a string."""
    backend = RecordingBackend()
    orchestrator = CompileOrchestrator(backend=backend)

    output = orchestrator.compile_preview(str(valid_tex))

    assert output == str(valid_tex.with_suffix(".pdf"))
    assert Path(output).is_absolute()
    assert Path(output).exists()
    assert backend.requests == [CompileRequest(source_path=valid_tex)]


@pytest.mark.unit
def test_compile_preview_failure_wraps_diagnostic(valid_tex):
    """Test that a backend failure becomes a CompileFailure carrying the result."""
    backend = RecordingBackend(fail_with="! Undefined control sequence.")
    orchestrator = CompileOrchestrator(backend=backend)

    with pytest.raises(CompileFailure) as exc_info:
        orchestrator.compile_preview(valid_tex)

    message = str(exc_info.value)
    assert message.startswith(FAILURE_HEADLINE)
    assert "! Undefined control sequence." in message
    assert "First error: Missing $ inserted." in message
    assert exc_info.value.result.stderr == "captured stderr"


@pytest.mark.unit
def test_missing_artifact_is_a_failure(valid_tex):
    """Test that a reported success without an artifact never returns a path."""
    orchestrator = CompileOrchestrator(backend=RecordingBackend(write_output=False))

    result = orchestrator.compile(valid_tex)

    assert result.success is False
    assert result.output_path is None
    assert "PDF file was not generated" in result.diagnostic
    assert result.stdout == "captured stdout"

    with pytest.raises(CompileFailure):
        orchestrator.compile_preview(valid_tex)


@pytest.mark.unit
def test_invalid_path_never_reaches_backend(tmp_path):
    """Test that path validation happens before the backend is invoked."""
    backend = RecordingBackend()
    orchestrator = CompileOrchestrator(backend=backend)

    with pytest.raises(InvalidPath):
        orchestrator.compile_preview(tmp_path / "missing-dir" / "main.tex")
    with pytest.raises(InvalidPath):
        orchestrator.compile_preview("")

    assert backend.requests == []


@pytest.mark.unit
def test_unreadable_pdf_has_no_page_count(valid_tex):
    """Test that a stub artifact is still a success with an unknown page count."""
    result = CompileOrchestrator(backend=RecordingBackend()).compile(valid_tex)

    assert result.success is True
    assert result.page_count is None


@pytest.mark.unit
def test_backend_is_chosen_at_construction():
    """Test that the orchestrator builds the configured backend once."""
    orchestrator = CompileOrchestrator(choice="system")
    assert isinstance(orchestrator.backend, SystemBinaryBackend)


@pytest.mark.unit
def test_compile_preview_async(valid_tex):
    """Test the async boundary returns the same path as the sync call."""
    orchestrator = CompileOrchestrator(backend=RecordingBackend())

    output = asyncio.run(orchestrator.compile_preview_async(valid_tex))

    assert output == str(valid_tex.with_suffix(".pdf"))


@pytest.mark.unit
def test_compile_preview_async_does_not_block_loop(valid_tex):
    """Test that other coroutines keep running while a compile is in flight."""

    class SlowBackend(RecordingBackend):
        def compile(self, request, cancel=None):
            threading.Event().wait(0.3)
            return super().compile(request, cancel)

    orchestrator = CompileOrchestrator(backend=SlowBackend())
    ticks = []

    async def ticker():
        for _ in range(3):
            ticks.append(1)
            await asyncio.sleep(0.01)

    async def scenario():
        compile_task = asyncio.create_task(orchestrator.compile_preview_async(valid_tex))
        await ticker()
        assert not compile_task.done()
        return await compile_task

    assert asyncio.run(scenario()).endswith(".pdf")
    assert len(ticks) == 3


@pytest.mark.integration
def test_cancelling_async_compile_kills_process(hanging_compiler, valid_tex):
    """Test that cancelling the awaiting task stops the external compiler."""
    orchestrator = CompileOrchestrator(
        backend=SystemBinaryBackend(executable=hanging_compiler, timeout=None)
    )

    async def scenario():
        task = asyncio.create_task(orchestrator.compile_preview_async(valid_tex))
        await asyncio.sleep(0.5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    start = time.monotonic()
    asyncio.run(scenario())
    # asyncio.run waits for the worker thread, which only returns once the process is gone
    assert time.monotonic() - start < 10


@pytest.mark.unit
def test_describe_failure_skips_duplicate_error():
    result = CompileResult.failed("Missing } inserted.", errors=["Missing } inserted."])
    assert describe_failure(result) == f"{FAILURE_HEADLINE}\nMissing }} inserted."
