"""
Rendering Context

Responsibilities:
- Compiles LaTeX to PDF through the configured backend
- Derives output paths per backend convention
- Handles compiler errors and provides diagnostic information

Owns: Backend selection, PDF generation, compile diagnostics
Never: Edits document content
"""

from texpane.contexts.rendering.backends import (
    BackendChoice,
    CompilerBackend,
    EmbeddedLibraryBackend,
    SidecarProcessBackend,
    SystemBinaryBackend,
    build_backend,
)
from texpane.contexts.rendering.compiler import CompileRequest, CompileResult
from texpane.contexts.rendering.exceptions import CompileFailure, InvalidPath
from texpane.contexts.rendering.orchestrator import CompileOrchestrator

__all__ = [
    "BackendChoice",
    "CompileFailure",
    "CompileOrchestrator",
    "CompileRequest",
    "CompileResult",
    "CompilerBackend",
    "EmbeddedLibraryBackend",
    "InvalidPath",
    "SidecarProcessBackend",
    "SystemBinaryBackend",
    "build_backend",
]
