#!/usr/bin/env python3
"""
PDF Compilation CLI

Compiles a LaTeX document to PDF through one of the compiler backends, the same
way the editor's preview pane does.

Commands:
    compile  - Compile a single LaTeX file to PDF
    backends - Show the configured backends and their output conventions

Examples:\n

    compile_pdf.py compile paper/main.tex                     # Configured backend

    compile_pdf.py compile paper/main.tex --backend sidecar   # Bundled compiler

    compile_pdf.py compile paper/main.tex --timeout 30 -v     # Verbose, 30s limit
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from texpane.contexts.rendering import (
    BackendChoice,
    CompileOrchestrator,
    EmbeddedLibraryBackend,
    InvalidPath,
    SidecarProcessBackend,
    SystemBinaryBackend,
)
from texpane.contexts.rendering.backends import (
    COMPILE_TIMEOUT_S,
    EMBEDDED_ENGINE,
    LATEX_COMPILER,
    SIDECAR_PATH,
    TEXPANE_BACKEND,
)
from texpane.utils.logger import setup_logger
from texpane.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Compile LaTeX documents to PDF with the editor's compiler backends",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    source: Annotated[
        Path,
        typer.Argument(help="LaTeX source file to compile"),
    ],
    backend: Annotated[
        Optional[BackendChoice],
        typer.Option(
            "--backend",
            "-b",
            help="Compiler backend (default: TEXPANE_BACKEND)",
            case_sensitive=False,
        ),
    ] = None,
    timeout: Annotated[
        float,
        typer.Option(
            "--timeout",
            "-t",
            help="Seconds before an external compiler is killed",
            min=1,
        ),
    ] = COMPILE_TIMEOUT_S,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed compilation output (compiler stdout/stderr)",
        ),
    ] = False,
):
    """
    Compile a LaTeX document to PDF.

    Examples:\n

        $ compile_pdf.py compile main.tex                      # Compile

        $ compile_pdf.py compile main.tex --backend system     # Force pdflatex

        $ compile_pdf.py compile main.tex --verbose            # Verbose output
    """
    choice = BackendChoice(backend or TEXPANE_BACKEND)
    log_dir = LOGS_PATH / f"compile_{now()}"
    setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Backend": choice.value},
        console_level="DEBUG" if verbose else "INFO",
    )

    if choice is BackendChoice.SYSTEM_BINARY:
        compiler_backend = SystemBinaryBackend(timeout=timeout)
    elif choice is BackendChoice.SIDECAR:
        compiler_backend = SidecarProcessBackend(timeout=timeout)
    else:
        compiler_backend = EmbeddedLibraryBackend()

    orchestrator = CompileOrchestrator(backend=compiler_backend, verbose=verbose)

    typer.secho(f"\nCompiling: {source}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Backend: {choice.value}")
    typer.echo("")

    try:
        result = orchestrator.compile(source)
    except InvalidPath as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo("")
    if result.success:
        typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  Warnings: {len(result.warnings)}")
        if verbose and result.warnings:
            for warning in result.warnings[:10]:
                typer.echo(f"  - {warning}")
            if len(result.warnings) > 10:
                typer.echo(f"  ... and {len(result.warnings) - 10} more")
        if result.page_count is not None:
            typer.echo(f"  Pages: {result.page_count}")
        typer.echo(f"  PDF: {result.output_path}")
    else:
        typer.secho("✗ Compilation failed", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {result.diagnostic}", fg=typer.colors.RED)
        if result.errors:
            typer.echo("\nErrors:")
            for error in result.errors[:10]:
                typer.secho(f"  - {error}", fg=typer.colors.RED)
            if len(result.errors) > 10:
                typer.echo(f"  ... and {len(result.errors) - 10} more")

    typer.echo(f"  Log: {log_dir / 'render.log'}")
    typer.echo("")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("backends")
def backends_command():
    """
    Show the configured compiler backends and where each writes its PDF.
    """
    typer.secho("\nCompiler backends", fg=typer.colors.BLUE, bold=True)
    rows = [
        (BackendChoice.SYSTEM_BINARY, LATEX_COMPILER, "<dir>/preview.pdf"),
        (BackendChoice.SIDECAR, str(SIDECAR_PATH), "<dir>/<stem>.pdf"),
        (BackendChoice.EMBEDDED, EMBEDDED_ENGINE or "(not configured)", "<dir>/<stem>.pdf"),
    ]
    for choice, target, output in rows:
        marker = "*" if choice.value == TEXPANE_BACKEND else " "
        typer.echo(f" {marker} {choice.value:<9} {target:<40} -> {output}")
    typer.echo(f"\nTimeout: {COMPILE_TIMEOUT_S:g}s")
    typer.echo("")


if __name__ == "__main__":
    app()
