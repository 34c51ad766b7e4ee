"""
texpane - compilation and workspace-sync core for a LaTeX desktop editor

Keeps a directory tree in sync with the filesystem and compiles documents to PDF
through interchangeable compiler backends.

Architecture:
- Workspace Context: Directory listing, file operations, filesystem watching
- Rendering Context: Backend selection, PDF compilation, diagnostics
- Commands: Boundary layer consumed by the presentation layer
"""

__version__ = "0.1.0"
