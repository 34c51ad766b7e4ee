"""PDF inspection helpers for compiled artifacts."""

from pathlib import Path
from typing import Optional

from loguru import logger
from PyPDF2 import PdfReader


def page_count(pdf_path: Path) -> Optional[int]:
    """Get page count from PDF, or None if unreadable."""
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except Exception as e:
        # PyPDF2 raises a range of types for damaged files, not only PdfReadError
        logger.debug(f"Cannot read page count of {pdf_path}: {type(e).__name__}: {e}")
        return None
