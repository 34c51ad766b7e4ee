"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Current local time as a compact, filesystem-safe stamp (e.g. "20251114_123456")."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """Current local time in ISO 8601 format with microseconds."""
    return datetime.now().isoformat()

