"""
Shared utilities for texpane.

Common functionality used across contexts:
- Logger setup
- Timestamps
- PDF inspection
"""

from texpane.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
