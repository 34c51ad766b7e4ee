"""Base exception shared by all contexts."""


class TexpaneError(Exception):
    """Base class for errors surfaced to the presentation layer as messages."""
