from __future__ import annotations


class EdfFormatError(ValueError):
    """Raised when header fields make the record offset arithmetic degenerate."""


class EdfStateError(RuntimeError):
    """Raised when session steps are called out of order or re-invoked."""
