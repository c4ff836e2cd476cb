"""Mutwatch error hierarchy.

All mutwatch-specific errors inherit from MutwatchError for easy catching.
Both concrete errors signal programmer misuse and are never caught by the
library itself.
"""


class MutwatchError(Exception):
    """Base error for all mutwatch operations."""


class BorrowError(MutwatchError, RuntimeError):
    """A second exclusive access was requested while one is outstanding."""


class ReleasedError(MutwatchError, RuntimeError):
    """A guard was used after it released its access."""
