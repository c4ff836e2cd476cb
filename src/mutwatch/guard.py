"""Scoped mutation guards.

A MutationGuard holds the monitor's exclusive access from creation until
release. While held, `.value` reads and writes the live value directly.
Release compares against the snapshot taken at acquisition and notifies if
the value changed. It happens exactly once, whichever comes first:

- an explicit `release()`
- the end of a `with` block
- finalization of a guard that was never released (emits a ResourceWarning;
  an observer error raised on that path cannot propagate and is reported by
  the interpreter as an ignored exception)

If a `with` block exits with an exception, the value is rolled back to the
snapshot and nothing is emitted.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Generic, TypeVar

from mutwatch._errors import ReleasedError

if TYPE_CHECKING:
    from mutwatch._cell import AccessToken, Cell

T = TypeVar("T")

logger = logging.getLogger("mutwatch.guard")


class MutationGuard(Generic[T]):
    """Read/write handle on a monitored value; notifies on release."""

    __slots__ = ("_cell", "_token", "_tag")

    def __init__(self, cell: Cell[T], tag: str | None = None) -> None:
        self._cell = cell
        self._token: AccessToken[T] | None = cell.begin_exclusive()
        self._tag = tag

    @property
    def tag(self) -> str | None:
        return self._tag

    @property
    def released(self) -> bool:
        return self._token is None

    @property
    def value(self) -> T:
        return self._cell.get_live(self._held())

    @value.setter
    def value(self, value: T) -> None:
        self._cell.set_live(self._held(), value)

    def release(self) -> None:
        """Release the access and notify if the value changed. Idempotent."""
        token, self._token = self._token, None
        if token is not None:
            self._cell.end_exclusive(token, self._tag)

    def rollback(self) -> None:
        """Discard changes made through this guard and release. Idempotent."""
        token, self._token = self._token, None
        if token is not None:
            logger.debug("Rolling back guarded mutation (tag=%r)", self._tag)
            self._cell.rollback(token)

    def _held(self) -> AccessToken[T]:
        if self._token is None:
            raise ReleasedError("guard already released")
        return self._token

    def __enter__(self) -> MutationGuard[T]:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.release()
        else:
            self.rollback()

    def __del__(self) -> None:
        # Partially constructed guards (begin_exclusive raised) have no token.
        if getattr(self, "_token", None) is None:
            return
        warnings.warn(
            f"{self!r} was never released; releasing on finalization",
            ResourceWarning,
            stacklevel=2,
        )
        logger.warning("Guard (tag=%r) released by finalizer", self._tag)
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._token is None else "held"
        return f"MutationGuard(tag={self._tag!r}, {state})"
