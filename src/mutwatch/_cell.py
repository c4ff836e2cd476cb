"""Exclusive access cell — the storage behind every monitor.

Holds the monitored value and enforces that at most one exclusive access is
outstanding. An access is represented by an AccessToken carrying a snapshot
of the value at acquisition; releasing the token compares that snapshot with
the value now and hands a Change to the sink when they differ.

The release always completes before the sink is called, so whatever the sink
does (draining the queue, running the observer) can acquire the cell again.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from mutwatch._errors import BorrowError
from mutwatch.change import Change

T = TypeVar("T")


class AccessToken(Generic[T]):
    """Proof of an outstanding exclusive access, with the value it started from."""

    __slots__ = ("old",)

    def __init__(self, old: T) -> None:
        self.old = old

    def __repr__(self) -> str:
        return "AccessToken(<snapshot>)"


class Cell(Generic[T]):
    """Single-value container with one-at-a-time exclusive access."""

    __slots__ = ("_value", "_token", "_copier", "_sink")

    def __init__(
        self,
        value: T,
        copier: Callable[[T], T],
        sink: Callable[[Change[T]], None],
    ) -> None:
        self._value = copier(value)
        self._token: AccessToken[T] | None = None
        self._copier = copier
        self._sink = sink

    @property
    def held(self) -> bool:
        return self._token is not None

    def copy(self, value: T) -> T:
        """An independent copy of value, made with this cell's copier."""
        return self._copier(value)

    def snapshot(self) -> T:
        """Copy of the current value. Allowed at any time."""
        return self._copier(self._value)

    def begin_exclusive(self) -> AccessToken[T]:
        """Start an exclusive access. Raises BorrowError if one is outstanding."""
        if self._token is not None:
            raise BorrowError("value is already exclusively accessed")
        token = AccessToken(self._copier(self._value))
        self._token = token
        return token

    def get_live(self, token: AccessToken[T]) -> T:
        self._check(token)
        return self._value

    def set_live(self, token: AccessToken[T], value: T) -> None:
        self._check(token)
        self._value = value

    def end_exclusive(self, token: AccessToken[T], tag: str | None = None) -> None:
        """Release the access; emit a Change to the sink if the value differs."""
        self._check(token)
        try:
            old, now = token.old, self._value
            changed = old is not now and old != now
            event = Change(old, self._copier(now), tag) if changed else None
        finally:
            self._token = None

        if event is not None:
            self._sink(event)

    def rollback(self, token: AccessToken[T]) -> None:
        """Restore the value the access started from and release. No event."""
        self._check(token)
        self._value = token.old
        self._token = None

    def _check(self, token: AccessToken[T]) -> None:
        if token is not self._token:
            raise BorrowError("access token is not the outstanding one")
