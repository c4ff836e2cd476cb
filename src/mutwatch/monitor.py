"""OnMutate — a single value that reports its own changes.

Every write path (replace, mutate, guards) runs as one exclusive access to
the value. When the access ends, the value is compared with a snapshot taken
when it began; if they differ, exactly one Change is queued and the queue
drains before control returns to the caller. A change made from inside the
observer is queued behind the one being delivered and handed over by the
same drain, in order.
"""

from __future__ import annotations

import copy
from typing import Callable, Generic, TypeVar

from mutwatch._cell import Cell
from mutwatch._queue import Callback, CallbackSlot, EventQueue
from mutwatch.guard import MutationGuard

T = TypeVar("T")
R = TypeVar("R")


class OnMutate(Generic[T]):
    """Observable wrapper around one value with one observer.

    Usage:
        seen = []
        counter = OnMutate(0, seen.append)

        counter.replace(1)
        # seen == [Change(old=0, new=1, tag=None)]

        with counter.with_tag("bump") as g:
            g.value += 1
        # seen[-1] == Change(old=1, new=2, tag='bump')

        counter.replace(2)
        # no change, nothing delivered
    """

    __slots__ = ("_cell", "_slot", "_queue", "__weakref__")

    def __init__(
        self,
        value: T,
        callback: Callback[T] | None,
        *,
        copier: Callable[[T], T] = copy.deepcopy,
    ) -> None:
        self._slot: CallbackSlot[T] = CallbackSlot(callback)
        self._queue: EventQueue[T] = EventQueue(self._slot)
        self._cell: Cell[T] = Cell(value, copier, self._queue.enqueue)

    def get(self) -> T:
        """A copy of the current value."""
        return self._cell.snapshot()

    @property
    def value(self) -> T:
        return self.get()

    def replace(self, new_value: T) -> None:
        """Swap in new_value. Notifies if it differs from the current value.

        The monitor keeps its own copy; later changes to new_value by the
        caller do not reach the monitored value.
        """
        owned = self._cell.copy(new_value)

        def _assign(guard: MutationGuard[T]) -> None:
            guard.value = owned

        self.mutate(_assign)

    def mutate(
        self, fn: Callable[[MutationGuard[T]], R], *, tag: str | None = None
    ) -> R:
        """Run fn with write access to the value; notify once if it changed.

        fn receives a guard whose `.value` is the live value. Mutate it in
        place or assign `guard.value`. fn's result is returned either way.
        If fn raises, the value is restored and nothing is emitted.
        """
        with MutationGuard(self._cell, tag) as guard:
            return fn(guard)

    def with_guard(self) -> MutationGuard[T]:
        """Untagged guard. Notifies on release if the value changed."""
        return MutationGuard(self._cell)

    def with_tag(self, tag: str) -> MutationGuard[T]:
        """Tagged guard. The tag is attached to the Change, if any."""
        return MutationGuard(self._cell, tag)

    def set_callback(self, callback: Callback[T] | None) -> None:
        """Install a new observer. Takes effect from the next batch."""
        self._slot.replace(callback)

    def flush(self) -> None:
        """Deliver changes left pending by an observer that raised."""
        self._queue.drain()

    @property
    def pending_count(self) -> int:
        """Number of changes waiting for delivery. Useful for testing."""
        return len(self._queue)

    @property
    def draining(self) -> bool:
        return self._queue.draining

    def __repr__(self) -> str:
        state = "draining" if self._queue.draining else "idle"
        return f"OnMutate(<value>, pending={len(self._queue)}, {state})"
