"""Event queue and drain loop — the reentrancy core of mutwatch.

Changes are appended to a FIFO list and delivered by a drain loop. Only one
drain runs per queue: a change enqueued while the observer is running (the
observer mutated the same monitor) lands in the pending list and is picked
up by the loop already on the stack, so nesting never turns into recursion.

Each pass snapshots and clears the pending list, takes the callback out of
its slot, delivers the batch, then puts the callback back unless a new one
was installed meanwhile.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from mutwatch.change import Change

T = TypeVar("T")

Callback = Callable[[Change[T]], None]

logger = logging.getLogger("mutwatch.queue")


class CallbackSlot(Generic[T]):
    """Owns the observer. Emptied while a batch is being delivered."""

    __slots__ = ("_callback",)

    def __init__(self, callback: Callback[T] | None) -> None:
        self._callback = callback

    @property
    def empty(self) -> bool:
        return self._callback is None

    def take(self) -> Callback[T] | None:
        callback, self._callback = self._callback, None
        return callback

    def restore(self, callback: Callback[T] | None) -> None:
        """Put callback back, unless the slot was refilled in the meantime."""
        if self._callback is None:
            self._callback = callback

    def replace(self, callback: Callback[T] | None) -> None:
        self._callback = callback


class EventQueue(Generic[T]):
    """Ordered buffer of pending changes plus the loop that delivers them."""

    __slots__ = ("_pending", "_slot", "_draining")

    def __init__(self, slot: CallbackSlot[T]) -> None:
        self._pending: list[Change[T]] = []
        self._slot = slot
        self._draining = False

    @property
    def draining(self) -> bool:
        return self._draining

    def __len__(self) -> int:
        return len(self._pending)

    def enqueue(self, event: Change[T]) -> None:
        self._pending.append(event)
        self.drain()

    def drain(self) -> None:
        """Deliver pending changes. No-op if a drain is already running."""
        if self._draining:
            return

        self._draining = True
        try:
            while self._pending:
                # Snapshot and clear; the observer may enqueue during delivery.
                batch = self._pending
                self._pending = []
                logger.debug("Delivering batch of %d change(s)", len(batch))
                self._deliver(batch)
        finally:
            self._draining = False

    def _deliver(self, batch: list[Change[T]]) -> None:
        callback = self._slot.take()
        delivered = 0
        try:
            for event in batch:
                delivered += 1
                if callback is not None:
                    callback(event)
        except BaseException:
            remainder = batch[delivered:]
            if remainder:
                logger.debug(
                    "Observer raised; re-queued %d undelivered change(s)",
                    len(remainder),
                )
                self._pending[:0] = remainder
            raise
        finally:
            self._slot.restore(callback)
