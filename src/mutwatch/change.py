"""Change records — what the observer receives.

A Change is built once, when a monitor detects that its value differs from
the snapshot taken at the start of an operation, and is never modified
afterwards. Both values are independent copies of the monitored value.
"""

from __future__ import annotations

import copy
from typing import Generic, TypeVar

T = TypeVar("T")


class Change(Generic[T]):
    """Immutable record of one detected change: old value, new value, tag."""

    __slots__ = ("old", "new", "tag")

    old: T
    new: T
    tag: str | None

    def __init__(self, old: T, new: T, tag: str | None = None) -> None:
        object.__setattr__(self, "old", old)
        object.__setattr__(self, "new", new)
        object.__setattr__(self, "tag", tag)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Change is immutable (cannot set {name!r})")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Change is immutable (cannot delete {name!r})")

    # copy and pickle rebuild slotted objects via setattr; go through __init__.
    def __reduce__(self):
        return (Change, (self.old, self.new, self.tag))

    def __copy__(self) -> Change[T]:
        return Change(self.old, self.new, self.tag)

    def __deepcopy__(self, memo: dict) -> Change[T]:
        result = Change(
            copy.deepcopy(self.old, memo),
            copy.deepcopy(self.new, memo),
            self.tag,
        )
        memo[id(self)] = result
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Change):
            return NotImplemented
        return (self.old, self.new, self.tag) == (other.old, other.new, other.tag)

    def __hash__(self) -> int:
        return hash((self.old, self.new, self.tag))

    def __repr__(self) -> str:
        return f"Change(old={self.old!r}, new={self.new!r}, tag={self.tag!r})"
