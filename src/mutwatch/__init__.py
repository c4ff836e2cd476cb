"""mutwatch: watch a single value and get told when it actually changes."""

from importlib.metadata import version as _version

__version__ = _version("mutwatch")

from mutwatch._errors import MutwatchError, BorrowError, ReleasedError
from mutwatch.change import Change
from mutwatch.guard import MutationGuard
from mutwatch.monitor import OnMutate

__all__ = [
    "OnMutate",
    "Change",
    "MutationGuard",
    "MutwatchError",
    "BorrowError",
    "ReleasedError",
]
