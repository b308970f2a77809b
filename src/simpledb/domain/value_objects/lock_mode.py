"""Lock modes for the read/write guards."""

from __future__ import annotations

from enum import Enum, auto


class LockMode(Enum):
    """Lock modes.

    Compatibility matrix:
           S    X
        S  ✓    ✗
        X  ✗    ✗
    """

    SHARED = auto()
    """Shared lock for readers."""

    EXCLUSIVE = auto()
    """Exclusive lock for writers."""

    @staticmethod
    def is_compatible(held: LockMode, requested: LockMode) -> bool:
        """Check if two lock modes can be held at the same time."""
        return held == LockMode.SHARED and requested == LockMode.SHARED
