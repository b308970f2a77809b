"""Domain services.

Services implement domain logic that doesn't naturally fit within a
single entity.
"""

from simpledb.domain.services.lock_manager import ReadWriteLock
from simpledb.domain.services.recovery_service import (
    RecoveryService,
    RecoveryStats,
    ReplayTarget,
)

__all__ = [
    "ReadWriteLock",
    "RecoveryService",
    "RecoveryStats",
    "ReplayTarget",
]
