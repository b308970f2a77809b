"""WAL Writer port for Write-Ahead Log persistence.

This outbound port defines the contract for the durability log. The
Database appends one entry per mutation before applying it, and recovery
reads the log back in append order.

State machine:

    CLOSED --open()--> OPEN --close()--> CLOSED
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Protocol

from simpledb.domain.entities import LogEntry


class SyncMode(Enum):
    """WAL sync modes with different durability/performance tradeoffs.

    FSYNC: Full durability - sync file and metadata (safest)
    FDATASYNC: Data durability - sync file data only (faster on Linux)
    NONE: No sync - rely on OS buffering (fastest, but unsafe)
    """

    FSYNC = "fsync"
    FDATASYNC = "fdatasync"
    NONE = "none"


class WALWriter(Protocol):
    """Protocol for WAL persistence.

    Key guarantees:
    - Entries are read back in exactly the order they were appended
    - append() does not return until the entry is on stable storage
    - Timestamps are assigned by the writer and never decrease

    Thread Safety:
        Appends are serialized internally; callers may append from
        several threads.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Return whether the writer accepts appends."""
        ...

    @property
    @abstractmethod
    def sync_mode(self) -> SyncMode:
        """Return the current sync mode."""
        ...

    @abstractmethod
    def append(self, entry: LogEntry) -> LogEntry:
        """Durably append an entry.

        Args:
            entry: The entry to log. Its created_at is ignored.

        Returns:
            The entry as written, with created_at assigned.

        Raises:
            WALClosedError: If the writer is closed.
            WALWriteError: If the write or flush fails.
        """
        ...

    @abstractmethod
    def read_all(self) -> list[LogEntry]:
        """Read every entry from the start of the log.

        Returns:
            Entries in append order.

        Raises:
            WALCorruptError: If a line cannot be decoded.
            UnsupportedWALOperationError: If a line names an unknown operation.
        """
        ...

    @abstractmethod
    def truncate(self) -> None:
        """Discard every entry. Only valid right after a checkpoint.

        Raises:
            WALClosedError: If the writer is closed.
            WALWriteError: If truncation fails.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the writer and release the file handle."""
        ...
