"""WAL replay for crash recovery.

The WAL records every mutation before it is applied, so replaying the log
in append order against a database reproduces the state the log
describes. Every entry kind is reconstructed:

    create -> install an empty table with the logged columns
    drop   -> remove the table
    insert -> append the logged values
    update -> overwrite columns on rows matching the logged selector
    delete -> remove rows matching the logged selector

Replay is all-or-nothing from the caller's point of view: the first entry
that cannot be applied aborts recovery with RecoveryError rather than
leaving a silently inconsistent database. Entries whose operation cannot be
decoded never reach this service; the WAL reader rejects them with
UnsupportedWALOperationError.

Replay applies entries directly to in-memory state and never appends to the
WAL, so the log is not duplicated.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from simpledb.domain.entities.log_entry import (
    CreateTableEntry,
    DeleteEntry,
    DropTableEntry,
    InsertEntry,
    LogEntry,
    UpdateEntry,
)
from simpledb.domain.errors import (
    RecoveryError,
    SimpleDBError,
    UnsupportedWALOperationError,
)
from simpledb.domain.value_objects import Selector


class ReplayTarget(Protocol):
    """State that WAL entries can be applied to without being re-logged."""

    def apply_create_table(self, name: str, columns: Sequence[str]) -> None: ...

    def apply_drop_table(self, name: str) -> None: ...

    def apply_insert(self, name: str, values: Sequence[str]) -> None: ...

    def apply_update(self, name: str, updates: Mapping[str, str], selector: Selector) -> int: ...

    def apply_delete(self, name: str, selector: Selector) -> int: ...


@dataclass
class RecoveryStats:
    """Statistics from a WAL replay."""

    entries_replayed: int = 0
    by_operation: dict[str, int] = field(default_factory=dict)
    duration_ms: float = 0.0


class RecoveryService:
    """Replays WAL entries, in order, against a replay target.

    Usage:
        stats = RecoveryService().recover(database, wal.read_all())

    Thread Safety:
        Recovery should run before the database is shared between threads.
    """

    def recover(self, target: ReplayTarget, entries: Iterable[LogEntry]) -> RecoveryStats:
        """Apply every entry to the target.

        Args:
            target: The database to rebuild.
            entries: Entries in WAL (append) order.

        Returns:
            Replay statistics.

        Raises:
            RecoveryError: If an entry cannot be applied.
            UnsupportedWALOperationError: If an entry has no replay rule.
        """
        start = time.perf_counter()
        counts: Counter[str] = Counter()

        for index, entry in enumerate(entries):
            try:
                self._apply(target, entry)
            except UnsupportedWALOperationError:
                raise
            except SimpleDBError as e:
                raise RecoveryError(index, entry.operation.value, str(e)) from e
            counts[entry.operation.value] += 1

        return RecoveryStats(
            entries_replayed=sum(counts.values()),
            by_operation=dict(counts),
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    def _apply(self, target: ReplayTarget, entry: LogEntry) -> None:
        """Dispatch one entry to the matching apply method."""
        if isinstance(entry, CreateTableEntry):
            target.apply_create_table(entry.table_name, entry.columns)
        elif isinstance(entry, DropTableEntry):
            target.apply_drop_table(entry.table_name)
        elif isinstance(entry, InsertEntry):
            target.apply_insert(entry.table_name, entry.values)
        elif isinstance(entry, UpdateEntry):
            target.apply_update(entry.table_name, entry.updates, entry.selector)
        elif isinstance(entry, DeleteEntry):
            target.apply_delete(entry.table_name, entry.selector)
        else:
            raise UnsupportedWALOperationError(type(entry).__name__)
