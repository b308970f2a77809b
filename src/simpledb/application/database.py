"""Database - unified entry point for the table store.

The Database owns the name -> Table mapping and the single WAL handle.
Every mutating call logs a WAL entry first and applies the change to
memory only after the append has been flushed; if the append fails the
change is not applied and DurabilityFailureError is raised.

Usage:
    from simpledb.application import Database
    from simpledb.infrastructure.config import StorageConfig

    with Database.open(StorageConfig(snapshot_path=..., wal_path=...)) as db:
        db.create_table("users", ["id", "name"])
        db.insert_record("users", ["1", "Ann"])
        rows = db.select_records("users", Equals("id", "1"))
    # leaving the block saves the snapshot and checkpoints the WAL

Locking:
    The database lock guards only the mapping. Create/drop hold it
    exclusively (across the WAL append, so schema changes are logged in
    the order they are applied); lookups and list hold it shared.
    Row operations resolve the table under the shared lock, release it,
    then take the table's own lock. A table can therefore be dropped
    between resolution and use. Drop marks the table while holding its lock
    exclusively, and row mutations check that mark under the same lock
    before logging, so a mutation that loses the race fails with
    TableNotFoundError and leaves no WAL entry. Row mutations append to
    the WAL while holding the table lock so the per-table log order
    matches the apply order.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager

from simpledb.adapters.outbound.encrypted_snapshot_store import EncryptedSnapshotStore
from simpledb.adapters.outbound.file_wal_writer import FileWALWriter, set_aside
from simpledb.domain.entities import (
    CreateTableEntry,
    DeleteEntry,
    DropTableEntry,
    InsertEntry,
    LogEntry,
    Record,
    Table,
    UpdateEntry,
)
from simpledb.domain.errors import (
    DurabilityFailureError,
    SchemaMismatchError,
    TableExistsError,
    TableNotFoundError,
    WALError,
)
from simpledb.domain.services import ReadWriteLock, RecoveryService, RecoveryStats
from simpledb.domain.value_objects import MATCH_ALL, Selector
from simpledb.infrastructure.config import StorageConfig, WALConfig
from simpledb.infrastructure.logging import get_logger
from simpledb.infrastructure.metrics import MetricsRegistry, get_metrics
from simpledb.infrastructure.tracing import trace_span
from simpledb.ports.outbound import SnapshotStore, SyncMode, WALWriter

logger = get_logger(__name__)


class Database:
    """In-memory table store with write-ahead logging and encrypted snapshots.

    Thread Safety:
        All public methods may be called from several threads at once.
    """

    def __init__(
        self,
        wal_writer: WALWriter | None = None,
        snapshot_store: SnapshotStore | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Create an empty database.

        Args:
            wal_writer: Open WAL for logging mutations. Without one, every
                mutation fails with DurabilityFailureError; such a database
                is only useful as a replay target.
            snapshot_store: Where load() and save() read and write state.
            metrics: Metrics registry (defaults to the global one).
        """
        self._tables: dict[str, Table] = {}
        self._lock = ReadWriteLock()
        self._wal = wal_writer
        self._snapshot_store = snapshot_store
        self._metrics = metrics or get_metrics()

    @classmethod
    def open(
        cls,
        storage: StorageConfig,
        wal: WALConfig | None = None,
        metrics: MetricsRegistry | None = None,
        recover: bool | None = None,
    ) -> Database:
        """Open the WAL, load the snapshot and optionally replay the WAL.

        Args:
            storage: Snapshot path, WAL path and encryption secret.
            wal: WAL settings (sync mode).
            metrics: Metrics registry (defaults to the global one).
            recover: Replay the WAL on top of the snapshot. Defaults to
                storage.recover_on_start.
                When not replaying, leftover WAL entries from an unclean
                shutdown are moved to "<wal>.unreplayed" so they are neither
                lost nor mixed with new entries.

        Raises:
            WALWriteError: If the WAL cannot be opened.
            SnapshotCorruptError: If an existing snapshot cannot be read.
            RecoveryError: If replay fails.
        """
        wal = wal or WALConfig()
        metrics = metrics or get_metrics()
        if recover is None:
            recover = storage.recover_on_start
        if not recover:
            set_aside(storage.wal_path)
        writer = FileWALWriter(storage.wal_path, SyncMode(wal.sync_mode), metrics=metrics)
        try:
            store = EncryptedSnapshotStore(
                storage.snapshot_path, storage.encryption_key, metrics=metrics
            )
            db = cls(wal_writer=writer, snapshot_store=store, metrics=metrics)
            db.load()
            if recover:
                db.recover()
        except BaseException:
            writer.close()
            raise
        return db

    @property
    def wal(self) -> WALWriter | None:
        """Return the WAL handle, if any."""
        return self._wal

    # --- Persistence -------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory tables with the snapshot contents.

        A missing snapshot leaves the database empty ("clean database").

        Raises:
            RuntimeError: If no snapshot store is configured.
            SnapshotCorruptError: If the snapshot cannot be decrypted or decoded.
        """
        store = self._require_snapshot_store()
        tables = store.load()
        with self._lock.write_locked():
            self._tables = tables
            self._metrics.tables.set(len(tables))

        if tables:
            logger.info("database_loaded", tables=len(tables))
        else:
            logger.info("database_clean_start")

    def recover(self) -> RecoveryStats:
        """Replay everything in the WAL on top of the current state.

        Raises:
            RuntimeError: If no WAL is configured.
            WALCorruptError: If the WAL cannot be decoded.
            UnsupportedWALOperationError: If an entry has no replay rule.
            RecoveryError: If an entry cannot be applied.
        """
        if self._wal is None:
            raise RuntimeError("no WAL to recover from")
        return self.replay(self._wal.read_all())

    def replay(self, entries: Iterable[LogEntry]) -> RecoveryStats:
        """Apply entries, in order, without logging them again.

        Entries are applied to a scratch copy of the current tables, which
        replaces them only once every entry has applied. A failed replay
        leaves the database exactly as it was. Run it before the database
        is shared between threads.

        Raises:
            UnsupportedWALOperationError: If an entry has no replay rule.
            RecoveryError: If an entry cannot be applied.
        """
        with self._lock.write_locked():
            scratch = Database(metrics=self._metrics)
            for name, table in self._tables.items():
                with table.lock.read_locked():
                    scratch._tables[name] = Table.from_dict(table.to_dict())

            try:
                with trace_span("wal.replay"):
                    stats = RecoveryService().recover(scratch, entries)
                for table in self._tables.values():
                    with table.lock.write_locked():
                        table.mark_dropped()
                self._tables = scratch._tables
            finally:
                self._metrics.tables.set(len(self._tables))

        self._metrics.recovery_entries_replayed.inc(stats.entries_replayed)
        self._metrics.recovery_duration_seconds.set(stats.duration_ms / 1000)
        logger.info(
            "wal_replayed",
            entries=stats.entries_replayed,
            by_operation=stats.by_operation,
            duration_ms=round(stats.duration_ms, 3),
        )
        return stats

    def save(self) -> None:
        """Checkpoint: write the snapshot, then truncate and close the WAL.

        Every table is locked exclusively while the snapshot is encoded, so
        no mutation can be logged after the encoding and then lost with the
        truncated WAL. After a successful save the WAL is closed and further
        mutations fail with DurabilityFailureError.

        Raises:
            RuntimeError: If no snapshot store is configured.
            OSError: If the snapshot cannot be written; the WAL is left intact.
            WALError: If the WAL cannot be truncated or closed.
        """
        store = self._require_snapshot_store()
        with self._lock.write_locked():
            with ExitStack() as stack:
                for name in sorted(self._tables):
                    stack.enter_context(self._tables[name].lock.write_locked())
                store.save(self._tables)
                if self._wal is not None and self._wal.is_open:
                    self._wal.truncate()
                    self._wal.close()

        logger.info("checkpoint_complete", tables=len(self._tables))

    def close(self) -> None:
        """Save and release the WAL. Does nothing if already checkpointed."""
        if self._wal is not None and not self._wal.is_open:
            return
        if self._snapshot_store is not None:
            self.save()
        elif self._wal is not None:
            self._wal.close()

    def _require_snapshot_store(self) -> SnapshotStore:
        if self._snapshot_store is None:
            raise RuntimeError("no snapshot store configured")
        return self._snapshot_store

    # --- Helpers -----------------------------------------------------

    def _log(self, entry: LogEntry) -> None:
        """Durably append an entry or raise DurabilityFailureError."""
        if self._wal is None:
            raise DurabilityFailureError(
                f"cannot {entry.operation.value} '{entry.table_name}': no WAL configured"
            )
        try:
            self._wal.append(entry)
        except WALError as e:
            raise DurabilityFailureError(
                f"cannot {entry.operation.value} '{entry.table_name}': {e}"
            ) from e

    @contextmanager
    def _observe(self, operation: str, table: str) -> Iterator[None]:
        """Trace one public operation and record its outcome and latency."""
        start = time.perf_counter()
        try:
            with trace_span(f"db.{operation}", {"table": table}):
                yield
        except Exception:
            self._metrics.operations_total.labels(operation=operation, status="error").inc()
            raise
        else:
            self._metrics.operations_total.labels(operation=operation, status="success").inc()
        finally:
            self._metrics.operation_latency_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    # --- Schema operations -------------------------------------------

    def create_table(self, name: str, columns: Sequence[str]) -> None:
        """Create an empty table.

        Raises:
            TableExistsError: If the name is taken.
            SchemaMismatchError: If no columns are given.
            DurabilityFailureError: If the WAL append fails.
        """
        with self._observe("create", name):
            if not columns:
                raise SchemaMismatchError(expected=1, got=0)
            with self._lock.write_locked():
                if name in self._tables:
                    raise TableExistsError(name)
                self._log(CreateTableEntry(table_name=name, columns=tuple(columns)))
                self._tables[name] = Table(columns)
                self._metrics.tables.set(len(self._tables))
            logger.info("table_created", table=name, columns=list(columns))

    def drop_table(self, name: str) -> None:
        """Remove a table and all of its rows.

        Raises:
            TableNotFoundError: If the table does not exist.
            DurabilityFailureError: If the WAL append fails.
        """
        with self._observe("drop", name):
            with self._lock.write_locked():
                table = self._tables.get(name)
                if table is None:
                    raise TableNotFoundError(name)
                with table.lock.write_locked():
                    self._log(DropTableEntry(table_name=name))
                    table.mark_dropped()
                    del self._tables[name]
                self._metrics.tables.set(len(self._tables))
            logger.info("table_dropped", table=name)

    def list_tables(self) -> list[str]:
        """Return the table names. Order is unspecified."""
        with self._lock.read_locked():
            return list(self._tables)

    def get_table(self, name: str) -> Table:
        """Resolve a table by name.

        No lock is held once this returns.

        Raises:
            TableNotFoundError: If the table does not exist.
        """
        with self._lock.read_locked():
            table = self._tables.get(name)
        if table is None:
            raise TableNotFoundError(name)
        return table

    # --- Row operations ----------------------------------------------

    @contextmanager
    def _locked_for_write(self, name: str) -> Iterator[Table]:
        """Resolve a table and hold its lock exclusively.

        A table dropped after resolution is rejected here, before anything
        is logged, so the WAL never carries a row change for a dead table.

        Raises:
            TableNotFoundError: If the table is absent or was dropped.
        """
        table = self.get_table(name)
        with table.lock.write_locked():
            if table.dropped:
                raise TableNotFoundError(name)
            yield table

    def insert_record(self, table_name: str, values: Sequence[str]) -> None:
        """Append a row.

        Raises:
            TableNotFoundError: If the table does not exist.
            SchemaMismatchError: If the value count differs from the column count.
            DurabilityFailureError: If the WAL append fails.
        """
        with self._observe("insert", table_name):
            with self._locked_for_write(table_name) as table:
                table.check_arity(values)
                self._log(InsertEntry(table_name=table_name, values=tuple(values)))
                table.insert_unlocked(values)

    def select_records(self, table_name: str, selector: Selector = MATCH_ALL) -> list[Record]:
        """Return detached copies of matching rows in storage order.

        Raises:
            TableNotFoundError: If the table does not exist.
        """
        with self._observe("select", table_name):
            return self.get_table(table_name).select(selector)

    def update_records(
        self,
        table_name: str,
        updates: Mapping[str, str],
        selector: Selector = MATCH_ALL,
    ) -> int:
        """Overwrite existing columns on matching rows.

        Returns:
            Number of rows matched.

        Raises:
            TableNotFoundError: If the table does not exist.
            DurabilityFailureError: If the WAL append fails.
        """
        with self._observe("update", table_name):
            with self._locked_for_write(table_name) as table:
                self._log(
                    UpdateEntry(table_name=table_name, updates=dict(updates), selector=selector)
                )
                return table.update_unlocked(updates, selector)

    def delete_records(self, table_name: str, selector: Selector = MATCH_ALL) -> int:
        """Remove matching rows.

        Returns:
            Number of rows removed.

        Raises:
            TableNotFoundError: If the table does not exist.
            DurabilityFailureError: If the WAL append fails.
        """
        with self._observe("delete", table_name):
            with self._locked_for_write(table_name) as table:
                self._log(DeleteEntry(table_name=table_name, selector=selector))
                return table.delete_unlocked(selector)

    # --- Replay (no logging) -----------------------------------------

    def apply_create_table(self, name: str, columns: Sequence[str]) -> None:
        with self._lock.write_locked():
            if name in self._tables:
                raise TableExistsError(name)
            self._tables[name] = Table(columns)
            self._metrics.tables.set(len(self._tables))

    def apply_drop_table(self, name: str) -> None:
        with self._lock.write_locked():
            table = self._tables.pop(name, None)
            if table is None:
                raise TableNotFoundError(name)
            with table.lock.write_locked():
                table.mark_dropped()
            self._metrics.tables.set(len(self._tables))

    def apply_insert(self, name: str, values: Sequence[str]) -> None:
        self.get_table(name).insert(values)

    def apply_update(self, name: str, updates: Mapping[str, str], selector: Selector) -> int:
        return self.get_table(name).update(updates, selector)

    def apply_delete(self, name: str, selector: Selector) -> int:
        return self.get_table(name).delete(selector)

    # --- Context manager ---------------------------------------------

    def __enter__(self) -> Database:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit: checkpoint and close."""
        self.close()
