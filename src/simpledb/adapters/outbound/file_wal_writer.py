"""File-based WAL Writer implementation.

This adapter implements the WALWriter protocol with a single append-only
file holding one JSON-encoded LogEntry per line.

File Format:
    <entry json>\\n<entry json>\\n...

Durability:
    append() writes the line, flushes Python's buffer and syncs the file
    according to the sync mode before returning. A write that fails part
    way is rolled back by truncating the file to its previous length, so a
    failed append never leaves a torn line behind.

Thread Safety:
    Appends are serialized with an internal mutex.
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from simpledb.domain.entities import LogEntry
from simpledb.domain.errors import (
    UnsupportedWALOperationError,
    WALClosedError,
    WALCorruptError,
    WALWriteError,
)
from simpledb.infrastructure.logging import get_logger
from simpledb.infrastructure.metrics import MetricsRegistry, get_metrics
from simpledb.ports.outbound.wal_writer import SyncMode

logger = get_logger(__name__)

UNREPLAYED_SUFFIX = ".unreplayed"


def set_aside(path: str | Path) -> Path | None:
    """Move a non-empty WAL file out of the way so a fresh log can start.

    The file is renamed to "<name>.unreplayed", or "<name>.unreplayed.<n>"
    if earlier set-aside files exist. Nothing is parsed, so a corrupt log
    is moved as-is.

    Returns:
        The new location, or None if there was nothing to move.

    Raises:
        WALWriteError: If the file cannot be renamed.
    """
    path = Path(path)
    try:
        if not path.exists() or path.stat().st_size == 0:
            return None
        target = path.with_name(path.name + UNREPLAYED_SUFFIX)
        n = 0
        while target.exists():
            n += 1
            target = path.with_name(f"{path.name}{UNREPLAYED_SUFFIX}.{n}")
        os.replace(path, target)
    except OSError as e:
        raise WALWriteError(f"cannot set aside WAL {path}: {e}") from e

    logger.warning("wal_not_replayed", path=str(path), moved_to=str(target))
    return target


class FileWALWriter:
    """File-based implementation of the WALWriter protocol.

    The file is opened (and created if missing) in append mode when the
    writer is constructed; close() moves it to the closed state for good.

    Attributes:
        path: The WAL file.
        sync_mode: How appends are synced to disk.
    """

    def __init__(
        self,
        path: str | Path,
        sync_mode: SyncMode = SyncMode.FSYNC,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Open the WAL file for appending.

        Args:
            path: Path of the WAL file.
            sync_mode: Sync mode for durability.
            metrics: Metrics registry (defaults to the global one).

        Raises:
            WALWriteError: If the file cannot be opened or created.
        """
        self._path = Path(path)
        self._sync_mode = sync_mode
        self._metrics = metrics or get_metrics()

        self._lock = threading.Lock()
        self._last_timestamp: datetime | None = None

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file: BinaryIO | None = open(self._path, "ab")
        except OSError as e:
            raise WALWriteError(f"cannot open WAL {self._path}: {e}") from e

        logger.debug("wal_opened", path=str(self._path), sync_mode=sync_mode.value)

    @property
    def path(self) -> Path:
        """Return the WAL file path."""
        return self._path

    @property
    def sync_mode(self) -> SyncMode:
        """Return the current sync mode."""
        return self._sync_mode

    @property
    def is_open(self) -> bool:
        """Return whether the writer accepts appends."""
        return self._file is not None

    def _next_timestamp(self) -> datetime:
        """Return the current UTC time, never earlier than the last one issued."""
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def _sync(self) -> None:
        """Flush and sync the file per the sync mode."""
        self._file.flush()
        if self._sync_mode == SyncMode.FSYNC:
            os.fsync(self._file.fileno())
        elif self._sync_mode == SyncMode.FDATASYNC:
            # fdatasync is not available everywhere; fall back to fsync
            sync = getattr(os, "fdatasync", os.fsync)
            sync(self._file.fileno())

    def append(self, entry: LogEntry) -> LogEntry:
        """Durably append an entry.

        Args:
            entry: The entry to log.

        Returns:
            The entry as written, with created_at assigned.

        Raises:
            WALClosedError: If the writer is closed.
            WALWriteError: If the write or flush fails.
        """
        with self._lock:
            if self._file is None:
                raise WALClosedError(f"WAL {self._path} is closed")

            stamped = replace(entry, created_at=self._next_timestamp())
            line = stamped.to_json().encode("utf-8") + b"\n"

            start_size = self._file.tell()
            start = time.perf_counter()
            try:
                self._file.write(line)
                self._sync()
            except OSError as e:
                self._rollback(start_size)
                raise WALWriteError(f"failed to append to WAL {self._path}: {e}") from e

            self._metrics.wal_flush_latency_seconds.observe(time.perf_counter() - start)
            self._metrics.wal_bytes_written_total.inc(len(line))
            self._metrics.wal_appends_total.labels(operation=entry.operation.value).inc()

            return stamped

    def _rollback(self, size: int) -> None:
        """Cut the file back to size after a failed append."""
        try:
            self._file.truncate(size)
            self._file.seek(size)
        except OSError as e:
            logger.error("wal_rollback_failed", path=str(self._path), size=size, error=str(e))

    def read_all(self) -> list[LogEntry]:
        """Read every entry from the start of the log.

        The file is reopened for reading, so this works whether or not the
        writer is still open. A missing file reads as an empty log.

        Returns:
            Entries in append order.

        Raises:
            WALCorruptError: If a line cannot be decoded.
            UnsupportedWALOperationError: If a line names an unknown operation.
        """
        if not self._path.exists():
            return []

        entries: list[LogEntry] = []
        offset = 0
        with open(self._path, "rb") as f:
            for line_number, raw in enumerate(f, start=1):
                line_offset = offset
                offset += len(raw)
                if not raw.strip():
                    continue
                try:
                    entries.append(LogEntry.from_json(raw.decode("utf-8")))
                except UnsupportedWALOperationError as e:
                    raise UnsupportedWALOperationError(e.operation, line_number) from e
                except (ValueError, TypeError) as e:
                    raise WALCorruptError(line_number, line_offset, str(e)) from e

        return entries

    def truncate(self) -> None:
        """Discard every entry.

        Raises:
            WALClosedError: If the writer is closed.
            WALWriteError: If truncation fails.
        """
        with self._lock:
            if self._file is None:
                raise WALClosedError(f"WAL {self._path} is closed")
            try:
                self._file.truncate(0)
                self._file.seek(0)
                self._sync()
            except OSError as e:
                raise WALWriteError(f"failed to truncate WAL {self._path}: {e}") from e

        logger.info("wal_truncated", path=str(self._path))

    def close(self) -> None:
        """Close the writer and release the file handle."""
        with self._lock:
            if self._file is None:
                return
            try:
                self._sync()
            finally:
                self._file.close()
                self._file = None

        logger.debug("wal_closed", path=str(self._path))

    def __enter__(self) -> FileWALWriter:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
