"""Outbound ports - interfaces for external dependencies.

These ports define contracts for durable storage: the write-ahead log and
the encrypted snapshot file.
"""

from simpledb.ports.outbound.snapshot_store import SnapshotStore
from simpledb.ports.outbound.wal_writer import SyncMode, WALWriter

__all__ = [
    "SnapshotStore",
    "SyncMode",
    "WALWriter",
]
