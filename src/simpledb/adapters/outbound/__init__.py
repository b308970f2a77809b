"""Outbound adapters - implementations of outbound ports.

These adapters implement the storage the Database depends on: the
append-only WAL file and the encrypted snapshot file.
"""

from simpledb.adapters.outbound.encrypted_snapshot_store import EncryptedSnapshotStore
from simpledb.adapters.outbound.file_wal_writer import FileWALWriter

__all__ = [
    "EncryptedSnapshotStore",
    "FileWALWriter",
]
