"""Ports layer - interface definitions following Hexagonal Architecture.

Outbound ports define the storage the Database depends on (WALWriter,
SnapshotStore). Adapters implement them.
"""

from simpledb.ports.outbound import SnapshotStore, SyncMode, WALWriter

__all__ = [
    "SnapshotStore",
    "SyncMode",
    "WALWriter",
]
