"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (interactive command shell)
- Outbound adapters: Implement external dependencies (WAL file, snapshot file)
"""

from simpledb.adapters.outbound import (
    EncryptedSnapshotStore,
    FileWALWriter,
)

__all__ = [
    # Outbound adapters
    "EncryptedSnapshotStore",
    "FileWALWriter",
]
