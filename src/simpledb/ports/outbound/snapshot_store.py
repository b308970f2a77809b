"""Snapshot store port for at-rest persistence of the table mapping."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Protocol

from simpledb.domain.entities import Table


class SnapshotStore(Protocol):
    """Protocol for saving and loading the full name -> Table mapping.

    A missing snapshot is not an error: load() returns an empty mapping.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Return whether a snapshot has been written."""
        ...

    @abstractmethod
    def save(self, tables: Mapping[str, Table]) -> None:
        """Encode and persist the tables.

        Either the new snapshot is fully written or the previous one is
        left in place.

        Raises:
            OSError: If the snapshot cannot be written.
        """
        ...

    @abstractmethod
    def load(self) -> dict[str, Table]:
        """Read back the tables written by save().

        Raises:
            SnapshotCorruptError: If the snapshot cannot be decrypted or decoded.
        """
        ...
