"""Record entity: a single row of a table.

A record maps column names to string values. The record itself does not
enforce a schema; the owning Table does that when the record is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class Record:
    """A single row, mapping column name to value.

    Equality is per key; column order carries no meaning.
    """

    data: dict[str, str] = field(default_factory=dict)

    def get(self, column: str) -> str | None:
        """Return the value for a column, or None if the column is absent."""
        return self.data.get(column)

    def set(self, column: str, value: str) -> None:
        """Insert or overwrite the value for a column."""
        self.data[column] = value

    def delete(self, column: str) -> None:
        """Remove a column from the record. Missing columns are ignored."""
        self.data.pop(column, None)

    def columns(self) -> set[str]:
        """Return the column names present on this record.

        Callers needing stable output must sort.
        """
        return set(self.data)

    def values(self) -> list[str]:
        """Return the values of this record (order unspecified)."""
        return list(self.data.values())

    def is_empty(self) -> bool:
        """Check if the record has no columns."""
        return not self.data

    def copy(self) -> Record:
        """Return an independent copy that shares no state with this one."""
        return Record(dict(self.data))

    def to_dict(self) -> dict[str, str]:
        """Return a detached plain-dict view of the record."""
        return dict(self.data)

    def __contains__(self, column: object) -> bool:
        return column in self.data

    def __getitem__(self, column: str) -> str:
        return self.data[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)
