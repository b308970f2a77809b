"""Table entity: an ordered sequence of records with a fixed column set.

Each table owns a ReadWriteLock guarding its record list. Mutations hold it
exclusively; reads hold it shared. The column tuple is fixed at creation
and never changes, so it can be read without the lock.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterator

from simpledb.domain.entities.record import Record
from simpledb.domain.errors import SchemaMismatchError
from simpledb.domain.services.lock_manager import ReadWriteLock
from simpledb.domain.value_objects import MATCH_ALL, Selector


class Table:
    """A named collection of records sharing one column list.

    Attributes:
        columns: Declared column names, in declaration order.

    Thread Safety:
        All record access goes through the table's own lock. A Table that
        has been dropped from its Database stays safe to use; it is simply
        no longer reachable by name.
    """

    def __init__(self, columns: Sequence[str]) -> None:
        self._columns: tuple[str, ...] = tuple(columns)
        self._records: list[Record] = []
        self._lock = ReadWriteLock()
        self._dropped = False

    @property
    def columns(self) -> tuple[str, ...]:
        """Return the declared columns."""
        return self._columns

    @property
    def lock(self) -> ReadWriteLock:
        """Return the lock guarding this table's records."""
        return self._lock

    @property
    def dropped(self) -> bool:
        """Whether the owning Database has dropped this table.

        Read it while holding the table lock.
        """
        return self._dropped

    def mark_dropped(self) -> None:
        """Flag the table as dropped. The caller holds the lock exclusively."""
        self._dropped = True

    def check_arity(self, values: Sequence[str]) -> None:
        """Raise SchemaMismatchError unless there is one value per column."""
        if len(values) != len(self._columns):
            raise SchemaMismatchError(len(self._columns), len(values))

    # --- Operations --------------------------------------------------
    #
    # The public operations take the table lock themselves. The *_unlocked
    # variants are for callers (the Database) that already hold it in
    # exclusive mode so they can log and apply under a single acquisition.

    def insert(self, values: Sequence[str]) -> None:
        """Append a record built by zipping values onto the columns.

        Raises:
            SchemaMismatchError: If len(values) != len(columns).
        """
        with self._lock.write_locked():
            self.insert_unlocked(values)

    def insert_unlocked(self, values: Sequence[str]) -> None:
        self.check_arity(values)
        self._records.append(Record(dict(zip(self._columns, values))))

    def select(self, selector: Selector = MATCH_ALL) -> list[Record]:
        """Return detached copies of matching records in storage order."""
        with self._lock.read_locked():
            return [r.copy() for r in self._records if selector.matches(r)]

    def update(self, updates: Mapping[str, str], selector: Selector = MATCH_ALL) -> int:
        """Overwrite existing columns on every matching record.

        Columns not already present on a record are not created.

        Returns:
            Number of records matched (not number of fields changed).
        """
        with self._lock.write_locked():
            return self.update_unlocked(updates, selector)

    def update_unlocked(self, updates: Mapping[str, str], selector: Selector = MATCH_ALL) -> int:
        count = 0
        for record in self._records:
            if not selector.matches(record):
                continue
            for column, value in updates.items():
                if column in record:
                    record.set(column, value)
            count += 1
        return count

    def delete(self, selector: Selector = MATCH_ALL) -> int:
        """Remove matching records, keeping survivors in order.

        Returns:
            Number of records removed.
        """
        with self._lock.write_locked():
            return self.delete_unlocked(selector)

    def delete_unlocked(self, selector: Selector = MATCH_ALL) -> int:
        survivors = [r for r in self._records if not selector.matches(r)]
        removed = len(self._records) - len(survivors)
        self._records = survivors
        return removed

    def record_count(self) -> int:
        """Return the number of records in the table."""
        with self._lock.read_locked():
            return len(self._records)

    # --- Serialization -----------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Encode the table as plain data for the snapshot codec.

        Does not take the table lock; the caller must hold it (the Database
        holds every table lock exclusively while it checkpoints).
        """
        return {
            "columns": list(self._columns),
            "records": [r.to_dict() for r in self._records],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Table:
        """Decode a table produced by to_dict().

        Raises:
            ValueError: If the data is not a valid table encoding.
        """
        columns = data.get("columns")
        records = data.get("records")
        if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
            raise ValueError("table 'columns' must be a list of strings")
        if not isinstance(records, list):
            raise ValueError("table 'records' must be a list")

        table = cls(columns)
        for raw in records:
            if not isinstance(raw, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
            ):
                raise ValueError("each record must map strings to strings")
            if set(raw) != set(columns):
                raise ValueError(
                    f"record columns {sorted(raw)} do not match table columns {sorted(columns)}"
                )
            table._records.append(Record(dict(raw)))
        return table

    def __iter__(self) -> Iterator[Record]:
        """Iterate over detached copies of all records."""
        return iter(self.select())

    def __repr__(self) -> str:
        return f"Table(columns={list(self._columns)!r}, records={self.record_count()})"
