"""Write-Ahead Log entry types.

Every mutating Database operation is described by one log entry, written
to the WAL before the mutation is applied. The entry family is closed:
each operation kind has its own class with a typed payload, and recovery
dispatches on the class.

    Operation | Class             | Payload              | Replay action
    ----------|-------------------|----------------------|------------------------
    create    | CreateTableEntry  | columns              | install empty table
    drop      | DropTableEntry    | -                    | remove table
    insert    | InsertEntry       | values               | append record
    update    | UpdateEntry       | updates, selector    | overwrite matching rows
    delete    | DeleteEntry       | selector             | remove matching rows

Wire format (one JSON object per line):

    {"operation": "update", "table_name": "users",
     "values": {"name": "Carl"}, "condition": {"column": "id", "value": "1"},
     "created_at": "2024-05-01T12:00:00.000000+00:00"}

`values` holds the column list, value list or update map depending on the
operation and is omitted when the operation has no operands. `condition`
is omitted for match-all selectors.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from simpledb.domain.errors import UnsupportedWALOperationError
from simpledb.domain.value_objects import MATCH_ALL, Selector, selector_from_dict


class Operation(str, Enum):
    """Closed enumeration of logged operations."""

    CREATE = "create"
    DROP = "drop"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class LogEntry(ABC):
    """Base class for all WAL entries.

    `created_at` is assigned by the WAL when the entry is appended; entries
    built by callers leave it as None.
    """

    table_name: str
    created_at: datetime | None = field(default=None, compare=False)

    operation: ClassVar[Operation]

    @abstractmethod
    def payload_to_json(self) -> dict[str, Any]:
        """Return the operation-specific JSON fields."""
        ...

    @classmethod
    @abstractmethod
    def payload_from_json(
        cls, table_name: str, created_at: datetime | None, data: Mapping[str, Any]
    ) -> LogEntry:
        """Build an entry from its decoded JSON object."""
        ...

    def to_json(self) -> str:
        """Serialize the entry to a single JSON line (without newline)."""
        obj: dict[str, Any] = {
            "operation": self.operation.value,
            "table_name": self.table_name,
        }
        obj.update(self.payload_to_json())
        obj["created_at"] = self.created_at.isoformat() if self.created_at else None
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, line: str | bytes) -> LogEntry:
        """Decode an entry from one WAL line.

        Raises:
            ValueError: If the line is not a well-formed entry.
            UnsupportedWALOperationError: If the operation is not a known kind.
        """
        obj = json.loads(line)
        if not isinstance(obj, dict):
            raise ValueError("WAL entry must be a JSON object")

        op_name = obj.get("operation")
        table_name = obj.get("table_name")
        if not isinstance(op_name, str):
            raise ValueError("WAL entry has no 'operation'")
        if not isinstance(table_name, str) or not table_name:
            raise ValueError("WAL entry has no 'table_name'")

        entry_class = ENTRY_CLASSES.get(op_name)
        if entry_class is None:
            raise UnsupportedWALOperationError(op_name)

        raw_time = obj.get("created_at")
        if raw_time is not None and not isinstance(raw_time, str):
            raise ValueError("'created_at' must be a string")
        created_at = datetime.fromisoformat(raw_time) if raw_time else None

        return entry_class.payload_from_json(table_name, created_at, obj)


def _string_list(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    raw = data.get(key)
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise ValueError(f"'{key}' must be a list of strings")
    return tuple(raw)


def _string_map(data: Mapping[str, Any], key: str) -> dict[str, str]:
    raw = data.get(key)
    if not isinstance(raw, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
    ):
        raise ValueError(f"'{key}' must map strings to strings")
    return dict(raw)


def _condition_json(selector: Selector) -> dict[str, Any]:
    encoded = selector.to_dict()
    return {"condition": encoded} if encoded is not None else {}


@dataclass(frozen=True)
class CreateTableEntry(LogEntry):
    """Table creation with its declared columns."""

    columns: tuple[str, ...] = ()

    operation: ClassVar[Operation] = Operation.CREATE

    def payload_to_json(self) -> dict[str, Any]:
        return {"values": list(self.columns)}

    @classmethod
    def payload_from_json(cls, table_name, created_at, data) -> CreateTableEntry:
        return cls(table_name=table_name, created_at=created_at, columns=_string_list(data, "values"))


@dataclass(frozen=True)
class DropTableEntry(LogEntry):
    """Table removal."""

    operation: ClassVar[Operation] = Operation.DROP

    def payload_to_json(self) -> dict[str, Any]:
        return {}

    @classmethod
    def payload_from_json(cls, table_name, created_at, data) -> DropTableEntry:
        return cls(table_name=table_name, created_at=created_at)


@dataclass(frozen=True)
class InsertEntry(LogEntry):
    """Row insertion with positional values."""

    values: tuple[str, ...] = ()

    operation: ClassVar[Operation] = Operation.INSERT

    def payload_to_json(self) -> dict[str, Any]:
        return {"values": list(self.values)}

    @classmethod
    def payload_from_json(cls, table_name, created_at, data) -> InsertEntry:
        return cls(table_name=table_name, created_at=created_at, values=_string_list(data, "values"))


@dataclass(frozen=True)
class UpdateEntry(LogEntry):
    """Column overwrite on every row matching the selector."""

    updates: Mapping[str, str] = field(default_factory=dict)
    selector: Selector = MATCH_ALL

    operation: ClassVar[Operation] = Operation.UPDATE

    def payload_to_json(self) -> dict[str, Any]:
        return {"values": dict(self.updates), **_condition_json(self.selector)}

    @classmethod
    def payload_from_json(cls, table_name, created_at, data) -> UpdateEntry:
        return cls(
            table_name=table_name,
            created_at=created_at,
            updates=_string_map(data, "values"),
            selector=selector_from_dict(data.get("condition")),
        )


@dataclass(frozen=True)
class DeleteEntry(LogEntry):
    """Removal of every row matching the selector."""

    selector: Selector = MATCH_ALL

    operation: ClassVar[Operation] = Operation.DELETE

    def payload_to_json(self) -> dict[str, Any]:
        return _condition_json(self.selector)

    @classmethod
    def payload_from_json(cls, table_name, created_at, data) -> DeleteEntry:
        return cls(
            table_name=table_name,
            created_at=created_at,
            selector=selector_from_dict(data.get("condition")),
        )


ENTRY_CLASSES: dict[str, type[LogEntry]] = {
    Operation.CREATE.value: CreateTableEntry,
    Operation.DROP.value: DropTableEntry,
    Operation.INSERT.value: InsertEntry,
    Operation.UPDATE.value: UpdateEntry,
    Operation.DELETE.value: DeleteEntry,
}
