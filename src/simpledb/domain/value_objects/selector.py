"""Row selectors.

A selector decides which records a read or mutation applies to. Only two
shapes exist: match everything, or single-column equality. Selectors are
plain data so they can be written to the WAL and replayed later.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from simpledb.domain.entities.record import Record


@dataclass(frozen=True)
class MatchAll:
    """Selector matching every record."""

    def matches(self, record: Record) -> bool:
        return True

    def to_dict(self) -> dict[str, str] | None:
        return None

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class Equals:
    """Selector matching records whose column equals a value.

    A record that has no such column never matches.
    """

    column: str
    value: str

    def matches(self, record: Record) -> bool:
        return record.get(self.column) == self.value

    def to_dict(self) -> dict[str, str] | None:
        return {"column": self.column, "value": self.value}

    def __str__(self) -> str:
        return f"{self.column}={self.value}"


Selector = Union[MatchAll, Equals]

MATCH_ALL = MatchAll()


def selector_from_dict(data: Any) -> Selector:
    """Decode a selector from its serialized form.

    Args:
        data: None for match-all, or a mapping with 'column' and 'value'.

    Raises:
        ValueError: If the data is not a valid selector.
    """
    if data is None:
        return MATCH_ALL
    if not isinstance(data, dict):
        raise ValueError(f"selector must be an object or null, got {type(data).__name__}")
    column = data.get("column")
    value = data.get("value")
    if not isinstance(column, str) or not isinstance(value, str):
        raise ValueError("selector requires string 'column' and 'value'")
    return Equals(column=column, value=value)
