"""Unit tests for Record."""

from __future__ import annotations

import pytest

from simpledb.domain.entities import Record


@pytest.mark.unit
class TestRecord:
    """Tests for Record."""

    def test_get_and_set(self) -> None:
        record = Record()
        record.set("id", "1")

        assert record.get("id") == "1"
        assert record["id"] == "1"
        assert "id" in record

    def test_get_missing_column(self) -> None:
        """Absent columns read as None rather than raising."""
        assert Record({"id": "1"}).get("name") is None

    def test_set_overwrites(self) -> None:
        record = Record({"id": "1"})
        record.set("id", "2")

        assert record.get("id") == "2"
        assert len(record) == 1

    def test_delete(self) -> None:
        record = Record({"id": "1", "name": "Ann"})
        record.delete("name")
        record.delete("missing")  # no-op

        assert record.columns() == {"id"}

    def test_columns_and_values(self) -> None:
        record = Record({"id": "1", "name": "Ann"})

        assert record.columns() == {"id", "name"}
        assert sorted(record.values()) == ["1", "Ann"]

    def test_is_empty(self) -> None:
        assert Record().is_empty()
        assert not Record({"id": "1"}).is_empty()

    def test_copy_is_independent(self) -> None:
        """Mutating a copy does not affect the original."""
        original = Record({"id": "1"})
        copy = original.copy()
        copy.set("id", "2")

        assert original.get("id") == "1"
        assert copy.get("id") == "2"

    def test_to_dict_is_detached(self) -> None:
        record = Record({"id": "1"})
        data = record.to_dict()
        data["id"] = "2"

        assert record.get("id") == "1"

    def test_equality_ignores_column_order(self) -> None:
        assert Record({"a": "1", "b": "2"}) == Record({"b": "2", "a": "1"})

    def test_iteration(self) -> None:
        assert sorted(Record({"a": "1", "b": "2"})) == ["a", "b"]
