"""Unit tests for Table."""

from __future__ import annotations

import threading

import pytest

from simpledb.domain.entities import Record, Table
from simpledb.domain.errors import SchemaMismatchError
from simpledb.domain.value_objects import Equals


@pytest.fixture
def users() -> Table:
    table = Table(["id", "name"])
    table.insert(["1", "Ann"])
    table.insert(["2", "Bob"])
    table.insert(["3", "Ann"])
    return table


@pytest.mark.unit
class TestTable:
    """Tests for Table operations."""

    def test_insert_zips_columns(self) -> None:
        table = Table(["id", "name"])
        table.insert(["1", "Ann"])

        assert table.select() == [Record({"id": "1", "name": "Ann"})]

    def test_insert_wrong_arity(self) -> None:
        """Wrong value count raises and leaves the table unchanged."""
        table = Table(["id", "name"])

        with pytest.raises(SchemaMismatchError) as exc_info:
            table.insert(["1"])

        assert exc_info.value.expected == 2
        assert exc_info.value.got == 1
        assert table.record_count() == 0

    def test_select_preserves_order(self) -> None:
        table = Table(["n"])
        for i in range(10):
            table.insert([str(i)])

        assert [r.get("n") for r in table.select()] == [str(i) for i in range(10)]

    def test_select_with_selector(self, users: Table) -> None:
        rows = users.select(Equals("name", "Ann"))
        assert [r.get("id") for r in rows] == ["1", "3"]

    def test_select_returns_copies(self, users: Table) -> None:
        """Mutating returned records does not change the table."""
        rows = users.select()
        rows[0].set("name", "Zed")

        assert users.select()[0].get("name") == "Ann"

    def test_update_counts_matches(self, users: Table) -> None:
        assert users.update({"name": "Carl"}, Equals("id", "1")) == 1
        assert users.select(Equals("id", "1"))[0].get("name") == "Carl"

    def test_update_zero_matches(self, users: Table) -> None:
        before = users.select()
        assert users.update({"name": "Carl"}, Equals("id", "99")) == 0
        assert users.select() == before

    def test_update_ignores_unknown_columns(self, users: Table) -> None:
        """Columns a record lacks are not created."""
        count = users.update({"email": "x@example.com"}, Equals("id", "2"))

        assert count == 1
        assert "email" not in users.select(Equals("id", "2"))[0]

    def test_update_all(self, users: Table) -> None:
        assert users.update({"name": "X"}) == 3
        assert {r.get("name") for r in users.select()} == {"X"}

    def test_delete(self, users: Table) -> None:
        assert users.delete(Equals("name", "Ann")) == 2
        assert users.select(Equals("name", "Ann")) == []
        assert [r.get("id") for r in users.select()] == ["2"]

    def test_delete_all(self, users: Table) -> None:
        assert users.delete() == 3
        assert users.record_count() == 0

    def test_columns_are_fixed(self) -> None:
        table = Table(["id", "name"])
        assert table.columns == ("id", "name")

    def test_concurrent_inserts(self) -> None:
        table = Table(["n"])
        threads = [
            threading.Thread(target=lambda i=i: [table.insert([f"{i}-{j}"]) for j in range(50)])
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert table.record_count() == 400


@pytest.mark.unit
class TestTableSerialization:
    """Tests for Table.to_dict / from_dict."""

    def test_round_trip(self, users: Table) -> None:
        with users.lock.read_locked():
            data = users.to_dict()
        restored = Table.from_dict(data)

        assert restored.columns == users.columns
        assert restored.select() == users.select()

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"columns": "id", "records": []},
            {"columns": ["id"], "records": {}},
            {"columns": ["id"], "records": [{"id": 1}]},
            {"columns": ["id"], "records": ["1"]},
            {"columns": ["id", "name"], "records": [{"id": "1"}]},
            {"columns": ["id"], "records": [{"id": "1", "extra": "x"}]},
            {"columns": ["id"], "records": [{"name": "Ann"}]},
        ],
    )
    def test_from_dict_invalid(self, data: dict) -> None:
        with pytest.raises(ValueError):
            Table.from_dict(data)
