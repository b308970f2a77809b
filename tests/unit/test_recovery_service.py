"""Unit tests for RecoveryService."""

from __future__ import annotations

import pytest

from simpledb.application import Database
from simpledb.domain.entities import (
    CreateTableEntry,
    DeleteEntry,
    DropTableEntry,
    InsertEntry,
    UpdateEntry,
)
from simpledb.domain.errors import RecoveryError
from simpledb.domain.services import RecoveryService
from simpledb.domain.value_objects import Equals
from simpledb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def target(metrics_registry: MetricsRegistry) -> Database:
    """A database with no WAL, used purely as a replay target."""
    return Database(metrics=metrics_registry)


@pytest.mark.unit
class TestRecoveryService:
    """Tests for RecoveryService."""

    def test_replays_every_kind(self, target: Database) -> None:
        entries = [
            CreateTableEntry(table_name="users", columns=("id", "name")),
            InsertEntry(table_name="users", values=("1", "Ann")),
            InsertEntry(table_name="users", values=("2", "Bob")),
            InsertEntry(table_name="users", values=("3", "Cy")),
            UpdateEntry(table_name="users", updates={"name": "Carl"}, selector=Equals("id", "1")),
            DeleteEntry(table_name="users", selector=Equals("id", "2")),
            CreateTableEntry(table_name="tmp", columns=("x",)),
            DropTableEntry(table_name="tmp"),
        ]

        stats = RecoveryService().recover(target, entries)

        assert stats.entries_replayed == 8
        assert stats.by_operation == {"create": 2, "insert": 3, "update": 1, "delete": 1, "drop": 1}
        assert stats.duration_ms >= 0
        assert target.list_tables() == ["users"]
        rows = target.select_records("users")
        assert [r.to_dict() for r in rows] == [
            {"id": "1", "name": "Carl"},
            {"id": "3", "name": "Cy"},
        ]

    def test_empty_log(self, target: Database) -> None:
        stats = RecoveryService().recover(target, [])

        assert stats.entries_replayed == 0
        assert target.list_tables() == []

    def test_failure_reports_index(self, target: Database) -> None:
        entries = [
            CreateTableEntry(table_name="users", columns=("id",)),
            InsertEntry(table_name="users", values=("1",)),
            InsertEntry(table_name="missing", values=("1",)),
        ]

        with pytest.raises(RecoveryError) as exc_info:
            RecoveryService().recover(target, entries)

        assert exc_info.value.index == 2
        assert exc_info.value.operation == "insert"

    def test_duplicate_create_fails(self, target: Database) -> None:
        entries = [
            CreateTableEntry(table_name="users", columns=("id",)),
            CreateTableEntry(table_name="users", columns=("id",)),
        ]

        with pytest.raises(RecoveryError) as exc_info:
            RecoveryService().recover(target, entries)

        assert exc_info.value.index == 1

    def test_arity_mismatch_fails(self, target: Database) -> None:
        entries = [
            CreateTableEntry(table_name="users", columns=("id", "name")),
            InsertEntry(table_name="users", values=("1",)),
        ]

        with pytest.raises(RecoveryError):
            RecoveryService().recover(target, entries)

    def test_replay_does_not_log(self, target: Database) -> None:
        """Applying entries works without any WAL attached."""
        RecoveryService().recover(
            target, [CreateTableEntry(table_name="t", columns=("a",))]
        )

        assert target.wal is None
        assert target.list_tables() == ["t"]
