"""Unit tests for the shell command parser."""

from __future__ import annotations

import pytest

from simpledb.adapters.inbound.command_parser import (
    CommandSyntaxError,
    CreateCommand,
    DeleteCommand,
    DropCommand,
    ExitCommand,
    HelpCommand,
    InsertCommand,
    ListCommand,
    SelectCommand,
    UpdateCommand,
    parse_assignment,
    parse_command,
)
from simpledb.domain.errors import SimpleDBError
from simpledb.domain.value_objects import MATCH_ALL, Equals


@pytest.mark.unit
class TestParseCommand:
    """Tests for parse_command."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("create users id name", CreateCommand("users", ("id", "name"))),
            ("drop users", DropCommand("users")),
            ("list", ListCommand()),
            ("insert users 1 Ann", InsertCommand("users", ("1", "Ann"))),
            ('insert users 1 "Ann Lee"', InsertCommand("users", ("1", "Ann Lee"))),
            ("select users", SelectCommand("users", MATCH_ALL)),
            ("select users id=1", SelectCommand("users", Equals("id", "1"))),
            ("update users name=Carl id=1", UpdateCommand("users", {"name": "Carl"}, Equals("id", "1"))),
            ("update users name=Carl", UpdateCommand("users", {"name": "Carl"}, MATCH_ALL)),
            ("delete users id=2", DeleteCommand("users", Equals("id", "2"))),
            ("delete users", DeleteCommand("users", MATCH_ALL)),
            ("help", HelpCommand()),
            ("exit", ExitCommand()),
            ("  SELECT users  ", SelectCommand("users", MATCH_ALL)),
        ],
    )
    def test_valid(self, line: str, expected: object) -> None:
        assert parse_command(line) == expected

    @pytest.mark.parametrize("line", ["", "   ", "\t"])
    def test_blank(self, line: str) -> None:
        assert parse_command(line) is None

    @pytest.mark.parametrize(
        "line",
        [
            "create users",
            "drop",
            "drop a b",
            "list extra",
            "insert users",
            "select",
            "select users id",
            "select users a=1 b=2",
            "update users",
            "update users name",
            "delete",
            "frobnicate",
            'insert users "unterminated',
        ],
    )
    def test_invalid(self, line: str) -> None:
        with pytest.raises(CommandSyntaxError):
            parse_command(line)

    def test_syntax_error_is_simpledb_error(self) -> None:
        assert issubclass(CommandSyntaxError, SimpleDBError)


@pytest.mark.unit
class TestParseAssignment:
    """Tests for column=value parsing."""

    def test_splits_on_first_equals(self) -> None:
        assert parse_assignment("expr=a=b") == ("expr", "a=b")

    def test_empty_value(self) -> None:
        assert parse_assignment("name=") == ("name", "")

    @pytest.mark.parametrize("token", ["name", "=value"])
    def test_invalid(self, token: str) -> None:
        with pytest.raises(CommandSyntaxError):
            parse_assignment(token)
