"""Command parser for the interactive shell.

Turns one line of user input into a typed command. Arguments are split
shell-style, so values containing spaces can be quoted.

Supported commands:
    create <table> <column> [<column> ...]
    drop <table>
    list
    insert <table> <value> [<value> ...]
    select <table> [<column>=<value>]
    update <table> <column>=<value> [<cond_column>=<cond_value>]
    delete <table> [<column>=<value>]
    help
    exit
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Union

from simpledb.domain.errors import SimpleDBError
from simpledb.domain.value_objects import MATCH_ALL, Equals, Selector


class CommandSyntaxError(SimpleDBError):
    """Raised when a line is not a valid shell command."""


@dataclass(frozen=True)
class CreateCommand:
    table: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class DropCommand:
    table: str


@dataclass(frozen=True)
class ListCommand:
    pass


@dataclass(frozen=True)
class InsertCommand:
    table: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class SelectCommand:
    table: str
    selector: Selector = MATCH_ALL


@dataclass(frozen=True)
class UpdateCommand:
    table: str
    updates: dict[str, str] = field(default_factory=dict)
    selector: Selector = MATCH_ALL


@dataclass(frozen=True)
class DeleteCommand:
    table: str
    selector: Selector = MATCH_ALL


@dataclass(frozen=True)
class HelpCommand:
    pass


@dataclass(frozen=True)
class ExitCommand:
    pass


Command = Union[
    CreateCommand,
    DropCommand,
    ListCommand,
    InsertCommand,
    SelectCommand,
    UpdateCommand,
    DeleteCommand,
    HelpCommand,
    ExitCommand,
]

USAGE = {
    "create": "create <table> <column> [<column> ...]",
    "drop": "drop <table>",
    "list": "list",
    "insert": "insert <table> <value> [<value> ...]",
    "select": "select <table> [<column>=<value>]",
    "update": "update <table> <column>=<value> [<cond_column>=<cond_value>]",
    "delete": "delete <table> [<column>=<value>]",
    "help": "help",
    "exit": "exit",
}


def parse_assignment(token: str) -> tuple[str, str]:
    """Split "column=value" on the first '='.

    The value may be empty; the column may not.

    Raises:
        CommandSyntaxError: If the token has no '=' or an empty column.
    """
    column, sep, value = token.partition("=")
    if not sep or not column:
        raise CommandSyntaxError(f"expected <column>=<value>, got '{token}'")
    return column, value


def _condition(tokens: list[str], command: str) -> Selector:
    if not tokens:
        return MATCH_ALL
    if len(tokens) > 1:
        raise CommandSyntaxError(f"usage: {USAGE[command]}")
    return Equals(*parse_assignment(tokens[0]))


def parse_command(line: str) -> Command | None:
    """Parse one line of input.

    Args:
        line: Raw user input.

    Returns:
        The parsed command, or None for a blank line.

    Raises:
        CommandSyntaxError: If the line is not a valid command.
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise CommandSyntaxError(f"cannot parse input: {e}") from e
    if not tokens:
        return None

    name, args = tokens[0].lower(), tokens[1:]

    if name == "create":
        if len(args) < 2:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return CreateCommand(args[0], tuple(args[1:]))

    if name == "drop":
        if len(args) != 1:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return DropCommand(args[0])

    if name == "list":
        if args:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return ListCommand()

    if name == "insert":
        if len(args) < 2:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return InsertCommand(args[0], tuple(args[1:]))

    if name == "select":
        if not args:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return SelectCommand(args[0], _condition(args[1:], name))

    if name == "update":
        if len(args) < 2:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        column, value = parse_assignment(args[1])
        return UpdateCommand(args[0], {column: value}, _condition(args[2:], name))

    if name == "delete":
        if not args:
            raise CommandSyntaxError(f"usage: {USAGE[name]}")
        return DeleteCommand(args[0], _condition(args[1:], name))

    if name == "help":
        return HelpCommand()

    if name == "exit":
        return ExitCommand()

    raise CommandSyntaxError(f"unknown command: {name}")
