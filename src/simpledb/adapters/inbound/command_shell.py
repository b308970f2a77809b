"""Interactive command shell.

Reads commands line by line, runs them against a Database and prints
results. Errors raised by the store are reported and the loop continues;
`exit`, end of input and Ctrl-C all leave the loop through a clean
shutdown (snapshot save and WAL checkpoint).
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from simpledb.adapters.inbound.command_parser import (
    USAGE,
    Command,
    CreateCommand,
    DeleteCommand,
    DropCommand,
    ExitCommand,
    HelpCommand,
    InsertCommand,
    ListCommand,
    SelectCommand,
    UpdateCommand,
    parse_command,
)
from simpledb.application import Database
from simpledb.domain.entities import Record
from simpledb.domain.errors import SimpleDBError
from simpledb.infrastructure.logging import get_logger

logger = get_logger(__name__)

PROMPT = "simpledb> "
COLUMN_WIDTH = 15

HELP_TEXT = {
    "create": "Create a new table",
    "drop": "Drop a table",
    "list": "List all tables",
    "insert": "Insert a new record",
    "select": "Select records",
    "update": "Update records",
    "delete": "Delete records",
    "help": "Show this help message",
    "exit": "Save and exit",
}


def format_records(records: Sequence[Record]) -> str:
    """Render records as fixed-width columns with a header row.

    Column order follows the first record.
    """
    if not records:
        return "No records found."

    columns = list(records[0].data)
    lines = ["".join(f"{c:<{COLUMN_WIDTH}}" for c in columns).rstrip()]
    for record in records:
        lines.append(
            "".join(f"{record.get(c) or '':<{COLUMN_WIDTH}}" for c in columns).rstrip()
        )
    return "\n".join(lines)


def format_help() -> str:
    width = max(len(u) for u in USAGE.values()) + 2
    lines = ["Available commands:"]
    for name, usage in USAGE.items():
        lines.append(f"  {usage:<{width}}{HELP_TEXT[name]}")
    return "\n".join(lines)


class CommandShell:
    """Read-eval-print loop over a Database.

    Attributes:
        db: The database commands run against.
    """

    def __init__(
        self,
        db: Database,
        out: TextIO | None = None,
        read_line: Callable[[str], str] = input,
    ) -> None:
        """Initialize the shell.

        Args:
            db: Database to operate on.
            out: Stream results are written to (defaults to stdout).
            read_line: Prompt-and-read function; raises EOFError at end of input.
        """
        self._db = db
        self._out = out
        self._read_line = read_line

    @property
    def db(self) -> Database:
        return self._db

    def _print(self, text: str = "") -> None:
        print(text, file=self._out or sys.stdout)

    def execute(self, command: Command) -> bool:
        """Run one command and print its result.

        Returns:
            False when the shell should stop, True otherwise.

        Raises:
            SimpleDBError: If the store rejects the command.
        """
        logger.debug("command_received", command=type(command).__name__)

        if isinstance(command, ExitCommand):
            return False

        if isinstance(command, HelpCommand):
            self._print(format_help())
        elif isinstance(command, CreateCommand):
            self._db.create_table(command.table, command.columns)
            self._print(f"Table '{command.table}' created successfully.")
        elif isinstance(command, DropCommand):
            self._db.drop_table(command.table)
            self._print(f"Table '{command.table}' dropped successfully.")
        elif isinstance(command, ListCommand):
            names = sorted(self._db.list_tables())
            if not names:
                self._print("No tables found.")
            else:
                self._print("Tables:")
                for name in names:
                    self._print(f"- {name}")
        elif isinstance(command, InsertCommand):
            self._db.insert_record(command.table, command.values)
            self._print("Record inserted successfully.")
        elif isinstance(command, SelectCommand):
            self._print(format_records(self._db.select_records(command.table, command.selector)))
        elif isinstance(command, UpdateCommand):
            count = self._db.update_records(command.table, command.updates, command.selector)
            self._print(f"{count} record(s) updated successfully.")
        elif isinstance(command, DeleteCommand):
            count = self._db.delete_records(command.table, command.selector)
            self._print(f"{count} record(s) deleted successfully.")
        else:
            raise TypeError(f"unhandled command: {command!r}")
        return True

    def execute_line(self, line: str) -> bool:
        """Parse and run one line, reporting store errors.

        Returns:
            False when the shell should stop, True otherwise.
        """
        try:
            command = parse_command(line)
            if command is None:
                return True
            return self.execute(command)
        except SimpleDBError as e:
            logger.info("command_failed", error=str(e), error_type=type(e).__name__)
            self._print(f"Error: {e}")
            return True

    def run(self) -> None:
        """Run the loop until exit, end of input or Ctrl-C, then shut down."""
        self._print("Welcome to SimpleDB. Type 'help' for a list of commands.")
        try:
            while True:
                try:
                    line = self._read_line(PROMPT)
                except (EOFError, KeyboardInterrupt):
                    self._print()
                    break
                if not self.execute_line(line):
                    break
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Save the snapshot and checkpoint the WAL."""
        self._db.close()
        self._print("Goodbye!")
