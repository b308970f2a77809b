"""Domain entities for SimpleDB.

Exports:
    Record:
        - Record: a single row, column name -> value
    Table:
        - Table: ordered records sharing a fixed column list
    WAL Entries:
        - LogEntry: base class for all WAL entries
        - Operation: closed enumeration of logged operations
        - CreateTableEntry, DropTableEntry: schema changes
        - InsertEntry, UpdateEntry, DeleteEntry: row changes
"""

from simpledb.domain.entities.log_entry import (
    ENTRY_CLASSES,
    CreateTableEntry,
    DeleteEntry,
    DropTableEntry,
    InsertEntry,
    LogEntry,
    Operation,
    UpdateEntry,
)
from simpledb.domain.entities.record import Record
from simpledb.domain.entities.table import Table

__all__ = [
    # Record
    "Record",
    # Table
    "Table",
    # WAL Entries
    "ENTRY_CLASSES",
    "LogEntry",
    "Operation",
    "CreateTableEntry",
    "DropTableEntry",
    "InsertEntry",
    "UpdateEntry",
    "DeleteEntry",
]
