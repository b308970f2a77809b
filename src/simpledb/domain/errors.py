"""Error taxonomy for SimpleDB.

Every error the store raises derives from SimpleDBError so the command
shell (or any other caller) can handle them uniformly. None of these are
retried internally.
"""

from __future__ import annotations


class SimpleDBError(Exception):
    """Base class for all SimpleDB errors."""


class TableExistsError(SimpleDBError):
    """Raised when creating a table whose name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"table '{name}' already exists")
        self.name = name


class TableNotFoundError(SimpleDBError):
    """Raised when an operation references a table that does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"table '{name}' does not exist")
        self.name = name


class SchemaMismatchError(SimpleDBError):
    """Raised when an insert supplies the wrong number of values."""

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(
            f"invalid number of values: expected {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


class DurabilityFailureError(SimpleDBError):
    """Raised when a mutation could not be logged; it was not applied."""


class WALError(SimpleDBError):
    """Base class for write-ahead log errors."""


class WALWriteError(WALError):
    """Raised when appending or flushing a WAL entry fails."""


class WALClosedError(WALError):
    """Raised when appending to a closed WAL."""


class WALCorruptError(WALError):
    """Raised when a WAL line cannot be decoded."""

    def __init__(self, line_number: int, offset: int, reason: str) -> None:
        super().__init__(
            f"corrupt WAL entry at line {line_number} (byte offset {offset}): {reason}"
        )
        self.line_number = line_number
        self.offset = offset


class UnsupportedWALOperationError(WALError):
    """Raised when a WAL entry names an operation that cannot be replayed."""

    def __init__(self, operation: str, line_number: int | None = None) -> None:
        location = f" at line {line_number}" if line_number is not None else ""
        super().__init__(f"unsupported WAL operation '{operation}'{location}")
        self.operation = operation
        self.line_number = line_number


class SnapshotCorruptError(SimpleDBError):
    """Raised when an existing snapshot cannot be decrypted or decoded."""


class RecoveryError(SimpleDBError):
    """Raised when replaying the WAL fails part way through."""

    def __init__(self, index: int, operation: str, reason: str) -> None:
        super().__init__(
            f"recovery aborted at WAL entry {index} ({operation}): {reason}"
        )
        self.index = index
        self.operation = operation
