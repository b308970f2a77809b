"""Application layer for SimpleDB.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    Database: Main entry point for the table store
"""

from simpledb.application.database import Database

__all__ = ["Database"]
