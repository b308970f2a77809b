"""Value objects for SimpleDB.

Value objects are immutable and compared by value.

Exports:
    Selector:
        - MatchAll / MATCH_ALL: match every record
        - Equals: single-column equality
        - selector_from_dict: decode the serialized form
    LockMode:
        - SHARED / EXCLUSIVE guard modes
"""

from simpledb.domain.value_objects.lock_mode import LockMode
from simpledb.domain.value_objects.selector import (
    MATCH_ALL,
    Equals,
    MatchAll,
    Selector,
    selector_from_dict,
)

__all__ = [
    "Equals",
    "LockMode",
    "MATCH_ALL",
    "MatchAll",
    "Selector",
    "selector_from_dict",
]
