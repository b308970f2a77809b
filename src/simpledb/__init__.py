"""SimpleDB - Embedded Table Store

A small, single-process, in-memory table store with a write-ahead log for
durability and AES-GCM encrypted snapshots for persistence at rest.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
