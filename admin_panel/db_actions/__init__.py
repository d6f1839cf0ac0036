"""
Public interface for db_actions package.
"""
from .records import (
    add,
    add_bulk,
    find_all,
    count,
    get,
    find_one,
    update,
    update_bulk,
    soft_delete,
    delete
)

from .cascade import (
    CascadeExecutor,
    NoRecordsFound
)

from .graph import (
    CASCADE_MAP,
    Edge,
    edges,
    inbound_edges,
    dependent_kinds
)

from .store import RecordStore

from .utils import model_for

from .errors import Error

__all__ = [
    # Record functions
    "add", "add_bulk", "find_all", "count", "get", "find_one", "update", "update_bulk",
    "soft_delete", "delete",

    # Cascade
    "CascadeExecutor", "NoRecordsFound",
    "CASCADE_MAP", "Edge", "edges", "inbound_edges", "dependent_kinds",

    # Store and utilities
    "RecordStore", "model_for",

    # Error handling
    "Error"
]
