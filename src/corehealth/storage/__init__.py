"""Key-value persistence for assistant state.

Provides an opaque string store with in-memory and SQLite backends.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .sqlite import SQLiteKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "create_key_value_store",
]
