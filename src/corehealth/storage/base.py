"""Abstract base class for key-value persistence backends.

This module defines the persistence contract used by the conversation and
user-context stores. The abstraction hides:
- Storage medium (process memory, SQLite file)
- Connection management
- How a write replaces the previous value
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any


class KeyValueStore(ABC):
    """Abstract string key-value store.

    Every ``set`` is a full overwrite of the value under that key; there are
    no partial or delta writes.

    Supports async context manager protocol:
        async with store:
            await store.set("key", "value")
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None.

        Raises:
            PersistenceReadError: If the backend cannot be read
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``.

        Raises:
            PersistenceWriteError: If the backend cannot be written
        """

    @abstractmethod
    async def multi_remove(self, keys: Iterable[str]) -> None:
        """Remove all ``keys``; missing keys are ignored.

        Raises:
            PersistenceWriteError: If the backend cannot be written
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
