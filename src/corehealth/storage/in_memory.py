"""In-memory key-value backend.

Simple dict-based storage. Data is lost when the application exits.
"""

from collections.abc import Iterable

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for single-session use and tests."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)

    @property
    def backend_type(self) -> str:
        return "memory"
