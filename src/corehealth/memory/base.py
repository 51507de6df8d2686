"""Shared load/save logic for stores that persist one pydantic model per key.

The abstraction hides:
- Serialization format (pydantic JSON)
- Recovery from missing or corrupt stored data
"""

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import PersistenceReadError
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class PersistedModelStore(ABC, Generic[ModelT]):
    """Reads and writes a single model under a single key.

    Reads never raise: unreadable or corrupt data is logged and replaced by
    ``default()``. Writes are full overwrites and raise
    ``PersistenceWriteError`` on failure.
    """

    model_type: type[ModelT]

    def __init__(self, kv_store: KeyValueStore, key: str):
        self._kv = kv_store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @abstractmethod
    def default(self) -> ModelT:
        """Value used when nothing usable is stored."""

    async def _read(self) -> ModelT:
        try:
            raw = await self._kv.get(self._key)
        except PersistenceReadError as e:
            logger.warning("Could not read %s, starting fresh: %s", self._key, e)
            return self.default()

        if raw is None:
            return self.default()

        try:
            return self.model_type.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding corrupt data under %s (%d validation errors)",
                self._key,
                e.error_count(),
            )
            return self.default()

    async def _write(self, value: ModelT) -> None:
        await self._kv.set(self._key, value.model_dump_json())
