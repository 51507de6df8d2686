"""Conversation store: the persisted chat log for one user."""

import logging

from ..storage import KeyValueStore
from .base import PersistedModelStore
from .models import ChatMessage, ConversationHistory, MemoryKeys

logger = logging.getLogger(__name__)


class ConversationStore(PersistedModelStore[ConversationHistory]):
    """Owns the conversation history of one user.

    Keeps the last loaded or saved history in memory so that ``append`` does
    not hit the backend. There is exactly one writer per user session.
    """

    model_type = ConversationHistory

    def __init__(self, kv_store: KeyValueStore, keys: MemoryKeys):
        super().__init__(kv_store, keys.history)
        self._keys = keys
        self._history: ConversationHistory | None = None

    def default(self) -> ConversationHistory:
        return ConversationHistory()

    @property
    def history(self) -> ConversationHistory:
        """Current in-memory history (empty until loaded)."""
        return self._history if self._history is not None else self.default()

    async def load(self) -> ConversationHistory:
        """Load the persisted history; empty if nothing usable is stored."""
        self._history = await self._read()
        return self._history

    async def append(self, message: ChatMessage) -> ConversationHistory:
        """Add ``message`` to the in-memory history (not persisted)."""
        if self._history is None:
            await self.load()
        self._history = self._history.appended(message)
        return self._history

    async def save(self, history: ConversationHistory) -> None:
        """Replace the persisted history with ``history``.

        The in-memory copy is updated first, so a failed write still leaves
        the turn visible for the rest of the session.

        Raises:
            PersistenceWriteError: If the backend write fails
        """
        self._history = history
        await self._write(history)

    async def clear(self) -> None:
        """Erase the history and the user context together.

        Raises:
            PersistenceWriteError: If the backend write fails
        """
        self._history = self.default()
        await self._kv.multi_remove(self._keys.all)
        logger.info("Cleared conversation memory for user %s", self._keys.user_id)
