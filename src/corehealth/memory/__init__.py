"""Conversation memory module.

Provides the persisted chat log and the rolling user context model.
"""

from .base import PersistedModelStore
from .context import UserContextStore, update_user_context
from .conversation import ConversationStore
from .models import (
    DEFAULT_WINDOW_SIZE,
    MAX_PREFERRED_TOPICS,
    ChatMessage,
    ConversationHistory,
    MemoryKeys,
    MessageKind,
    MessageMetadata,
    MessageRole,
    UserContextModel,
)

__all__ = [
    "DEFAULT_WINDOW_SIZE",
    "MAX_PREFERRED_TOPICS",
    "ChatMessage",
    "ConversationHistory",
    "ConversationStore",
    "MemoryKeys",
    "MessageKind",
    "MessageMetadata",
    "MessageRole",
    "PersistedModelStore",
    "UserContextModel",
    "UserContextStore",
    "update_user_context",
]
