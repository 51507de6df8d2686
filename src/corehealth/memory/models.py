"""Data models for conversation memory.

These models define the persisted conversation log and the rolling model of
the user's interests, independent of the storage backend used.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from uuid_extensions import uuid7

from ..analysis import BiomarkerTrendRecord, ConversationStyle, IntentTag, TopicTag

DEFAULT_WINDOW_SIZE = 20
MAX_PREFERRED_TOPICS = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(str, Enum):
    TEXT = "text"
    ALERT = "alert"


class MessageMetadata(BaseModel):
    """Classification results attached to a user message."""

    model_config = ConfigDict(frozen=True)

    intent: IntentTag | None = None
    topics: list[TopicTag] = Field(default_factory=list)
    health_summary: str | None = Field(default=None, description="One-line health snapshot summary")


class ChatMessage(BaseModel):
    """A single chat turn. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid7()), description="Time-ordered UUIDv7")
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    kind: MessageKind = MessageKind.TEXT
    metadata: MessageMetadata | None = None

    @classmethod
    def user(cls, content: str, metadata: MessageMetadata | None = None) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content, metadata=metadata)

    @classmethod
    def assistant(cls, content: str, kind: MessageKind = MessageKind.TEXT) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content, kind=kind)


class ConversationHistory(BaseModel):
    """Ordered chat log, oldest first.

    The persisted log is unbounded; ``window`` gives the bounded suffix that
    is sent to the language model.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatMessage, ...] = ()

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def latest(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def appended(self, message: ChatMessage) -> "ConversationHistory":
        """Return a new history with ``message`` added at the end."""
        return ConversationHistory(messages=(*self.messages, message))

    def window(self, size: int = DEFAULT_WINDOW_SIZE) -> list[ChatMessage]:
        """Most recent ``size`` messages; truncation drops from the head only."""
        if size < 1:
            raise ValueError("window size must be >= 1")
        return list(self.messages[-size:])


class UserContextModel(BaseModel):
    """Rolling model of what the user cares about."""

    model_config = ConfigDict(frozen=True)

    preferred_topics: list[IntentTag] = Field(
        default_factory=list,
        description="Most recent distinct intents, oldest first, capped at 10"
    )
    health_concerns: list[str] = Field(
        default_factory=list,
        description="Biomarkers currently flagged concerning or critical"
    )
    goals_focus: list[TopicTag] = Field(default_factory=list)
    conversation_style: ConversationStyle = ConversationStyle.DETAILED
    last_data_update: datetime | None = None
    biomarker_trends: dict[str, BiomarkerTrendRecord] = Field(default_factory=dict)


class MemoryKeys(BaseModel):
    """Storage keys for one user's assistant state."""

    model_config = ConfigDict(frozen=True)

    user_id: str = "default"
    prefix: str = "health_assistant"

    @property
    def history(self) -> str:
        return f"{self.prefix}:{self.user_id}:conversation_history"

    @property
    def context(self) -> str:
        return f"{self.prefix}:{self.user_id}:user_context"

    @property
    def all(self) -> list[str]:
        return [self.history, self.context]
