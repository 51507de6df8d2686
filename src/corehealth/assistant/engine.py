"""Health assistant facade: one conversation engine per user.

Following Parnas principles, this module hides:
- Wiring of stores, gateway and insight engine
- Lazy loading of persisted state
- Per-user serialization of turns and resets
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date as date_type

from ..errors import ConfigurationMissingError, PersistenceWriteError
from ..health import DailyInsight, HealthSnapshot
from ..llm import LLMProvider, create_llm_provider
from ..memory import (
    ChatMessage,
    ConversationHistory,
    ConversationStore,
    MemoryKeys,
    MessageKind,
    UserContextModel,
    UserContextStore,
)
from ..storage import KeyValueStore
from .briefing import ContextBuilder
from .config import AssistantConfig
from .gateway import AssistantGateway
from .greeting import flagged_biomarkers, personalized_greeting
from .insights import InsightEngine
from .models import BiomarkerTrendAnalysis, HealthAssistantResponse

logger = logging.getLogger(__name__)


class HealthAssistant:
    """Conversation engine for a single user.

    ``converse`` and ``reset_memory`` run under one lock, so concurrent
    callers sharing an instance never interleave a turn with a reset.
    """

    def __init__(
        self,
        config: AssistantConfig,
        kv_store: KeyValueStore,
        llm: LLMProvider | None = None,
        user_id: str = "default",
        snapshot: HealthSnapshot | None = None,
    ):
        self.config = config
        self.user_id = user_id
        self.snapshot = snapshot or HealthSnapshot()
        self._llm = llm

        keys = MemoryKeys(user_id=user_id, prefix=config.key_prefix)
        self._conversation = ConversationStore(kv_store, keys)
        self._context_store = UserContextStore(kv_store, keys)

        builder = ContextBuilder(config.briefing_max_chars)
        self._gateway = AssistantGateway(
            config,
            llm,
            self._conversation,
            self._context_store,
            context_builder=builder,
        )
        self._insights = InsightEngine(config, llm, context_builder=builder)

        self._lock = asyncio.Lock()
        self._history: ConversationHistory | None = None
        self._context: UserContextModel | None = None

    @classmethod
    def from_config(
        cls,
        config: AssistantConfig,
        kv_store: KeyValueStore,
        user_id: str = "default",
        snapshot: HealthSnapshot | None = None,
    ) -> "HealthAssistant":
        """Build an assistant, creating a provider client only when a credential exists."""
        try:
            llm = create_llm_provider(config.provider, **config.provider_kwargs())
        except ConfigurationMissingError as e:
            logger.info("%s; assistant will use fallback replies", e)
            llm = None
        return cls(config, kv_store, llm=llm, user_id=user_id, snapshot=snapshot)

    @property
    def is_configured(self) -> bool:
        return self._gateway.is_configured

    async def _ensure_loaded(self) -> None:
        if self._history is None:
            self._history = await self._conversation.load()
        if self._context is None:
            self._context = await self._context_store.load()

    async def history(self) -> ConversationHistory:
        """The conversation so far, loading it on first use."""
        async with self._lock:
            await self._ensure_loaded()
            return self._history

    async def user_context(self) -> UserContextModel:
        async with self._lock:
            await self._ensure_loaded()
            return self._context

    async def start_conversation(self) -> ConversationHistory:
        """Seed an empty conversation with the personalised greeting."""
        async with self._lock:
            await self._ensure_loaded()
            if len(self._history) > 0:
                return self._history

            greeting = personalized_greeting(
                self.snapshot.profile,
                self.snapshot.biomarkers,
                self.snapshot.health_score,
            )
            kind = MessageKind.ALERT if flagged_biomarkers(self.snapshot.biomarkers) else MessageKind.TEXT
            self._history = self._history.appended(ChatMessage.assistant(greeting, kind=kind))
            try:
                await self._conversation.save(self._history)
            except PersistenceWriteError:
                logger.exception("Failed to persist greeting for user %s", self.user_id)
            return self._history

    async def converse(self, text: str, snapshot: HealthSnapshot | None = None) -> str:
        """Send one user message and return the text to display.

        Args:
            text: The user's message
            snapshot: Health data for this turn (defaults to the instance snapshot)

        Returns:
            The model reply, or a fixed fallback message when the assistant is
            unconfigured or the request fails. Never raises for those cases.
        """
        async with self._lock:
            await self._ensure_loaded()
            turn = await self._gateway.converse(
                text,
                self._history,
                self._context,
                snapshot=snapshot or self.snapshot,
            )
            if turn.succeeded:
                self._history = turn.history
                self._context = turn.context
            return turn.text

    async def reset_memory(self) -> None:
        """Forget the conversation and the user context."""
        async with self._lock:
            try:
                await self._conversation.clear()
            except PersistenceWriteError:
                logger.exception("Failed to clear stored memory for user %s", self.user_id)
            self._history = ConversationHistory()
            self._context = UserContextModel()

    async def generate_insights(
        self,
        snapshot: HealthSnapshot | None = None,
        recent_insights: Sequence[DailyInsight] | None = None,
    ) -> HealthAssistantResponse:
        snapshot = snapshot or self.snapshot
        return await self._insights.generate_insights(
            snapshot.profile,
            snapshot.biomarkers,
            snapshot.health_score,
            recent_insights=recent_insights,
        )

    async def generate_daily_recommendations(
        self,
        snapshot: HealthSnapshot | None = None,
        day: date_type | None = None,
    ) -> list[DailyInsight]:
        snapshot = snapshot or self.snapshot
        return await self._insights.generate_daily_recommendations(
            snapshot.profile,
            snapshot.biomarkers,
            snapshot.health_score,
            day=day,
        )

    async def analyze_biomarker_trends(self, snapshot: HealthSnapshot | None = None) -> BiomarkerTrendAnalysis:
        """Analyse biomarkers, comparing against trend records from earlier turns."""
        snapshot = snapshot or self.snapshot
        context = await self.user_context()
        return await self._insights.analyze_biomarker_trends(
            snapshot.biomarkers,
            previous=context.biomarker_trends,
        )

    async def close(self) -> None:
        if self._llm is not None:
            await self._llm.close()


class AssistantRegistry:
    """Hands out one HealthAssistant per user id.

    Callers for the same user share an instance and therefore its lock.
    """

    def __init__(self, config: AssistantConfig, kv_store: KeyValueStore, llm: LLMProvider | None = None):
        self._config = config
        self._kv = kv_store
        self._llm = llm
        self._lock = asyncio.Lock()
        self._assistants: dict[str, HealthAssistant] = {}

    async def get(self, user_id: str, snapshot: HealthSnapshot | None = None) -> HealthAssistant:
        async with self._lock:
            assistant = self._assistants.get(user_id)
            if assistant is None:
                if self._llm is None and self._config.has_credential:
                    self._llm = create_llm_provider(self._config.provider, **self._config.provider_kwargs())
                assistant = HealthAssistant(
                    self._config,
                    self._kv,
                    llm=self._llm,
                    user_id=user_id,
                    snapshot=snapshot,
                )
                self._assistants[user_id] = assistant
            elif snapshot is not None:
                assistant.snapshot = snapshot
            return assistant

    def __len__(self) -> int:
        return len(self._assistants)

    async def close(self) -> None:
        """Close the shared provider client."""
        async with self._lock:
            self._assistants.clear()
            if self._llm is not None:
                await self._llm.close()
                self._llm = None
