"""Assistant gateway: one conversational turn against the language model.

State machine per call:
    IDLE -> CLASSIFYING -> BUILDING_CONTEXT -> AWAITING_PROVIDER
         -> PERSISTING -> IDLE   (success)
         -> IDLE                 (failure, nothing persisted)
"""

import asyncio
import logging
from enum import Enum

from ..analysis import TrendAnalyzer, classify_intent, extract_topics, infer_conversation_style
from ..errors import ConfigurationMissingError, HealthAssistantError, PersistenceWriteError, ProviderError
from ..health import HealthSnapshot
from ..llm import LLMProvider, PromptMessage
from ..memory import (
    ChatMessage,
    ConversationHistory,
    ConversationStore,
    MessageMetadata,
    UserContextModel,
    UserContextStore,
    update_user_context,
)
from .briefing import ContextBuilder
from .config import AssistantConfig
from .models import AssistantTurn, TurnOutcome

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "I'm sorry, but the AI assistant is not configured. Please contact support "
    "for assistance with your health questions."
)
APOLOGY_MESSAGE = (
    "I'm experiencing technical difficulties. Please try again later or consult "
    "with a healthcare provider for urgent concerns."
)


class GatewayState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    BUILDING_CONTEXT = "building_context"
    AWAITING_PROVIDER = "awaiting_provider"
    PERSISTING = "persisting"


def build_request_messages(
    system_prompt: str,
    history: ConversationHistory,
    window_size: int,
) -> list[PromptMessage]:
    """System message followed by the last ``window_size`` history turns."""
    messages = [PromptMessage(role="system", content=system_prompt)]
    messages.extend(
        PromptMessage(role=message.role.value, content=message.content)
        for message in history.window(window_size)
    )
    return messages


class AssistantGateway:
    """Issues bounded-window completion requests and records successful turns.

    Hidden design decisions:
    - Prompt assembly and history window
    - Sampling parameters
    - Mapping of every failure onto one user-facing apology
    - Persisting only turns that received a real reply
    """

    def __init__(
        self,
        config: AssistantConfig,
        llm: LLMProvider | None,
        conversation_store: ConversationStore,
        context_store: UserContextStore,
        context_builder: ContextBuilder | None = None,
        analyzer: TrendAnalyzer | None = None,
    ):
        self._config = config
        self._llm = llm
        self._conversation = conversation_store
        self._context = context_store
        self._builder = context_builder or ContextBuilder(config.briefing_max_chars)
        self._analyzer = analyzer or TrendAnalyzer()
        self._state = GatewayState.IDLE

    @property
    def state(self) -> GatewayState:
        return self._state

    @property
    def is_configured(self) -> bool:
        return self._llm is not None and self._config.has_credential

    def _require_provider(self) -> LLMProvider:
        if not self.is_configured:
            raise ConfigurationMissingError()
        return self._llm

    async def converse(
        self,
        message: str,
        history: ConversationHistory,
        context: UserContextModel | None,
        snapshot: HealthSnapshot | None = None,
    ) -> AssistantTurn:
        """Run one conversational turn.

        Args:
            message: The user's text
            history: Conversation so far (not including ``message``)
            context: Current user context, or None for defaults
            snapshot: Read-only health data accompanying the turn

        Returns:
            AssistantTurn whose ``text`` is always safe to show the user
        """
        context = context or UserContextModel()
        try:
            llm = self._require_provider()
        except ConfigurationMissingError as e:
            logger.warning("%s; returning fallback reply", e)
            return AssistantTurn(
                text=NOT_CONFIGURED_MESSAGE,
                outcome=TurnOutcome.NOT_CONFIGURED,
                history=history,
                context=context,
            )

        snapshot = snapshot or HealthSnapshot()
        intent = None
        try:
            self._state = GatewayState.CLASSIFYING
            intent = classify_intent(message)
            topics = extract_topics(message)
            updated_context = update_user_context(
                context,
                intent,
                biomarkers=snapshot.biomarkers,
                topics=topics,
                style=infer_conversation_style(message),
                analyzer=self._analyzer,
            )
            user_message = ChatMessage.user(
                message,
                MessageMetadata(
                    intent=intent,
                    topics=sorted(topics, key=lambda t: t.value),
                    health_summary=snapshot.summary(),
                ),
            )
            pending = history.appended(user_message)

            self._state = GatewayState.BUILDING_CONTEXT
            request = build_request_messages(
                self._builder.system_prompt(snapshot, updated_context),
                pending,
                self._config.window_size,
            )

            self._state = GatewayState.AWAITING_PROVIDER
            response = await asyncio.wait_for(
                llm.chat_completion(
                    request,
                    model=self._config.model,
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                    presence_penalty=self._config.presence_penalty,
                    frequency_penalty=self._config.frequency_penalty,
                ),
                timeout=self._config.request_timeout,
            )
            content = response.content.strip()
            if not content:
                raise ProviderError("completion was empty")
        except Exception as e:
            # Provider errors, timeouts and malformed replies all end the turn
            # the same way; the failed turn is not recorded.
            retryable = isinstance(e, HealthAssistantError) and e.is_retryable()
            logger.exception("Assistant request failed (intent=%s, retryable=%s)", intent, retryable)
            self._state = GatewayState.IDLE
            return AssistantTurn(
                text=APOLOGY_MESSAGE,
                outcome=TurnOutcome.FAILED,
                history=history,
                context=context,
            )

        reply = ChatMessage.assistant(content)
        final_history = pending.appended(reply)

        self._state = GatewayState.PERSISTING
        await self._persist(final_history, updated_context)
        self._state = GatewayState.IDLE

        return AssistantTurn(
            text=reply.content,
            outcome=TurnOutcome.SUCCESS,
            history=final_history,
            context=updated_context,
        )

    async def _persist(self, history: ConversationHistory, context: UserContextModel) -> None:
        """Write both stores; failures are logged, never raised."""
        try:
            await self._conversation.save(history)
        except PersistenceWriteError:
            logger.exception("Failed to persist conversation history")
        try:
            await self._context.save(context)
        except PersistenceWriteError:
            logger.exception("Failed to persist user context")
