"""Unit tests for the assistant gateway."""
import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from corehealth.analysis import IntentTag, TopicTag
from corehealth.assistant import (
    APOLOGY_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    AssistantConfig,
    AssistantGateway,
    TurnOutcome,
    build_request_messages,
)
from corehealth.assistant.gateway import GatewayState
from corehealth.errors import ProviderError, ProviderStatusError
from corehealth.memory import (
    ChatMessage,
    ConversationHistory,
    ConversationStore,
    MemoryKeys,
    MessageRole,
    UserContextModel,
    UserContextStore,
)
from corehealth.storage import InMemoryKeyValueStore


def make_gateway(config, llm, kv):
    keys = MemoryKeys()
    return AssistantGateway(config, llm, ConversationStore(kv, keys), UserContextStore(kv, keys))


def make_history(count: int) -> ConversationHistory:
    history = ConversationHistory()
    for i in range(count):
        message = ChatMessage.user(f"m{i}") if i % 2 == 0 else ChatMessage.assistant(f"m{i}")
        history = history.appended(message)
    return history


class TestNotConfigured:
    """Tests for the missing-credential path."""

    @pytest.mark.asyncio
    async def test_fixed_reply_without_credential(self, unconfigured, llm_factory, kv_store):
        llm = llm_factory()
        gateway = make_gateway(unconfigured, llm, kv_store)

        turn = await gateway.converse("How is my sleep?", ConversationHistory(), None)

        assert turn.text == NOT_CONFIGURED_MESSAGE
        assert turn.outcome is TurnOutcome.NOT_CONFIGURED
        assert llm.requests == []
        assert kv_store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_fixed_reply_without_provider(self, config, kv_store):
        turn = await make_gateway(config, None, kv_store).converse("hi", ConversationHistory(), None)
        assert turn.text == NOT_CONFIGURED_MESSAGE


class TestFailure:
    """Tests that failed turns are apologised for and never recorded."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ProviderStatusError(500, "server error"),
        ProviderStatusError(401),
        ProviderError("completion was empty"),
        ConnectionError("network unreachable"),
    ])
    async def test_provider_error(self, config, llm_factory, kv_store, error):
        history = make_history(2)
        gateway = make_gateway(config, llm_factory([error]), kv_store)

        turn = await gateway.converse("What about my cholesterol?", history, None)

        assert turn.text == APOLOGY_MESSAGE
        assert turn.outcome is TurnOutcome.FAILED
        assert turn.history == history
        assert turn.context == UserContextModel()
        assert kv_store.snapshot() == {}
        assert gateway.state is GatewayState.IDLE

    @pytest.mark.asyncio
    async def test_timeout(self, llm_factory, kv_store):
        config = AssistantConfig(api_key="sk-test", request_timeout=0.01)
        gateway = make_gateway(config, llm_factory(delay=1.0), kv_store)

        turn = await gateway.converse("hi", ConversationHistory(), None)

        assert turn.text == APOLOGY_MESSAGE
        assert kv_store.snapshot() == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["", "   ", "\n\t\n"])
    async def test_blank_reply_is_a_failure(self, config, llm_factory, kv_store, reply):
        history = make_history(2)
        gateway = make_gateway(config, llm_factory([reply]), kv_store)

        turn = await gateway.converse("hi", history, None)

        assert turn.text == APOLOGY_MESSAGE
        assert turn.outcome is TurnOutcome.FAILED
        assert turn.history == history
        assert kv_store.snapshot() == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,retryable", [
        (ProviderStatusError(503), True),
        (ProviderStatusError(401), False),
        (ConnectionError("network unreachable"), False),
    ])
    async def test_failure_log_records_retryability(self, config, llm_factory, kv_store, caplog, error, retryable):
        gateway = make_gateway(config, llm_factory([error]), kv_store)

        with caplog.at_level(logging.ERROR, logger="corehealth.assistant.gateway"):
            await gateway.converse("hi", ConversationHistory(), None)

        assert f"retryable={retryable}" in caplog.text


class TestSuccess:
    """Tests for a successful turn."""

    @pytest.mark.asyncio
    async def test_reply_is_recorded(self, config, llm_factory, kv_store, snapshot):
        llm = llm_factory(["  Aim for 7-9 hours of sleep.  "])
        gateway = make_gateway(config, llm, kv_store)

        turn = await gateway.converse("How can I sleep better?", ConversationHistory(), None, snapshot)

        assert turn.succeeded
        assert turn.text == "Aim for 7-9 hours of sleep."
        assert [m.role for m in turn.history.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        user_message = turn.history.messages[0]
        assert user_message.metadata.intent is IntentTag.SLEEP_OPTIMIZATION
        assert user_message.metadata.topics == [TopicTag.SLEEP]
        assert user_message.metadata.health_summary == snapshot.summary()
        assert turn.context.preferred_topics == [IntentTag.SLEEP_OPTIMIZATION]

        keys = MemoryKeys()
        kv = kv_store.snapshot()
        assert set(kv) == {keys.history, keys.context}
        assert await ConversationStore(kv_store, keys).load() == turn.history
        assert await UserContextStore(kv_store, keys).load() == turn.context

    @pytest.mark.asyncio
    async def test_sampling_parameters(self, config, llm_factory, kv_store):
        llm = llm_factory()
        await make_gateway(config, llm, kv_store).converse("hi", ConversationHistory(), None)

        request = llm.requests[0]
        assert request["model"] == "gpt-4o"
        assert request["temperature"] == 0.6
        assert request["max_tokens"] == 500
        assert request["presence_penalty"] == 0.1
        assert request["frequency_penalty"] == 0.1

    @pytest.mark.asyncio
    async def test_system_prompt_carries_health_data(self, config, llm_factory, kv_store, snapshot):
        llm = llm_factory()
        await make_gateway(config, llm, kv_store).converse("hi", ConversationHistory(), None, snapshot)

        system = llm.requests[0]["messages"][0]
        assert system.role == "system"
        assert "Fasting Glucose: 95 mg/dL (Normal)" in system.content

    @pytest.mark.asyncio
    async def test_system_prompt_without_data_uses_sentinel(self, config, llm_factory, kv_store):
        llm = llm_factory()
        await make_gateway(config, llm, kv_store).converse("hi", ConversationHistory(), None)
        assert "No current health data available." in llm.requests[0]["messages"][0].content

    @pytest.mark.asyncio
    async def test_write_failure_still_returns_reply(self, config, llm_factory, read_only_store):
        gateway = make_gateway(config, llm_factory(["Sure."]), read_only_store)

        turn = await gateway.converse("hi", ConversationHistory(), None)

        assert turn.succeeded
        assert turn.text == "Sure."
        assert len(turn.history) == 2


class TestRequestWindow:
    """Tests for the bounded history window."""

    @pytest.mark.asyncio
    async def test_window_includes_newest_message(self, config, llm_factory, kv_store):
        llm = llm_factory()
        await make_gateway(config, llm, kv_store).converse("newest", make_history(30), None)

        messages = llm.requests[0]["messages"]
        turns = messages[1:]
        assert len(turns) == config.window_size
        assert turns[-1].content == "newest"
        assert turns[0].content == "m11"
        assert all(m.role != "system" for m in turns)

    @settings(max_examples=30)
    @given(st.integers(min_value=0, max_value=40), st.integers(min_value=1, max_value=25))
    def test_build_request_messages(self, count: int, window: int):
        history = make_history(count)
        messages = build_request_messages("system text", history, window)

        assert messages[0].role == "system"
        assert len(messages) - 1 == min(count, window)
        if count:
            assert messages[-1].content == history.latest.content
