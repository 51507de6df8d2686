"""Unit tests for the LLM module."""
from types import SimpleNamespace

import pytest

from corehealth.errors import PersistenceWriteError, ProviderError, ProviderStatusError
from corehealth.llm import (
    AnthropicProvider,
    DeepSeekProvider,
    LLMProvider,
    OpenAIProvider,
    PromptMessage,
    create_llm_provider,
)


class TestLLMProviderInterface:
    """Tests for the abstract LLMProvider interface."""

    def test_provider_is_abstract(self):
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore


class TestPromptMessage:
    """Tests for prompt messages."""

    def test_valid_roles(self):
        for role in ("system", "user", "assistant"):
            assert PromptMessage(role=role, content="x").role == role

    def test_invalid_role_fails(self):
        with pytest.raises(ValueError):
            PromptMessage(role="tool", content="x")


class TestLLMFactory:
    """Tests for the LLM factory function."""

    def test_create_openai_provider(self):
        provider = create_llm_provider("openai", api_key="fake-key", model="gpt-4o-mini")
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o-mini"

    def test_create_deepseek_provider(self):
        provider = create_llm_provider("deepseek", api_key="fake-key")
        assert isinstance(provider, DeepSeekProvider)
        assert provider.model == "deepseek-chat"

    def test_claude_alias(self):
        provider = create_llm_provider("claude", api_key="fake-key")
        assert isinstance(provider, AnthropicProvider)

    def test_missing_api_key_raises_error(self):
        with pytest.raises(TypeError, match="api_key"):
            create_llm_provider("openai")

    def test_unknown_provider_raises_error(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("gemini", api_key="fake-key")

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_chat_completion_real_api(self, api_keys):
        """Integration test: one short completion."""
        if not api_keys["openai"]:
            pytest.skip("OPENAI_API_KEY not set")

        async with create_llm_provider("openai", api_key=api_keys["openai"], model="gpt-4o-mini") as provider:
            response = await provider.chat_completion(
                [PromptMessage(role="user", content="Reply with the word: ok")],
                max_tokens=5,
            )
        assert response.content


class TestOpenAIProviderErrors:
    """Tests that malformed completions become ProviderError."""

    @staticmethod
    def _stub_completion(provider: OpenAIProvider, completion) -> None:
        async def create(**params):
            return completion
        provider._client.chat.completions.create = create

    @pytest.mark.asyncio
    async def test_empty_content_raises(self):
        provider = OpenAIProvider(api_key="fake-key")
        self._stub_completion(provider, SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="   "))],
            model="gpt-4o",
            usage=None,
        ))
        with pytest.raises(ProviderError, match="empty"):
            await provider.chat_completion([PromptMessage(role="user", content="hi")])

    @pytest.mark.asyncio
    async def test_no_choices_raises(self):
        provider = OpenAIProvider(api_key="fake-key")
        self._stub_completion(provider, SimpleNamespace(choices=[], model="gpt-4o", usage=None))
        with pytest.raises(ProviderError, match="no choices"):
            await provider.chat_completion([PromptMessage(role="user", content="hi")])

    @pytest.mark.asyncio
    async def test_content_is_returned(self):
        provider = OpenAIProvider(api_key="fake-key")
        self._stub_completion(provider, SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Drink water."))],
            model="gpt-4o",
            usage=None,
        ))
        response = await provider.chat_completion([PromptMessage(role="user", content="hi")])
        assert response.content == "Drink water."
        assert response.model == "gpt-4o"


class TestProviderErrorRetryability:
    """Tests for the is_retryable hook."""

    @pytest.mark.parametrize("status,expected", [(429, True), (500, True), (503, True), (400, False), (401, False)])
    def test_status_codes(self, status, expected):
        assert ProviderStatusError(status).is_retryable() is expected

    def test_persistence_errors_are_not_retryable(self):
        assert not PersistenceWriteError("key", "disk full").is_retryable()
