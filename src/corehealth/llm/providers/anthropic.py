"""Anthropic Claude LLM provider implementation.

Uses the official Anthropic Python SDK for async chat completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from ...errors import ProviderError, ProviderStatusError
from ..base import LLMProvider
from ..models import LLMResponse, PromptMessage


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - Message format conversion (system message handling)
    - Dropping sampling penalties the Messages API does not accept
    - Error translation (no automatic retries)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        timeout: float = 30.0,
        **client_kwargs: Any
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Default model to use
            base_url: Optional custom API base URL
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        client_kwargs.setdefault("max_retries", 0)
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def chat_completion(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        presence_penalty: float | None = None,
        frequency_penalty: float | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Anthropic Claude.

        Presence and frequency penalties are not supported by the Messages
        API and are ignored.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (default: 1024)
            **kwargs: Additional Anthropic-specific parameters

        Returns:
            LLMResponse with generated content
        """
        system_parts = [msg.content for msg in messages if msg.role == "system"]
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": [
                {"role": msg.role, "content": msg.content}
                for msg in messages
                if msg.role != "system"
            ],
            "temperature": temperature,
            "max_tokens": max_tokens or 1024,  # Anthropic requires max_tokens
            **kwargs
        }
        if system_parts:
            request_params["system"] = "\n\n".join(system_parts)

        try:
            response = await self._client.messages.create(**request_params)
        except anthropic.APIStatusError as e:
            raise ProviderStatusError(e.status_code, e.message) from e
        except anthropic.APIError as e:
            raise ProviderError(str(e)) from e

        content = "".join(block.text for block in response.content if hasattr(block, "text"))
        if not content.strip():
            raise ProviderError("completion was empty")

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens
            }

        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage
        )

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
