from typing import Any

import openai
from openai import AsyncOpenAI

from ...errors import ProviderError, ProviderStatusError
from ..base import LLMProvider
from ..models import LLMResponse, PromptMessage


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Error translation (no automatic retries)
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        organization: str | None = None,
        timeout: float = 30.0,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        client_kwargs.setdefault("max_retries", 0)
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
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
        """Generate a chat completion using the Chat Completions API.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            presence_penalty: Presence penalty
            frequency_penalty: Frequency penalty
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            LLMResponse with generated content
        """
        model_to_use = model or self._model

        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            **kwargs
        }
        # Only send optional parameters that were set
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        if presence_penalty is not None:
            request_params["presence_penalty"] = presence_penalty
        if frequency_penalty is not None:
            request_params["frequency_penalty"] = frequency_penalty

        try:
            completion = await self._client.chat.completions.create(**request_params)
        except openai.APIStatusError as e:
            raise ProviderStatusError(e.status_code, e.message) from e
        except openai.APIError as e:
            # APIConnectionError, APITimeoutError and response decoding errors
            raise ProviderError(str(e)) from e

        if not completion.choices:
            raise ProviderError("completion contained no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise ProviderError("completion was empty")

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=content,
            model=completion.model,
            usage=usage
        )

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
