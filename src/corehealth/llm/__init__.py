from .base import LLMProvider
from .factory import SUPPORTED_PROVIDERS, create_llm_provider
from .models import LLMResponse, PromptMessage
from .providers import AnthropicProvider, DeepSeekProvider, OpenAIProvider

__all__ = [
    "SUPPORTED_PROVIDERS",
    "LLMProvider",
    "create_llm_provider",
    "LLMResponse",
    "PromptMessage",
    "AnthropicProvider",
    "DeepSeekProvider",
    "OpenAIProvider",
]
