from .anthropic import AnthropicProvider
from .deepseek import DeepSeekProvider
from .openai import OpenAIProvider

__all__ = ["AnthropicProvider", "DeepSeekProvider", "OpenAIProvider"]
