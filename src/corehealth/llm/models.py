from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PromptMessage(BaseModel):
    """One {role, content} turn sent to the language model."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(
        description="Role of the message sender: 'user', 'assistant', or 'system'"
    )
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
