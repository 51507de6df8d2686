"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Iterable
from typing import Any

import pytest

from corehealth.assistant import AssistantConfig
from corehealth.errors import PersistenceWriteError
from corehealth.health import Biomarker, HealthScore, HealthSnapshot, UserProfile
from corehealth.llm import LLMProvider, LLMResponse, PromptMessage
from corehealth.storage import InMemoryKeyValueStore


class FakeLLMProvider(LLMProvider):
    """Scripted provider: returns queued replies, or raises queued exceptions."""

    def __init__(
        self,
        replies: Iterable[str | Exception] = (),
        default: str = "OK",
        delay: float = 0.0,
    ):
        self._replies = list(replies)
        self._default = default
        self._delay = delay
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

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
        self.requests.append({
            "messages": list(messages),
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "presence_penalty": presence_penalty,
            "frequency_penalty": frequency_penalty,
        })
        if self._delay:
            await asyncio.sleep(self._delay)
        reply = self._replies.pop(0) if self._replies else self._default
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=model or self.model)

    async def close(self) -> None:
        self.closed = True


class ReadOnlyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose writes always fail."""

    async def set(self, key: str, value: str) -> None:
        raise PersistenceWriteError(key, "disk full")

    async def multi_remove(self, keys: Iterable[str]) -> None:
        raise PersistenceWriteError(",".join(keys), "disk full")


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
    }


@pytest.fixture
def config():
    """Configuration with a (fake) credential."""
    return AssistantConfig(api_key="sk-test", provider="openai", model="gpt-4o")


@pytest.fixture
def unconfigured():
    """Configuration without any credential."""
    return AssistantConfig()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def profile():
    return UserProfile(
        age=34,
        gender="female",
        height_cm=170,
        weight_kg=65,
        activity_level="moderate",
    )


@pytest.fixture
def biomarkers():
    return [
        Biomarker(name="Fasting Glucose", value=95, unit="mg/dL"),
        Biomarker(name="LDL Cholesterol", value=130, unit="mg/dL"),
        Biomarker(name="Vitamin B12", value=450, unit="pg/mL"),
    ]


@pytest.fixture
def health_score():
    return HealthScore(overall=82, sleep=75, activity=88)


@pytest.fixture
def snapshot(profile, biomarkers, health_score):
    return HealthSnapshot(profile=profile, biomarkers=biomarkers, health_score=health_score)


@pytest.fixture
def llm_factory():
    """Build a FakeLLMProvider with scripted replies."""
    return FakeLLMProvider


@pytest.fixture
def read_only_store():
    return ReadOnlyKeyValueStore()
