"""
CoreHealth: conversation engine for a personal AI health assistant.

Each sub-package hides one design decision: reference ranges, intent
classification, persistence, conversation memory, the language-model
provider, and prompt assembly.
"""

__version__ = "0.1.0"

from .assistant import (
    AssistantConfig,
    AssistantRegistry,
    HealthAssistant,
    HealthAssistantResponse,
)
from .health import Biomarker, DailyInsight, HealthScore, HealthSnapshot, UserProfile

__all__ = [
    "AssistantConfig",
    "AssistantRegistry",
    "Biomarker",
    "DailyInsight",
    "HealthAssistant",
    "HealthAssistantResponse",
    "HealthScore",
    "HealthSnapshot",
    "UserProfile",
]
