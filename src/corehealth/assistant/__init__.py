"""Conversation engine: gateway, insight engine and per-user assistant."""

from .briefing import NO_HEALTH_DATA, ContextBuilder, categorize_biomarker
from .config import AssistantConfig
from .engine import AssistantRegistry, HealthAssistant
from .gateway import APOLOGY_MESSAGE, NOT_CONFIGURED_MESSAGE, AssistantGateway, build_request_messages
from .greeting import personalized_greeting
from .insights import InsightEngine, parse_daily_insights, parse_health_response, reply_lines
from .models import (
    AssistantTurn,
    BiomarkerTrendAnalysis,
    BiomarkerTrendInsight,
    HealthAssistantResponse,
    RiskAssessment,
    TurnOutcome,
)

__all__ = [
    "APOLOGY_MESSAGE",
    "NOT_CONFIGURED_MESSAGE",
    "NO_HEALTH_DATA",
    "AssistantConfig",
    "AssistantGateway",
    "AssistantRegistry",
    "AssistantTurn",
    "BiomarkerTrendAnalysis",
    "BiomarkerTrendInsight",
    "ContextBuilder",
    "HealthAssistant",
    "HealthAssistantResponse",
    "InsightEngine",
    "RiskAssessment",
    "TurnOutcome",
    "build_request_messages",
    "categorize_biomarker",
    "parse_daily_insights",
    "parse_health_response",
    "personalized_greeting",
    "reply_lines",
]
