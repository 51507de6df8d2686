"""Enumerations and records produced by the analysis module."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IntentTag(str, Enum):
    """Coarse purpose of a user message. Exactly one per message."""

    BIOMARKER_ANALYSIS = "biomarker_analysis"
    NUTRITION_GUIDANCE = "nutrition_guidance"
    FITNESS_GUIDANCE = "fitness_guidance"
    SLEEP_OPTIMIZATION = "sleep_optimization"
    STRESS_MANAGEMENT = "stress_management"
    SUPPLEMENT_GUIDANCE = "supplement_guidance"
    SYMPTOM_DISCUSSION = "symptom_discussion"
    GENERAL_HEALTH = "general_health"


class TopicTag(str, Enum):
    """Subject matter touched by a message. Zero or more per message."""

    CARDIOVASCULAR = "cardiovascular"
    METABOLIC = "metabolic"
    NUTRITION = "nutrition"
    EXERCISE = "exercise"
    SLEEP = "sleep"
    STRESS = "stress"
    SUPPLEMENTS = "supplements"
    LIVER = "liver"
    KIDNEY = "kidney"


class BiomarkerStatus(str, Enum):
    """Status label shown next to a biomarker reading."""

    OPTIMAL = "Optimal"
    NORMAL = "Normal"
    LOW = "Low"
    HIGH = "High"
    WITHIN_RANGE = "Within range"  # no reference range known


class Significance(str, Enum):
    """Coarse clinical-risk bucket kept in the user context."""

    NORMAL = "normal"
    CONCERNING = "concerning"
    CRITICAL = "critical"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class ConversationStyle(str, Enum):
    """How the assistant should phrase its answers."""

    DETAILED = "detailed"
    CONCISE = "concise"
    TECHNICAL = "technical"


class BiomarkerTrendRecord(BaseModel):
    """Latest trend snapshot for one biomarker name."""

    model_config = ConfigDict(frozen=True)

    trend: TrendDirection = TrendDirection.STABLE
    significance: Significance = Significance.NORMAL
    last_value: float
    change_percent: float = Field(default=0.0, description="Change vs. previous reading, in percent")
