"""Data structures returned by the assistant."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..analysis import BiomarkerStatus, TrendDirection
from ..health import Priority
from ..memory import ConversationHistory, UserContextModel


class RiskAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: Priority = Priority.LOW
    concerns: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class HealthAssistantResponse(BaseModel):
    """Structured insights parsed from a one-shot model reply.

    Always well-formed: the insight engine falls back to generic content
    rather than returning None.
    """

    model_config = ConfigDict(frozen=True)

    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    next_actions: list[str] = Field(default_factory=list)
    follow_up_questions: list[str] = Field(default_factory=list)


class BiomarkerTrendInsight(BaseModel):
    model_config = ConfigDict(frozen=True)

    biomarker: str
    status: BiomarkerStatus
    trend: TrendDirection
    insight: str


class BiomarkerTrendAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    trends: list[BiomarkerTrendInsight] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class TurnOutcome(str, Enum):
    """How a conversational turn ended."""

    SUCCESS = "success"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"


class AssistantTurn(BaseModel):
    """Result of one gateway call.

    ``history`` and ``context`` are the state after the turn; on any outcome
    other than SUCCESS they are the unchanged inputs.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    outcome: TurnOutcome
    history: ConversationHistory
    context: UserContextModel

    @property
    def succeeded(self) -> bool:
        return self.outcome is TurnOutcome.SUCCESS
