"""Data models for the health-record snapshot.

The health-record store owns these values; the assistant only reads them.
All models are frozen so that nothing in the engine can mutate a snapshot
handed in by the caller.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Priority(str, Enum):
    """Priority / risk level shared by insights and risk assessments."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def format_number(value: float) -> str:
    """Plain decimal rendering ("1,234,567", "5.7", "0.0012"), never scientific notation."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.6f}".rstrip("0").rstrip(".")


class UserProfile(BaseModel):
    """Demographics and medical background of the user."""

    model_config = ConfigDict(frozen=True)

    age: int | None = Field(default=None, ge=0, le=130)
    gender: str | None = None
    height_cm: float | None = Field(default=None, gt=0, description="Height in centimetres")
    weight_kg: float | None = Field(default=None, gt=0, description="Weight in kilograms")
    activity_level: str | None = None
    conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)

    @property
    def bmi(self) -> float | None:
        """Body-mass index (kg / m^2), or None unless height and weight are known."""
        if self.height_cm is None or self.weight_kg is None:
            return None
        height_m = self.height_cm / 100
        return self.weight_kg / (height_m * height_m)


class Biomarker(BaseModel):
    """A single lab reading."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name, e.g. 'Fasting Glucose'")
    value: float
    unit: str = ""


class HealthScore(BaseModel):
    """Composite health score (0-100) with optional sub-scores."""

    model_config = ConfigDict(frozen=True)

    overall: float = Field(ge=0, le=100)
    sleep: float | None = Field(default=None, ge=0, le=100)
    activity: float | None = Field(default=None, ge=0, le=100)
    stress: float | None = Field(default=None, ge=0, le=100)
    recovery: float | None = Field(default=None, ge=0, le=100)
    nutrition: float | None = Field(default=None, ge=0, le=100)

    def present_sub_scores(self) -> list[tuple[str, float]]:
        """Sub-scores that were actually supplied, in display order."""
        fields = ("sleep", "activity", "stress", "recovery", "nutrition")
        return [
            (name, getattr(self, name))
            for name in fields
            if getattr(self, name) is not None
        ]


class HealthSnapshot(BaseModel):
    """Everything the assistant may know about the user at one moment."""

    model_config = ConfigDict(frozen=True)

    profile: UserProfile | None = None
    biomarkers: list[Biomarker] = Field(default_factory=list)
    health_score: HealthScore | None = None

    def summary(self) -> str:
        """One-line summary stored in chat message metadata."""
        parts = []
        if self.profile is not None and self.profile.age is not None:
            parts.append(f"age {self.profile.age}")
        if self.health_score is not None:
            parts.append(f"score {self.health_score.overall:g}/100")
        if self.biomarkers:
            parts.append(f"{len(self.biomarkers)} biomarkers")
        return ", ".join(parts) if parts else "no health data"


class DailyInsight(BaseModel):
    """A daily, actionable recommendation card."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    category: str
    priority: Priority = Priority.MEDIUM
    actionable: bool = True
    action: str | None = None
