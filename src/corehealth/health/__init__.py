"""Read-only health-domain snapshot types consumed by the assistant."""

from .models import (
    Biomarker,
    DailyInsight,
    HealthScore,
    HealthSnapshot,
    Priority,
    UserProfile,
    format_number,
)

__all__ = [
    "Biomarker",
    "DailyInsight",
    "HealthScore",
    "HealthSnapshot",
    "Priority",
    "UserProfile",
    "format_number",
]
