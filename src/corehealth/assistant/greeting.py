"""Deterministic opening message for a new conversation."""

from collections.abc import Sequence

from ..analysis import BiomarkerStatus, assess_status
from ..health import Biomarker, HealthScore, UserProfile

GOOD_SCORE = 80
FAIR_SCORE = 60


def flagged_biomarkers(biomarkers: Sequence[Biomarker]) -> list[str]:
    """Names of biomarkers reading low or high against their reference range."""
    return [b.name for b in biomarkers if assess_status(b) in (BiomarkerStatus.LOW, BiomarkerStatus.HIGH)]


def personalized_greeting(
    profile: UserProfile | None,
    biomarkers: Sequence[Biomarker] = (),
    health_score: HealthScore | None = None,
) -> str:
    """Build the greeting shown before the user's first message.

    No provider call is made, so the greeting is available even when the
    assistant is not configured.
    """
    lines = ["Hello! I'm your CoreHealth assistant."]

    if health_score is not None:
        score = health_score.overall
        if score >= GOOD_SCORE:
            lines.append(f"Your health score of {score:g} looks great. Let's keep it that way.")
        elif score >= FAIR_SCORE:
            lines.append(f"Your health score is {score:g}. There is room to improve, and I can help.")
        else:
            lines.append(f"Your health score is {score:g}. Let's work on it together, one step at a time.")

    flagged = flagged_biomarkers(biomarkers)
    if flagged:
        lines.append(f"I noticed {', '.join(flagged[:3])} outside the typical range in your latest results.")
    elif biomarkers:
        lines.append(f"I've reviewed your {len(biomarkers)} latest biomarker results.")

    if profile is not None and profile.conditions:
        lines.append("I'll keep your medical history in mind when making suggestions.")

    lines.append("Ask me anything about your health or your lab results.")
    return " ".join(lines)
