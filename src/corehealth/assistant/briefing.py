"""Context builder: the plain-text briefing injected into model prompts.

Hidden design decisions:
- Section order and headings
- Biomarker grouping by keyword
- Length bounds on the briefing
"""

from collections.abc import Iterable, Sequence

from ..analysis import ConversationStyle, assess_status
from ..analysis.matching import matches_any
from ..health import Biomarker, DailyInsight, HealthScore, HealthSnapshot, UserProfile, format_number
from ..memory import UserContextModel
from ..prompts import render_prompt

NO_HEALTH_DATA = "No current health data available."

# Checked in order; unmatched biomarkers go to OTHER_CATEGORY.
BIOMARKER_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Cardiovascular Biomarkers", (
        "cholesterol", "ldl", "hdl", "triglyceride", "apob", "lipoprotein",
        "blood pressure", "systolic", "diastolic", "heart rate",
    )),
    ("Metabolic Biomarkers", ("glucose", "hba1c", "a1c", "insulin", "homa")),
    ("Liver Function", (
        "alt", "ast", "alanine", "aspartate", "bilirubin", "albumin", "ggt",
        "alkaline phosphatase",
    )),
    ("Kidney Function", ("creatinine", "egfr", "bun", "urea", "uric acid", "cystatin")),
    ("Inflammatory Markers", ("crp", "esr", "homocysteine", "interleukin", "fibrinogen")),
)
OTHER_CATEGORY = "Other Biomarkers"

MAX_LINES_PER_CATEGORY = 12

STYLE_INSTRUCTIONS = {
    ConversationStyle.DETAILED: "Give thorough, well-structured explanations that stay actionable",
    ConversationStyle.CONCISE: "Keep responses short: two or three sentences, no preamble",
    ConversationStyle.TECHNICAL: "Use precise physiological terminology and explain mechanisms where helpful",
}


def categorize_biomarker(name: str) -> str:
    for category, keywords in BIOMARKER_CATEGORIES:
        if matches_any(name, keywords):
            return category
    return OTHER_CATEGORY


class ContextBuilder:
    """Formats health data and user context into a bounded briefing."""

    def __init__(self, max_chars: int = 4000):
        self._max_chars = max_chars

    def build_briefing(
        self,
        profile: UserProfile | None = None,
        biomarkers: Sequence[Biomarker] | None = None,
        health_score: HealthScore | None = None,
        user_context: UserContextModel | None = None,
        recent_insights: Sequence[DailyInsight] | None = None,
    ) -> str:
        """Build the deterministic, section-headed briefing.

        Returns:
            The briefing text. When no health data is supplied the health part
            is the fixed ``NO_HEALTH_DATA`` sentinel, never an empty string.
        """
        sections: list[str] = []
        if profile is not None:
            sections.append(self._profile_section(profile))
        if health_score is not None:
            sections.append(self._score_section(health_score))
        if biomarkers:
            sections.extend(self._biomarker_sections(biomarkers))
        if recent_insights:
            sections.append(self._insights_section(recent_insights))

        if not sections:
            sections.append(NO_HEALTH_DATA)

        if user_context is not None:
            context_section = self.context_section(user_context)
            if context_section:
                sections.append(context_section)

        return self._bound("\n\n".join(sections))

    def build_snapshot_briefing(
        self,
        snapshot: HealthSnapshot,
        user_context: UserContextModel | None = None,
    ) -> str:
        return self.build_briefing(
            profile=snapshot.profile,
            biomarkers=snapshot.biomarkers,
            health_score=snapshot.health_score,
            user_context=user_context,
        )

    def system_prompt(self, snapshot: HealthSnapshot, user_context: UserContextModel) -> str:
        """System message for a conversational request."""
        return render_prompt(
            "system",
            style_instruction=STYLE_INSTRUCTIONS[user_context.conversation_style],
            briefing=self.build_snapshot_briefing(snapshot, user_context),
        )

    def _profile_section(self, profile: UserProfile) -> str:
        lines = ["USER PROFILE:"]
        if profile.age is not None:
            lines.append(f"- Age: {profile.age}")
        if profile.gender:
            lines.append(f"- Gender: {profile.gender}")
        if profile.height_cm is not None:
            lines.append(f"- Height: {format_number(profile.height_cm)} cm")
        if profile.weight_kg is not None:
            lines.append(f"- Weight: {format_number(profile.weight_kg)} kg")
        if profile.bmi is not None:
            lines.append(f"- BMI: {profile.bmi:.1f}")
        if profile.activity_level:
            lines.append(f"- Activity Level: {profile.activity_level}")
        if profile.conditions:
            lines.append(f"- Medical Conditions: {', '.join(profile.conditions)}")
        if profile.medications:
            lines.append(f"- Medications: {', '.join(profile.medications)}")
        return "\n".join(lines)

    def _score_section(self, score: HealthScore) -> str:
        lines = ["HEALTH SCORES:", f"- Overall: {format_number(score.overall)}/100"]
        for name, value in score.present_sub_scores():
            lines.append(f"- {name.capitalize()}: {format_number(value)}/100")
        return "\n".join(lines)

    def _biomarker_sections(self, biomarkers: Iterable[Biomarker]) -> list[str]:
        grouped: dict[str, list[str]] = {}
        for biomarker in biomarkers:
            unit = f" {biomarker.unit}" if biomarker.unit else ""
            line = (
                f"- {biomarker.name}: {format_number(biomarker.value)}{unit} "
                f"({assess_status(biomarker).value})"
            )
            grouped.setdefault(categorize_biomarker(biomarker.name), []).append(line)

        order = [category for category, _ in BIOMARKER_CATEGORIES] + [OTHER_CATEGORY]
        sections = []
        for category in order:
            lines = grouped.get(category)
            if not lines:
                continue
            shown = lines[:MAX_LINES_PER_CATEGORY]
            if len(lines) > len(shown):
                shown.append(f"- ... and {len(lines) - len(shown)} more")
            sections.append("\n".join([f"{category.upper()}:", *shown]))
        return sections

    def _insights_section(self, insights: Sequence[DailyInsight]) -> str:
        lines = ["RECENT INSIGHTS:"]
        lines.extend(f"- {insight.title}: {insight.description}" for insight in insights)
        return "\n".join(lines)

    def context_section(self, context: UserContextModel) -> str:
        """Summary of the user context model, or "" when it holds nothing."""
        lines = []
        if context.preferred_topics:
            topics = ", ".join(t.value.replace("_", " ") for t in reversed(context.preferred_topics))
            lines.append(f"- Recent interests (newest first): {topics}")
        if context.goals_focus:
            lines.append(f"- Focus areas: {', '.join(t.value for t in context.goals_focus)}")
        if context.health_concerns:
            flagged = []
            for name in context.health_concerns:
                record = context.biomarker_trends.get(name)
                if record is None:
                    flagged.append(name)
                else:
                    flagged.append(f"{name} ({record.significance.value}, {record.trend.value})")
            lines.append(f"- Flagged biomarkers: {', '.join(flagged)}")
        if not lines:
            return ""
        return "\n".join(["CONVERSATION CONTEXT:", *lines])

    def _bound(self, text: str) -> str:
        if len(text) <= self._max_chars:
            return text
        marker = "\n[briefing truncated]"
        cut = text.rfind("\n", 0, self._max_chars - len(marker))
        if cut <= 0:
            cut = self._max_chars - len(marker)
        return text[:cut] + marker
