"""Insight engine: one-shot structured requests with deterministic fallbacks.

Model replies are free text. They are sliced line by line into typed
results; the parser is a best-effort heuristic that is total rather than
correct, and every path ends in a well-formed object.
"""

import asyncio
import logging
import re
from collections.abc import Sequence
from datetime import date as date_type

from ..analysis import BiomarkerStatus, BiomarkerTrendRecord, TrendAnalyzer, assess_status
from ..errors import ConfigurationMissingError
from ..health import Biomarker, DailyInsight, HealthScore, Priority, UserProfile, format_number
from ..llm import LLMProvider, PromptMessage
from ..prompts import render_prompt
from .briefing import ContextBuilder
from .config import AssistantConfig
from .models import (
    BiomarkerTrendAnalysis,
    BiomarkerTrendInsight,
    HealthAssistantResponse,
    RiskAssessment,
)

logger = logging.getLogger(__name__)

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]\s+|[-*•]\s+)")

DAILY_CATEGORIES = ("nutrition", "activity")
DAILY_INSIGHT_COUNT = 3
MAX_TITLE_WORDS = 6
MAX_TITLE_CHARS = 60


def reply_lines(text: str) -> list[str]:
    """Non-empty reply lines with leading "N. " numbering or bullets removed."""
    lines = []
    for raw in text.splitlines():
        line = _LIST_MARKER.sub("", raw).strip()
        if line:
            lines.append(line)
    return lines


def parse_health_response(text: str) -> HealthAssistantResponse | None:
    """Slice a reply into insights (3), recommendations (next 3), next actions (last 2).

    Returns None when the reply has no usable lines.
    """
    lines = reply_lines(text)
    if not lines:
        return None
    return HealthAssistantResponse(
        insights=lines[:3],
        recommendations=lines[3:6],
        risk_assessment=RiskAssessment(level=Priority.LOW),
        next_actions=lines[-2:],
    )


def _reading(biomarker: Biomarker) -> str:
    return f"{format_number(biomarker.value)} {biomarker.unit}".strip()


def _split_title(line: str) -> tuple[str, str]:
    head, sep, tail = line.partition(":")
    if sep and head.strip() and tail.strip() and len(head.strip()) <= MAX_TITLE_CHARS:
        return head.strip().strip("*").strip(), tail.strip()
    words = line.split()
    title = " ".join(words[:MAX_TITLE_WORDS])
    if len(words) > MAX_TITLE_WORDS:
        title += "..."
    return title, line


def parse_daily_insights(text: str, day: date_type) -> list[DailyInsight] | None:
    """Turn the first three reply lines into DailyInsight records.

    Categories alternate between nutrition and activity; the first item is
    high priority. Returns None when fewer than three lines are present.
    """
    lines = reply_lines(text)
    if len(lines) < DAILY_INSIGHT_COUNT:
        return None

    insights = []
    for index, line in enumerate(lines[:DAILY_INSIGHT_COUNT]):
        title, description = _split_title(line)
        insights.append(DailyInsight(
            id=f"ai-{day:%Y%m%d}-{index + 1}",
            title=title,
            description=description,
            category=DAILY_CATEGORIES[index % len(DAILY_CATEGORIES)],
            priority=Priority.HIGH if index == 0 else Priority.MEDIUM,
            actionable=True,
            action=description,
        ))
    return insights


def mock_health_response() -> HealthAssistantResponse:
    """Generic insights used when the provider is unavailable."""
    return HealthAssistantResponse(
        insights=[
            "Your recorded health data gives a solid baseline to build on.",
            "Consistent sleep and activity habits have the largest day-to-day impact on your scores.",
            "Regular lab checks make it easier to spot changes early.",
        ],
        recommendations=[
            "Aim for 7-9 hours of sleep with a consistent bedtime.",
            "Get at least 150 minutes of moderate activity each week.",
            "Stay hydrated and build meals around whole foods.",
        ],
        risk_assessment=RiskAssessment(level=Priority.LOW),
        next_actions=[
            "Schedule your next biomarker check in 3 months.",
            "Track your sleep and water intake for the next week.",
        ],
        follow_up_questions=[
            "Which area of your health would you like to focus on first?",
            "Would you like tips tailored to your latest lab results?",
        ],
    )


def mock_daily_recommendations() -> list[DailyInsight]:
    """Generic daily recommendations used when the provider is unavailable."""
    return [
        DailyInsight(
            id="mock-1",
            title="Optimize Morning Hydration",
            description="Your body loses water overnight. Starting your day hydrated boosts energy and focus.",
            category="nutrition",
            priority=Priority.MEDIUM,
            actionable=True,
            action="Drink a large glass of water within 30 minutes of waking up.",
        ),
        DailyInsight(
            id="mock-2",
            title="Take a Midday Walk",
            description="A short walk after lunch helps blood sugar control and afternoon energy.",
            category="activity",
            priority=Priority.HIGH,
            actionable=True,
            action="Take a 20-minute walk after lunch.",
        ),
        DailyInsight(
            id="mock-3",
            title="Stress Management Check",
            description="A few minutes of slow breathing lowers stress before the evening.",
            category="stress",
            priority=Priority.MEDIUM,
            actionable=True,
            action="Try 5 minutes of deep breathing before your evening meal.",
        ),
    ]


class InsightEngine:
    """Stateless one-shot insight generation (no conversation memory).

    Hidden design decisions:
    - Prompt templates for each insight type
    - Line-slicing of free-text replies into typed fields
    - Deterministic fallback content
    """

    def __init__(
        self,
        config: AssistantConfig,
        llm: LLMProvider | None,
        context_builder: ContextBuilder | None = None,
        analyzer: TrendAnalyzer | None = None,
    ):
        self._config = config
        self._llm = llm
        self._builder = context_builder or ContextBuilder(config.briefing_max_chars)
        self._analyzer = analyzer or TrendAnalyzer()

    @property
    def is_configured(self) -> bool:
        return self._llm is not None and self._config.has_credential

    async def _complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        if not self.is_configured:
            raise ConfigurationMissingError()
        response = await asyncio.wait_for(
            self._llm.chat_completion(
                [PromptMessage(role="user", content=prompt)],
                model=self._config.model,
                temperature=temperature,
                max_tokens=max_tokens,
            ),
            timeout=self._config.request_timeout,
        )
        return response.content

    async def generate_insights(
        self,
        profile: UserProfile | None,
        biomarkers: Sequence[Biomarker],
        health_score: HealthScore | None,
        recent_insights: Sequence[DailyInsight] | None = None,
    ) -> HealthAssistantResponse:
        """Generate structured health insights; never returns None."""
        prompt = render_prompt(
            "insights",
            briefing=self._builder.build_briefing(
                profile=profile,
                biomarkers=biomarkers,
                health_score=health_score,
                recent_insights=recent_insights,
            ),
        )
        try:
            text = await self._complete(
                prompt,
                self._config.insight_temperature,
                self._config.insight_max_tokens,
            )
        except ConfigurationMissingError as e:
            logger.warning("%s, using mock insights", e)
            return mock_health_response()
        except Exception:
            logger.exception("Health insight request failed, using mock insights")
            return mock_health_response()

        parsed = parse_health_response(text)
        if parsed is None:
            logger.warning("Health insight reply had no usable lines, using mock insights")
            return mock_health_response()
        return parsed

    async def generate_daily_recommendations(
        self,
        profile: UserProfile | None,
        biomarkers: Sequence[Biomarker],
        health_score: HealthScore | None,
        day: date_type | None = None,
    ) -> list[DailyInsight]:
        """Generate three daily recommendation cards."""
        day = day or date_type.today()

        prompt = render_prompt(
            "daily",
            date=day.strftime("%A, %B %d, %Y"),
            briefing=self._builder.build_briefing(
                profile=profile,
                biomarkers=biomarkers,
                health_score=health_score,
            ),
        )
        try:
            text = await self._complete(
                prompt,
                self._config.daily_temperature,
                self._config.daily_max_tokens,
            )
        except ConfigurationMissingError as e:
            logger.warning("%s, using mock recommendations", e)
            return mock_daily_recommendations()
        except Exception:
            logger.exception("Daily recommendation request failed, using mock recommendations")
            return mock_daily_recommendations()

        parsed = parse_daily_insights(text, day)
        if parsed is None:
            logger.warning("Daily recommendation reply too short, using mock recommendations")
            return mock_daily_recommendations()
        return parsed

    async def analyze_biomarker_trends(
        self,
        biomarkers: Sequence[Biomarker],
        previous: dict[str, BiomarkerTrendRecord] | None = None,
    ) -> BiomarkerTrendAnalysis:
        """Summarize biomarker results.

        Per-biomarker trends are always computed locally; the model only
        contributes the summary and recommendations.

        Args:
            biomarkers: Current readings
            previous: Stored trend records keyed by biomarker name
        """
        previous = previous or {}
        trends = []
        for biomarker in biomarkers:
            record = self._analyzer.trend_record(biomarker, previous.get(biomarker.name))
            trends.append(BiomarkerTrendInsight(
                biomarker=biomarker.name,
                status=assess_status(biomarker),
                trend=record.trend,
                insight=self._analyzer.describe(biomarker, record),
            ))

        fallback = self._local_trend_analysis(biomarkers, trends)
        if not biomarkers:
            return fallback

        listing = "\n".join(
            f"- {t.biomarker}: {_reading(b)} ({t.status.value}, {t.trend.value})"
            for b, t in zip(biomarkers, trends)
        )
        try:
            text = await self._complete(
                render_prompt("trends", biomarkers=listing),
                self._config.insight_temperature,
                self._config.daily_max_tokens,
            )
        except ConfigurationMissingError:
            return fallback
        except Exception:
            logger.exception("Biomarker trend request failed, using local analysis")
            return fallback

        lines = reply_lines(text)
        if not lines:
            return fallback
        return BiomarkerTrendAnalysis(
            summary=lines[0],
            trends=trends,
            recommendations=lines[1:4] or fallback.recommendations,
        )

    def _local_trend_analysis(
        self,
        biomarkers: Sequence[Biomarker],
        trends: list[BiomarkerTrendInsight],
    ) -> BiomarkerTrendAnalysis:
        if not biomarkers:
            return BiomarkerTrendAnalysis(
                summary="No biomarker results are available yet.",
                recommendations=["Upload your latest lab results to get a personalised analysis."],
            )

        out_of_range = [t.biomarker for t in trends if t.status in (BiomarkerStatus.LOW, BiomarkerStatus.HIGH)]
        in_range = len(trends) - len(out_of_range)
        summary = f"{in_range} of {len(trends)} biomarkers are within their reference ranges."
        if out_of_range:
            summary += f" {', '.join(out_of_range)} need attention."

        recommendations = [
            f"Discuss your {name} result with your healthcare provider."
            for name in out_of_range[:3]
        ]
        if not recommendations:
            recommendations = ["Keep up your current routine and recheck your labs in 3 months."]
        return BiomarkerTrendAnalysis(summary=summary, trends=trends, recommendations=recommendations)
