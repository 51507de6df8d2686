"""User context model: updater and persistence."""

from collections.abc import Iterable
from datetime import datetime

from ..analysis import (
    ConversationStyle,
    IntentTag,
    Significance,
    TopicTag,
    TrendAnalyzer,
)
from ..health import Biomarker
from ..storage import KeyValueStore
from .base import PersistedModelStore
from .models import MAX_PREFERRED_TOPICS, MemoryKeys, UserContextModel, utcnow

_default_analyzer = TrendAnalyzer()


def _push_distinct(items: list, value, limit: int) -> list:
    """Move ``value`` to the end of ``items`` and keep the last ``limit``."""
    if items and items[-1] == value:
        return items
    updated = [item for item in items if item != value]
    updated.append(value)
    return updated[-limit:]


def update_user_context(
    current: UserContextModel | None,
    intent: IntentTag,
    biomarkers: Iterable[Biomarker] | None = None,
    topics: Iterable[TopicTag] | None = None,
    style: ConversationStyle | None = None,
    analyzer: TrendAnalyzer | None = None,
    now: datetime | None = None,
) -> UserContextModel:
    """Fold one user turn into the context model.

    Pure apart from the timestamp: the caller is responsible for persisting
    the returned model.

    Args:
        current: Existing context, or None to start from defaults
        intent: Intent of the new message
        biomarkers: Biomarker readings that accompany the turn
        topics: Topics extracted from the new message
        style: Answer style explicitly requested in the message, if any
        analyzer: Trend analyzer (defaults to a shared instance)
        now: Timestamp override for tests

    Returns:
        A new UserContextModel; ``current`` is left untouched
    """
    context = current or UserContextModel()
    analyzer = analyzer or _default_analyzer

    preferred = _push_distinct(list(context.preferred_topics), intent, MAX_PREFERRED_TOPICS)

    goals = list(context.goals_focus)
    for topic in sorted(topics or (), key=lambda t: t.value):
        goals = _push_distinct(goals, topic, MAX_PREFERRED_TOPICS)

    trends = dict(context.biomarker_trends)
    concerns = list(context.health_concerns)
    for biomarker in biomarkers or ():
        record = analyzer.trend_record(biomarker, trends.get(biomarker.name))
        trends[biomarker.name] = record
        if record.significance is Significance.NORMAL:
            concerns = [name for name in concerns if name != biomarker.name]
        else:
            concerns = _push_distinct(concerns, biomarker.name, MAX_PREFERRED_TOPICS)

    return context.model_copy(update={
        "preferred_topics": preferred,
        "goals_focus": goals,
        "health_concerns": concerns,
        "biomarker_trends": trends,
        "conversation_style": style or context.conversation_style,
        "last_data_update": now or utcnow(),
    })


class UserContextStore(PersistedModelStore[UserContextModel]):
    """Persists the user context model as a whole (replace, not patch)."""

    model_type = UserContextModel

    def __init__(self, kv_store: KeyValueStore, keys: MemoryKeys):
        super().__init__(kv_store, keys.context)

    def default(self) -> UserContextModel:
        return UserContextModel()

    async def load(self) -> UserContextModel:
        """Load the persisted context; defaults if nothing usable is stored."""
        return await self._read()

    async def save(self, context: UserContextModel) -> None:
        """Replace the persisted context.

        Raises:
            PersistenceWriteError: If the backend write fails
        """
        await self._write(context)
