"""Deterministic health analysis: reference ranges, trends and intent.

Nothing in this package performs I/O; every function is pure so that the
conversation engine can call it freely on each turn.
"""

from .classifier import classify_intent, extract_topics, infer_conversation_style
from .models import (
    BiomarkerStatus,
    BiomarkerTrendRecord,
    ConversationStyle,
    IntentTag,
    Significance,
    TopicTag,
    TrendDirection,
)
from .reference_ranges import REFERENCE_RANGES, ReferenceRange, find_reference_range
from .trends import TrendAnalyzer, assess_significance, assess_status

__all__ = [
    "REFERENCE_RANGES",
    "BiomarkerStatus",
    "BiomarkerTrendRecord",
    "ConversationStyle",
    "IntentTag",
    "ReferenceRange",
    "Significance",
    "TopicTag",
    "TrendAnalyzer",
    "TrendDirection",
    "assess_significance",
    "assess_status",
    "classify_intent",
    "extract_topics",
    "find_reference_range",
    "infer_conversation_style",
]
