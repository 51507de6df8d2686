"""Unit tests for the analysis module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from corehealth.analysis import (
    BiomarkerStatus,
    BiomarkerTrendRecord,
    ConversationStyle,
    IntentTag,
    Significance,
    TopicTag,
    TrendAnalyzer,
    TrendDirection,
    assess_significance,
    assess_status,
    classify_intent,
    extract_topics,
    find_reference_range,
    infer_conversation_style,
)
from corehealth.analysis.matching import matches_keyword
from corehealth.health import Biomarker


def glucose(value: float) -> Biomarker:
    return Biomarker(name="Fasting Glucose", value=value, unit="mg/dL")


class TestKeywordMatching:
    """Tests for the shared keyword matcher."""

    def test_substring_match_is_case_insensitive(self):
        assert matches_keyword("My LDL Cholesterol is high", "cholesterol")

    def test_short_keywords_need_whole_token(self):
        """Acronyms must not match inside ordinary words."""
        assert not matches_keyword("How is my health?", "alt")
        assert not matches_keyword("Fasting Glucose", "ast")
        assert matches_keyword("ALT (liver enzyme)", "alt")

    def test_short_keywords_match_plurals(self):
        assert matches_keyword("Are my LDLs too high?", "ldl")
        assert matches_keyword("ALTs", "alt")
        assert not matches_keyword("ALTitude training", "alt")


class TestBiomarkerStatus:
    """Tests for reference-range status classification."""

    @pytest.mark.parametrize("value,expected", [
        (95, BiomarkerStatus.NORMAL),
        (75, BiomarkerStatus.OPTIMAL),
        (40, BiomarkerStatus.LOW),
        (200, BiomarkerStatus.HIGH),
    ])
    def test_glucose_status(self, value, expected):
        assert assess_status(glucose(value)) is expected

    def test_plural_acronym_name_finds_range(self):
        marker = Biomarker(name="ALTs", value=120, unit="U/L")
        assert assess_status(marker) is BiomarkerStatus.HIGH

    def test_unknown_biomarker_is_within_range(self):
        """Names without a reference range never raise."""
        marker = Biomarker(name="Vitamin B12", value=450, unit="pg/mL")
        assert assess_status(marker) is BiomarkerStatus.WITHIN_RANGE

    def test_specific_keys_win_over_generic_ones(self):
        ldl = find_reference_range("LDL Cholesterol")
        total = find_reference_range("Total Cholesterol")
        assert ldl is not None and total is not None
        assert ldl.normal.high == 100
        assert total.normal.high == 200

    @given(st.floats(min_value=0, max_value=1000, allow_nan=False))
    def test_status_is_always_a_known_label(self, value: float):
        assert assess_status(glucose(value)) in set(BiomarkerStatus)


class TestSignificance:
    """Tests for the coarse significance buckets."""

    @pytest.mark.parametrize("value,expected", [
        (95, Significance.NORMAL),
        (130, Significance.CONCERNING),
        (300, Significance.CRITICAL),
    ])
    def test_glucose_significance(self, value, expected):
        assert assess_significance(glucose(value)) is expected

    def test_unknown_biomarker_is_normal(self):
        assert assess_significance(Biomarker(name="Mystery", value=1)) is Significance.NORMAL


class TestTrendAnalyzer:
    """Tests for trend records."""

    def test_first_reading_is_stable(self):
        record = TrendAnalyzer().trend_record(glucose(95))
        assert record.trend is TrendDirection.STABLE
        assert record.change_percent == 0
        assert record.last_value == 95

    def test_moving_toward_optimal_is_improving(self):
        previous = BiomarkerTrendRecord(last_value=120)
        record = TrendAnalyzer().trend_record(glucose(95), previous)
        assert record.trend is TrendDirection.IMPROVING
        assert record.change_percent == pytest.approx(-20.83, abs=0.01)

    def test_moving_away_from_optimal_is_declining(self):
        previous = BiomarkerTrendRecord(last_value=90)
        record = TrendAnalyzer().trend_record(glucose(110), previous)
        assert record.trend is TrendDirection.DECLINING

    def test_small_change_is_stable(self):
        previous = BiomarkerTrendRecord(last_value=96)
        record = TrendAnalyzer().trend_record(glucose(95), previous)
        assert record.trend is TrendDirection.STABLE

    def test_unknown_biomarker_is_stable(self):
        previous = BiomarkerTrendRecord(last_value=100)
        record = TrendAnalyzer().trend_record(Biomarker(name="Mystery", value=200), previous)
        assert record.trend is TrendDirection.STABLE
        assert record.change_percent == 100

    def test_describe_mentions_status(self):
        text = TrendAnalyzer().describe(glucose(200))
        assert "Fasting Glucose" in text
        assert "high" in text


class TestIntentClassifier:
    """Tests for intent classification."""

    def test_first_matching_category_wins(self):
        assert classify_intent("I have trouble with sleep and stress") is IntentTag.SLEEP_OPTIMIZATION

    @pytest.mark.parametrize("text,expected", [
        ("What do my cholesterol results mean?", IntentTag.BIOMARKER_ANALYSIS),
        ("What should I eat for breakfast?", IntentTag.NUTRITION_GUIDANCE),
        ("Suggest a workout plan", IntentTag.FITNESS_GUIDANCE),
        ("I feel anxious all the time", IntentTag.STRESS_MANAGEMENT),
        ("Should I take magnesium?", IntentTag.SUPPLEMENT_GUIDANCE),
        ("I have a headache and fever", IntentTag.SYMPTOM_DISCUSSION),
        ("Are my LDLs too high?", IntentTag.BIOMARKER_ANALYSIS),
        ("Hello there", IntentTag.GENERAL_HEALTH),
    ])
    def test_classify_intent(self, text, expected):
        assert classify_intent(text) is expected

    @given(st.text())
    def test_exactly_one_intent_for_any_text(self, text: str):
        intent = classify_intent(text)
        assert intent in set(IntentTag)
        assert classify_intent(text) is intent


class TestTopicExtraction:
    """Tests for topic extraction."""

    def test_multiple_topics(self):
        topics = extract_topics("My blood sugar and cholesterol are worrying me")
        assert topics == {TopicTag.METABOLIC, TopicTag.CARDIOVASCULAR}

    def test_no_topics(self):
        assert extract_topics("How is my health today?") == set()

    @given(st.text(alphabet="0123456789 .,!?"))
    def test_topic_free_text_has_no_topics(self, text: str):
        assert extract_topics(text) == set()


class TestConversationStyle:
    """Tests for answer-style cues."""

    def test_concise_cue(self):
        assert infer_conversation_style("Briefly, what is HbA1c?") is ConversationStyle.CONCISE

    def test_technical_cue(self):
        assert infer_conversation_style("Explain the mechanism of insulin resistance") is ConversationStyle.TECHNICAL

    def test_no_cue_keeps_style(self):
        assert infer_conversation_style("What is HbA1c?") is None
