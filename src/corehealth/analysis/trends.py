"""Biomarker status, significance and trend classification."""

from ..health import Biomarker, format_number
from .models import BiomarkerStatus, BiomarkerTrendRecord, Significance, TrendDirection
from .reference_ranges import Band, find_reference_range, find_significance_threshold

# Relative change (percent) below which a reading counts as unchanged.
STABLE_CHANGE_PERCENT = 5.0


def assess_status(biomarker: Biomarker) -> BiomarkerStatus:
    """Classify a reading against the reference-range table.

    Biomarkers without a known reference range are reported as
    ``WITHIN_RANGE`` rather than raising.
    """
    reference = find_reference_range(biomarker.name)
    if reference is None:
        return BiomarkerStatus.WITHIN_RANGE

    value = biomarker.value
    if reference.optimal.contains(value):
        return BiomarkerStatus.OPTIMAL
    if reference.normal.contains(value):
        return BiomarkerStatus.NORMAL
    if value < reference.normal.low:
        return BiomarkerStatus.LOW
    return BiomarkerStatus.HIGH


def assess_significance(biomarker: Biomarker) -> Significance:
    """Coarse risk bucket using the looser significance thresholds."""
    threshold = find_significance_threshold(biomarker.name)
    if threshold is None:
        return Significance.NORMAL
    if threshold.normal.contains(biomarker.value):
        return Significance.NORMAL
    if threshold.concerning.contains(biomarker.value):
        return Significance.CONCERNING
    return Significance.CRITICAL


def _distance_to_band(value: float, band: Band) -> float:
    if band.contains(value):
        return 0.0
    return min(abs(value - band.low), abs(value - band.high))


class TrendAnalyzer:
    """Builds trend records by comparing a reading with the previous one.

    Hidden design decisions:
    - What counts as "improving": movement toward the optimal band
    - Noise floor below which a change is reported as stable
    """

    def __init__(self, stable_change_percent: float = STABLE_CHANGE_PERCENT):
        self._stable_change_percent = stable_change_percent

    def trend_record(
        self,
        biomarker: Biomarker,
        previous: BiomarkerTrendRecord | None = None
    ) -> BiomarkerTrendRecord:
        """Compute a fresh trend record for ``biomarker``.

        Args:
            biomarker: The new reading
            previous: Record stored for the same name on an earlier turn

        Returns:
            Record with significance, change percent and direction. Without a
            previous reading the direction is ``STABLE`` and the change is 0.
        """
        change_percent = 0.0
        trend = TrendDirection.STABLE

        if previous is not None and previous.last_value != 0:
            change_percent = (biomarker.value - previous.last_value) / abs(previous.last_value) * 100
            trend = self._direction(biomarker, previous.last_value, change_percent)

        return BiomarkerTrendRecord(
            trend=trend,
            significance=assess_significance(biomarker),
            last_value=biomarker.value,
            change_percent=round(change_percent, 2),
        )

    def _direction(
        self,
        biomarker: Biomarker,
        previous_value: float,
        change_percent: float
    ) -> TrendDirection:
        if abs(change_percent) < self._stable_change_percent:
            return TrendDirection.STABLE

        reference = find_reference_range(biomarker.name)
        if reference is None:
            return TrendDirection.STABLE

        before = _distance_to_band(previous_value, reference.optimal)
        after = _distance_to_band(biomarker.value, reference.optimal)
        if after < before:
            return TrendDirection.IMPROVING
        if after > before:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def describe(self, biomarker: Biomarker, record: BiomarkerTrendRecord | None = None) -> str:
        """Short plain-language note about a reading, used in trend analyses."""
        status = assess_status(biomarker)
        unit = f" {biomarker.unit}" if biomarker.unit else ""
        if status is BiomarkerStatus.WITHIN_RANGE:
            text = f"{biomarker.name} is {format_number(biomarker.value)}{unit}; no reference range is on file."
        else:
            text = f"{biomarker.name} is {format_number(biomarker.value)}{unit}, which is {status.value.lower()}."
        if record is not None and record.trend is not TrendDirection.STABLE:
            text += f" It is {record.trend.value} ({record.change_percent:+.1f}% since the last reading)."
        return text
