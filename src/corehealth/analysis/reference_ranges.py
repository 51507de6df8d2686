"""Static reference ranges for common biomarkers.

Two tables live here:

* ``REFERENCE_RANGES`` - optimal and normal bands used for the status label
  shown to the user.
* ``SIGNIFICANCE_THRESHOLDS`` - deliberately looser bands used only for the
  significance bucket kept in the user context.

Both are ordered: lookups return the first entry whose key occurs in the
biomarker name, so more specific keys ("ldl", "hdl") precede generic ones
("cholesterol").
"""

from typing import NamedTuple

from .matching import matches_keyword


class Band(NamedTuple):
    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


class ReferenceRange(NamedTuple):
    optimal: Band
    normal: Band


class SignificanceThreshold(NamedTuple):
    normal: Band      # inside: significance "normal"
    concerning: Band  # inside (but outside normal): "concerning"; outside: "critical"


REFERENCE_RANGES: tuple[tuple[str, ReferenceRange], ...] = (
    ("ldl", ReferenceRange(Band(0, 70), Band(0, 100))),
    ("hdl", ReferenceRange(Band(60, 100), Band(40, 150))),
    ("triglyceride", ReferenceRange(Band(0, 100), Band(0, 150))),
    ("cholesterol", ReferenceRange(Band(0, 180), Band(0, 200))),
    ("hba1c", ReferenceRange(Band(4.0, 5.4), Band(4.0, 5.6))),
    ("a1c", ReferenceRange(Band(4.0, 5.4), Band(4.0, 5.6))),
    ("glucose", ReferenceRange(Band(70, 85), Band(70, 99))),
    ("insulin", ReferenceRange(Band(2, 6), Band(2, 20))),
    ("creatinine", ReferenceRange(Band(0.7, 1.0), Band(0.6, 1.2))),
    ("egfr", ReferenceRange(Band(90, 150), Band(60, 150))),
    ("bun", ReferenceRange(Band(7, 18), Band(7, 20))),
    ("urea", ReferenceRange(Band(7, 18), Band(7, 20))),
    ("alanine aminotransferase", ReferenceRange(Band(7, 25), Band(7, 56))),
    ("alt", ReferenceRange(Band(7, 25), Band(7, 56))),
    ("aspartate aminotransferase", ReferenceRange(Band(10, 25), Band(10, 40))),
    ("ast", ReferenceRange(Band(10, 25), Band(10, 40))),
    ("crp", ReferenceRange(Band(0, 1), Band(0, 3))),
    ("vitamin d", ReferenceRange(Band(40, 60), Band(30, 100))),
    ("tsh", ReferenceRange(Band(1.0, 2.5), Band(0.4, 4.0))),
    ("ferritin", ReferenceRange(Band(50, 150), Band(20, 300))),
    ("systolic", ReferenceRange(Band(90, 120), Band(90, 130))),
    ("diastolic", ReferenceRange(Band(60, 80), Band(60, 85))),
    ("heart rate", ReferenceRange(Band(50, 70), Band(60, 100))),
)

SIGNIFICANCE_THRESHOLDS: tuple[tuple[str, SignificanceThreshold], ...] = (
    ("ldl", SignificanceThreshold(Band(0, 160), Band(0, 190))),
    ("hdl", SignificanceThreshold(Band(35, 1000), Band(25, 1000))),
    ("triglyceride", SignificanceThreshold(Band(0, 200), Band(0, 500))),
    ("cholesterol", SignificanceThreshold(Band(0, 240), Band(0, 300))),
    ("hba1c", SignificanceThreshold(Band(0, 6.4), Band(0, 9.0))),
    ("a1c", SignificanceThreshold(Band(0, 6.4), Band(0, 9.0))),
    ("glucose", SignificanceThreshold(Band(60, 125), Band(45, 250))),
    ("creatinine", SignificanceThreshold(Band(0.4, 1.5), Band(0.3, 3.0))),
    ("egfr", SignificanceThreshold(Band(60, 1000), Band(30, 1000))),
    ("alanine aminotransferase", SignificanceThreshold(Band(0, 80), Band(0, 200))),
    ("alt", SignificanceThreshold(Band(0, 80), Band(0, 200))),
    ("aspartate aminotransferase", SignificanceThreshold(Band(0, 80), Band(0, 200))),
    ("ast", SignificanceThreshold(Band(0, 80), Band(0, 200))),
    ("crp", SignificanceThreshold(Band(0, 5), Band(0, 10))),
    ("vitamin d", SignificanceThreshold(Band(20, 150), Band(12, 200))),
    ("tsh", SignificanceThreshold(Band(0.3, 5.0), Band(0.1, 10.0))),
    ("systolic", SignificanceThreshold(Band(85, 140), Band(70, 180))),
    ("diastolic", SignificanceThreshold(Band(55, 90), Band(40, 120))),
    ("heart rate", SignificanceThreshold(Band(45, 110), Band(35, 130))),
)


def find_reference_range(name: str) -> ReferenceRange | None:
    """Return the first reference range whose key occurs in ``name``."""
    for key, reference in REFERENCE_RANGES:
        if matches_keyword(name, key):
            return reference
    return None


def find_significance_threshold(name: str) -> SignificanceThreshold | None:
    for key, threshold in SIGNIFICANCE_THRESHOLDS:
        if matches_keyword(name, key):
            return threshold
    return None
