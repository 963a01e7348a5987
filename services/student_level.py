"""
services/student_level.py

Performance level (1..5) of a student, derived from recent exam percentages.

- score_to_percent(): raw score pair -> bounded ratio, or None when not computable
- performance_level_from_percent(): ratio -> level, first matching threshold wins
- normalize_performance_level(): validation of user supplied levels before they hit the DB
"""

import math
from numbers import Real
from typing import Any, List, Optional, Tuple

DEFAULT_PERFORMANCE_LEVEL = 3
MIN_PERFORMANCE_LEVEL = 1
MAX_PERFORMANCE_LEVEL = 5

STUDENT_PERFORMANCE_LEVELS = [
    {"value": 1, "label": "En difficulté", "description": "Priorité absolue, besoins immédiats."},
    {"value": 2, "label": "À surveiller", "description": "Progression fragile, accompagnement conseillé."},
    {"value": 3, "label": "À jour", "description": "Compétences conformes aux attentes."},
    {"value": 4, "label": "Très bon niveau", "description": "Autonomie solide, peut approfondir."},
    {"value": 5, "label": "Excellent", "description": "Excellences régulières, peut mentoriser."},
]

# (min_percent, level), sorted by descending threshold
PERFORMANCE_LEVEL_PERCENT_THRESHOLDS: List[Tuple[float, int]] = [
    (0.90, 5),
    (0.75, 4),
    (0.55, 3),
    (0.40, 2),
    (0.0, 1),
]


class InvalidPerformanceLevel(ValueError):
    """Raised when a level supplied by a client is not an integer in [1, 5]."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid performance level: {value!r}")


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass, never a score
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def score_to_percent(score: Optional[float], max_score: Optional[float]) -> Optional[float]:
    if not _is_finite_number(score) or not _is_finite_number(max_score):
        return None
    if max_score <= 0:
        return None
    return _clamp(score / max_score)


def performance_level_from_percent(percent: Optional[float]) -> int:
    if not _is_finite_number(percent):
        return DEFAULT_PERFORMANCE_LEVEL

    bounded = _clamp(float(percent))
    for min_percent, level in PERFORMANCE_LEVEL_PERCENT_THRESHOLDS:
        if bounded >= min_percent:
            return level
    return DEFAULT_PERFORMANCE_LEVEL


def normalize_performance_level(value: Any) -> Optional[int]:
    """
    Coerce a client supplied level.

    Returns None for null / empty input (caller keeps or applies the default),
    otherwise an int in [1, 5]. Anything else raises InvalidPerformanceLevel.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidPerformanceLevel(value)

    parsed = value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            raise InvalidPerformanceLevel(value)

    if not _is_finite_number(parsed) or int(parsed) != parsed:
        raise InvalidPerformanceLevel(value)

    level = int(parsed)
    if level < MIN_PERFORMANCE_LEVEL or level > MAX_PERFORMANCE_LEVEL:
        raise InvalidPerformanceLevel(value)
    return level


def describe_performance_level(level: Optional[int]) -> dict:
    """Band info (value/label/description/min_percent) for a level, default band when unknown."""
    thresholds = {lvl: pct for pct, lvl in PERFORMANCE_LEVEL_PERCENT_THRESHOLDS}
    for band in STUDENT_PERFORMANCE_LEVELS:
        if band["value"] == level:
            return {**band, "min_percent": thresholds[band["value"]]}
    return describe_performance_level(DEFAULT_PERFORMANCE_LEVEL)
