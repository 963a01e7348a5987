import math

import pytest

from services.student_level import (
    DEFAULT_PERFORMANCE_LEVEL, InvalidPerformanceLevel, describe_performance_level,
    normalize_performance_level, performance_level_from_percent, score_to_percent,
)


class TestScoreToPercent:
    @pytest.mark.parametrize("score", [0, 5, 20, -3, 100])
    @pytest.mark.parametrize("max_score", [0, -1, -20])
    def test_non_positive_max_is_not_computable(self, score, max_score):
        assert score_to_percent(score, max_score) is None

    @pytest.mark.parametrize("score, max_score", [
        (None, 20), (10, None), (None, None),
        (math.nan, 20), (10, math.inf), (math.inf, 20),
        (True, 20), (10, True), ("10", 20), (10**400, 20), (10, 10**400),
    ])
    def test_unusable_inputs(self, score, max_score):
        assert score_to_percent(score, max_score) is None

    def test_ratio(self):
        assert score_to_percent(16, 20) == pytest.approx(0.8)
        assert score_to_percent(18.5, 20) == pytest.approx(0.925)

    def test_result_is_clamped(self):
        assert score_to_percent(25, 20) == 1.0
        assert score_to_percent(-4, 20) == 0.0


class TestPerformanceLevelFromPercent:
    @pytest.mark.parametrize("percent, level", [
        (0.0, 1), (0.39, 1), (0.40, 2), (0.54, 2), (0.55, 3),
        (0.74, 3), (0.75, 4), (0.89, 4), (0.90, 5), (1.0, 5),
    ])
    def test_bands(self, percent, level):
        assert performance_level_from_percent(percent) == level

    def test_monotone_over_thresholds(self):
        levels = [performance_level_from_percent(p) for p in (0, 0.4, 0.55, 0.75, 0.9)]
        assert levels == sorted(levels)
        assert set(levels) <= {1, 2, 3, 4, 5}

    @pytest.mark.parametrize("percent", [None, math.nan, math.inf, "0.9", True, 10**400])
    def test_unusable_input_gives_default(self, percent):
        assert performance_level_from_percent(percent) == DEFAULT_PERFORMANCE_LEVEL == 3

    def test_out_of_range_is_clamped(self):
        assert performance_level_from_percent(1.7) == 5
        assert performance_level_from_percent(-0.2) == 1


class TestNormalizePerformanceLevel:
    @pytest.mark.parametrize("value", [None, ""])
    def test_absent(self, value):
        assert normalize_performance_level(value) is None

    @pytest.mark.parametrize("value, expected", [(1, 1), (5, 5), ("3", 3), (" 4 ", 4), (3.0, 3), ("2.0", 2)])
    def test_accepted(self, value, expected):
        assert normalize_performance_level(value) == expected

    @pytest.mark.parametrize("value", [0, 6, -1, 3.5, "abc", "3.5", True, False, math.nan, [3], 10**400, "1e400"])
    def test_rejected(self, value):
        with pytest.raises(InvalidPerformanceLevel):
            normalize_performance_level(value)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_performance_level(9)


def test_describe_performance_level():
    band = describe_performance_level(4)
    assert band["label"] == "Très bon niveau"
    assert band["min_percent"] == 0.75
    assert describe_performance_level(42)["value"] == DEFAULT_PERFORMANCE_LEVEL
