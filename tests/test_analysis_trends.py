"""Tests for the daily trend series and whole-range mood indices."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from moodscope.analysis.models import DateRange
from moodscope.analysis.trends import (
    analyze_trends,
    build_time_points,
    category_ratios,
    dominant_emotion,
    generate_insights,
    overall_trend,
    weekly_comparison,
)
from moodscope.models import EmotionDetection

UTC = timezone.utc


def _d(emotion: str, intensity: float) -> EmotionDetection:
    return EmotionDetection(emotion=emotion, intensity=intensity)


def _span(days: int) -> DateRange:
    start = datetime(2025, 6, 1, tzinfo=UTC)
    return DateRange(start, start + timedelta(days=days - 1, hours=23))


def _daily(make_record, intensities: list[float], emotion: str = "Joy") -> list:
    """One record per day from 2025-06-01, 12:00 UTC."""
    start = datetime(2025, 6, 1, 12, tzinfo=UTC)
    return [
        make_record(start + timedelta(days=n), (emotion, value))
        for n, value in enumerate(intensities)
    ]


# ---------------------------------------------------------------------------
# Per-day helpers
# ---------------------------------------------------------------------------


class TestDominantEmotion:
    def test_by_cumulative_intensity_not_count(self) -> None:
        detections = [_d("Anxiety", 20), _d("Anxiety", 20), _d("Joy", 90)]
        assert dominant_emotion(detections) == "Joy"

    def test_cumulative_beats_single_peak(self) -> None:
        detections = [_d("Anxiety", 50), _d("Anxiety", 50), _d("Joy", 90)]
        assert dominant_emotion(detections) == "Anxiety"

    def test_tie_goes_to_first_seen(self) -> None:
        assert dominant_emotion([_d("Hope", 50), _d("Joy", 50)]) == "Hope"

    def test_empty_is_neutral(self) -> None:
        assert dominant_emotion([]) == "neutral"


class TestCategoryRatios:
    def test_intensity_weighted(self) -> None:
        active, passive = category_ratios([_d("Joy", 60), _d("Anxiety", 20), _d("Neutral", 20)])
        assert active == pytest.approx(0.6)
        assert passive == pytest.approx(0.2)

    def test_no_detections(self) -> None:
        assert category_ratios([]) == (0.0, 0.0)

    def test_zero_intensity(self) -> None:
        assert category_ratios([_d("Joy", 0)]) == (0.0, 0.0)


# ---------------------------------------------------------------------------
# build_time_points
# ---------------------------------------------------------------------------


class TestBuildTimePoints:
    def test_one_point_per_day_including_empty(self, make_record) -> None:
        records = [
            make_record("2025-06-01T09:00:00Z", ("Joy", 80), summary="Morning run"),
            make_record("2025-06-01T20:00:00Z", ("Anxiety", 40), summary="  "),
            make_record("2025-06-03T10:00:00Z", ("Anxiety", 60)),
        ]
        points = build_time_points(records, _span(3))

        assert [p.date for p in points] == ["2025-06-01", "2025-06-02", "2025-06-03"]
        first, empty, third = points
        assert first.record_count == 2
        assert len(first.emotions) == 2
        assert first.dominant_emotion == "Joy"
        assert first.average_intensity == pytest.approx(0.6)
        assert first.summaries == ("Morning run",)
        assert empty.record_count == 0
        assert empty.emotions == ()
        assert empty.average_intensity == 0.0
        assert third.passive_ratio == pytest.approx(1.0)

    def test_no_records_gives_no_points(self) -> None:
        assert build_time_points([], _span(5)) == []

    def test_days_follow_timezone(self, make_record) -> None:
        from zoneinfo import ZoneInfo

        records = [make_record("2025-06-01T23:30:00Z", ("Joy", 50))]
        span = DateRange(datetime(2025, 6, 1, tzinfo=UTC), datetime(2025, 6, 2, 23, tzinfo=UTC))
        points = build_time_points(records, span, ZoneInfo("Asia/Shanghai"))
        by_date = {p.date: p.record_count for p in points}
        assert by_date["2025-06-02"] == 1
        assert by_date.get("2025-06-01", 0) == 0


# ---------------------------------------------------------------------------
# Whole-range indices
# ---------------------------------------------------------------------------


class TestOverallTrend:
    def test_improving(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [30, 30, 30, 50, 70, 70, 70]), _span(7))
        assert overall_trend(points) == "improving"

    def test_declining(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [80, 80, 60, 50, 40, 40]), _span(6))
        assert overall_trend(points) == "declining"

    def test_small_change_is_stable(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [50, 52, 51, 53, 52, 52]), _span(6))
        assert overall_trend(points) == "stable"

    def test_threshold_is_configurable(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [50, 50, 54, 54]), _span(4))
        assert overall_trend(points, threshold=0.1) == "stable"
        assert overall_trend(points, threshold=0.05) == "improving"

    def test_single_day_is_stable(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [50]), _span(1))
        assert overall_trend(points) == "stable"

    def test_empty_days_count_as_zero(self, make_record) -> None:
        # one reading on day 1 of 9, then nothing: last third averages 0
        records = [make_record(datetime(2025, 6, 1, 12, tzinfo=UTC), ("Joy", 40))]
        assert overall_trend(build_time_points(records, _span(9))) == "declining"


class TestWeeklyComparison:
    def test_zero_below_fourteen_days(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [50] * 13), _span(13))
        assert weekly_comparison(points) == 0.0

    def test_last_week_minus_previous(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [40] * 7 + [60] * 7), _span(14))
        assert weekly_comparison(points) == pytest.approx(0.2)

    def test_only_previous_fourteen_days_count(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [90] * 3 + [50] * 7 + [30] * 7), _span(17))
        assert weekly_comparison(points) == pytest.approx(-0.2)


class TestAnalyzeTrends:
    def test_indices_in_unit_interval(self, make_record) -> None:
        records = _daily(make_record, [10, 95, 5, 99, 40, 1, 100, 60])
        records += _daily(make_record, [90, 3, 70], emotion="Anxiety")
        trend = analyze_trends(records, _span(8))
        assert 0.0 <= trend.mood_stability <= 1.0
        assert 0.0 <= trend.positivity_ratio <= 1.0

    def test_stable_constant_mood(self, make_record) -> None:
        trend = analyze_trends(_daily(make_record, [60] * 5), _span(5))
        assert trend.mood_stability == pytest.approx(1.0)
        assert trend.positivity_ratio == pytest.approx(1.0)
        assert trend.overall_trend == "stable"

    def test_empty(self) -> None:
        trend = analyze_trends([], _span(30))
        assert trend.time_points == ()
        assert trend.mood_stability == 0.0
        assert trend.positivity_ratio == 0.0
        assert trend.weekly_comparison == 0.0
        assert trend.insights == ()

    def test_low_stability_raises_insight(self, make_record) -> None:
        trend = analyze_trends(_daily(make_record, [5, 100, 5, 100, 5, 100]), _span(6))
        assert trend.mood_stability < 0.5
        messages = [i.message for i in trend.insights]
        assert any("swings" in m for m in messages)


class TestGenerateInsights:
    def test_no_data_no_insights(self) -> None:
        assert generate_insights("declining", 0.1, 0.1, -0.5, has_data=False) == []

    def test_declining_has_suggestions(self) -> None:
        insights = generate_insights("declining", 0.9, 0.5, 0.0, has_data=True)
        assert len(insights) == 1
        assert insights[0].kind == "negative"
        assert insights[0].severity == "medium"
        assert insights[0].suggestions

    def test_quiet_when_nothing_crosses_thresholds(self) -> None:
        assert generate_insights("stable", 0.9, 0.5, 0.0, has_data=True) == []

    def test_positive_notes(self) -> None:
        kinds = [i.kind for i in generate_insights("improving", 0.9, 0.9, 0.0, has_data=True)]
        assert kinds == ["positive", "positive"]


class TestEmptyDaysInIndices:
    """Days without records still count towards the whole-range indices."""

    def test_single_active_day_in_a_month(self, make_record) -> None:
        records = [make_record(datetime(2025, 6, 15, 12, tzinfo=UTC), ("Joy", 80))]
        trend = analyze_trends(records, _span(30))

        assert len(trend.time_points) == 30
        assert trend.positivity_ratio == pytest.approx(1 / 30)
        # intensities: one 0.8 among 29 zeros
        expected_variance = 0.8**2 / 30 - (0.8 / 30) ** 2
        assert trend.mood_stability == pytest.approx(1 - expected_variance / 0.25)
        messages = [i.message for i in trend.insights]
        assert "Active emotions dominate most of your days" not in messages
        assert "Active emotions make up a small share of your days" in messages

    def test_empty_recent_week_lowers_weekly_comparison(self, make_record) -> None:
        points = build_time_points(_daily(make_record, [60] * 10), _span(14))
        # last 7 days: 3 at 0.6 and 4 empty; previous 7 days: all 0.6
        assert weekly_comparison(points) == pytest.approx(0.6 * 3 / 7 - 0.6)
