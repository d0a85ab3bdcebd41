"""Daily time series and whole-range mood indices.

Records are bucketed by calendar day in the configured zone.  Every day of
the range gets a point, empty days included.  The whole-range indices read
every point, so an empty day counts as zero intensity and zero active share.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import timezone, tzinfo

from moodscope.analysis.dates import iter_day_keys
from moodscope.analysis.metrics import mean, normalize_intensity, relative_change, stability_index
from moodscope.analysis.models import (
    DateRange,
    EmotionInsight,
    EmotionTimePoint,
    EmotionTrend,
)
from moodscope.emotions import EmotionCategory, emotion_category
from moodscope.models import EmotionDetection, EmotionRecord
from moodscope.utils.timestamps import day_key

DEFAULT_TREND_THRESHOLD = 0.1
WEEK_DAYS = 7

LOW_STABILITY = 0.5
LOW_POSITIVITY = 0.3
HIGH_POSITIVITY = 0.7
WEEKLY_DROP = -0.1


def dominant_emotion(detections: Sequence[EmotionDetection]) -> str:
    """Emotion with the highest cumulative intensity; ties go to the first seen.

    Returns ``"neutral"`` when there are no detections.
    """
    totals: dict[str, float] = {}
    for d in detections:
        totals[d.emotion] = totals.get(d.emotion, 0.0) + normalize_intensity(d.intensity)
    best, best_total = "neutral", -1.0
    for emotion, total in totals.items():
        if total > best_total:
            best, best_total = emotion, total
    return best


def average_intensity(detections: Sequence[EmotionDetection]) -> float:
    return mean([normalize_intensity(d.intensity) for d in detections])


def category_ratios(detections: Sequence[EmotionDetection]) -> tuple[float, float]:
    """Share of the day's summed intensity carried by active and passive emotions.

    The remainder belongs to neutral or unknown emotions.
    """
    total = active = passive = 0.0
    for d in detections:
        value = normalize_intensity(d.intensity)
        total += value
        category = emotion_category(d.emotion)
        if category is EmotionCategory.ACTIVE:
            active += value
        elif category is EmotionCategory.PASSIVE:
            passive += value
    if total == 0:
        return 0.0, 0.0
    return active / total, passive / total


def build_time_points(
    records: Iterable[EmotionRecord],
    date_range: DateRange,
    tz: tzinfo = timezone.utc,
) -> list[EmotionTimePoint]:
    """One point per calendar day of *date_range*, oldest first.

    Returns an empty list when there are no records at all.
    """
    by_day: dict[str, list[EmotionRecord]] = {}
    for record in records:
        by_day.setdefault(day_key(record.timestamp, tz), []).append(record)
    if not by_day:
        return []

    points: list[EmotionTimePoint] = []
    for key in iter_day_keys(date_range, tz):
        day_records = by_day.get(key, [])
        detections = tuple(d for r in day_records for d in r.detected_emotions)
        active, passive = category_ratios(detections)
        points.append(
            EmotionTimePoint(
                date=key,
                emotions=detections,
                dominant_emotion=dominant_emotion(detections),
                average_intensity=average_intensity(detections),
                active_ratio=active,
                passive_ratio=passive,
                record_count=len(day_records),
                summaries=tuple(
                    r.summary.strip() for r in day_records if r.summary and r.summary.strip()
                ),
            )
        )
    return points


def overall_trend(
    points: Sequence[EmotionTimePoint],
    threshold: float = DEFAULT_TREND_THRESHOLD,
) -> str:
    """Compare the last third of days against the first third."""
    if len(points) < 2:
        return "stable"
    third = max(1, len(points) // 3)
    before = mean([p.average_intensity for p in points[:third]])
    after = mean([p.average_intensity for p in points[-third:]])
    change = relative_change(before, after)
    if change >= threshold:
        return "improving"
    if change <= -threshold:
        return "declining"
    return "stable"


def mood_stability(points: Sequence[EmotionTimePoint]) -> float:
    return stability_index([p.average_intensity for p in points])


def positivity_ratio(points: Sequence[EmotionTimePoint]) -> float:
    return mean([p.active_ratio for p in points])


def weekly_comparison(points: Sequence[EmotionTimePoint]) -> float:
    """Mean intensity of the last 7 days minus that of the 7 days before.

    Zero when the series covers fewer than 14 days.
    """
    if len(points) < 2 * WEEK_DAYS:
        return 0.0
    recent = points[-WEEK_DAYS:]
    previous = points[-2 * WEEK_DAYS:-WEEK_DAYS]
    return mean([p.average_intensity for p in recent]) - mean(
        [p.average_intensity for p in previous]
    )


def generate_insights(
    trend: str,
    stability: float,
    positivity: float,
    weekly: float,
    has_data: bool,
) -> list[EmotionInsight]:
    """Threshold notes on the whole-range indices, in a fixed order."""
    if not has_data:
        return []
    insights: list[EmotionInsight] = []
    if trend == "declining":
        insights.append(
            EmotionInsight(
                kind="negative",
                message="Overall mood intensity has been declining recently",
                severity="medium",
                suggestions=("Adjust your routine", "Spend time outdoors", "Talk with friends"),
            )
        )
    elif trend == "improving":
        insights.append(
            EmotionInsight(
                kind="positive",
                message="Overall mood intensity has been improving",
                severity="low",
            )
        )
    if stability < LOW_STABILITY:
        insights.append(
            EmotionInsight(
                kind="neutral",
                message="Mood swings noticeably from day to day",
                severity="low",
                suggestions=("Try a short meditation practice", "Keep a regular sleep schedule"),
            )
        )
    if positivity < LOW_POSITIVITY:
        insights.append(
            EmotionInsight(
                kind="negative",
                message="Active emotions make up a small share of your days",
                severity="medium",
                suggestions=("Plan one small activity you enjoy each day",),
            )
        )
    elif positivity > HIGH_POSITIVITY:
        insights.append(
            EmotionInsight(
                kind="positive",
                message="Active emotions dominate most of your days",
                severity="low",
            )
        )
    if weekly <= WEEKLY_DROP:
        insights.append(
            EmotionInsight(
                kind="negative",
                message="This week was noticeably less intense than the week before",
                severity="low",
            )
        )
    return insights


def analyze_trends(
    records: Iterable[EmotionRecord],
    date_range: DateRange,
    *,
    tz: tzinfo = timezone.utc,
    threshold: float = DEFAULT_TREND_THRESHOLD,
) -> EmotionTrend:
    points = build_time_points(records, date_range, tz)
    trend = overall_trend(points, threshold)
    stability = mood_stability(points)
    positivity = positivity_ratio(points)
    weekly = weekly_comparison(points)
    insights = generate_insights(
        trend, stability, positivity, weekly, has_data=any(p.emotions for p in points)
    )
    return EmotionTrend(
        time_points=tuple(points),
        overall_trend=trend,
        mood_stability=stability,
        positivity_ratio=positivity,
        weekly_comparison=weekly,
        insights=tuple(insights),
    )
