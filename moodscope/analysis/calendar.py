"""Reshape daily trend points into heat-map calendar cells."""

from __future__ import annotations

from collections.abc import Iterable

from moodscope.analysis.metrics import normalize_intensity
from moodscope.analysis.models import CalendarDay, CalendarEmotion, EmotionTimePoint
from moodscope.emotions import emotion_color

MAX_EMOTIONS_PER_DAY = 3


def _top_emotions(point: EmotionTimePoint) -> tuple[CalendarEmotion, ...]:
    """Distinct emotions of the day at their peak intensity, strongest first."""
    peaks: dict[str, float] = {}
    for d in point.emotions:
        value = normalize_intensity(d.intensity)
        if value > peaks.get(d.emotion, -1.0):
            peaks[d.emotion] = value
    ranked = sorted(peaks.items(), key=lambda item: item[1], reverse=True)
    return tuple(
        CalendarEmotion(emotion=emotion, intensity=value, color=emotion_color(emotion))
        for emotion, value in ranked[:MAX_EMOTIONS_PER_DAY]
    )


def project_calendar(points: Iterable[EmotionTimePoint]) -> list[CalendarDay]:
    return [
        CalendarDay(
            date=point.date,
            emotions=_top_emotions(point),
            dominant_emotion=point.dominant_emotion,
            record_count=point.record_count,
            summary=point.summaries[0] if point.summaries else None,
        )
        for point in points
    ]
