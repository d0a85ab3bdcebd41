"""Roll aggregations and trend into flat statistics and suggestions."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from moodscope.analysis.metrics import clamp
from moodscope.analysis.models import EmotionAggregation, EmotionStatistics, EmotionTrend

# Number of basic emotion families diversity is measured against
REFERENCE_EMOTION_COUNT = 13

DEFAULT_SUGGESTION = "Keep recording how you feel; suggestions get more specific with more data"


def compute_statistics(
    total_records: int,
    aggregations: Sequence[EmotionAggregation],
    trends: EmotionTrend,
) -> EmotionStatistics:
    total_emotions = sum(a.count for a in aggregations)
    total_intensity = sum(a.total_intensity for a in aggregations)

    # Highest cumulative intensity; on ties the more frequent (earlier) one wins
    dominant = "neutral"
    best = -1.0
    for agg in aggregations:
        if agg.total_intensity > best:
            dominant, best = agg.emotion, agg.total_intensity

    return EmotionStatistics(
        total_records=total_records,
        total_emotions=total_emotions,
        dominant_emotion=dominant,
        average_intensity=total_intensity / total_emotions if total_emotions else 0.0,
        mood_stability=trends.mood_stability,
        positivity_ratio=trends.positivity_ratio,
        emotion_diversity=clamp(len(aggregations) / REFERENCE_EMOTION_COUNT),
        recent_trend=trends.overall_trend,
        weekly_change=trends.weekly_comparison,
    )


# Each rule sees only the statistics record and returns a suggestion or None.
# Rules never look at each other's output.
SuggestionRule = Callable[[EmotionStatistics], "str | None"]


def _declining(stats: EmotionStatistics) -> str | None:
    if stats.recent_trend == "declining":
        return "Your mood has been trending down lately; consider easing your pace for a while"
    return None


def _improving(stats: EmotionStatistics) -> str | None:
    if stats.recent_trend == "improving":
        return "Your mood is improving; keep doing what is working for you"
    return None


def _low_positivity(stats: EmotionStatistics) -> str | None:
    if stats.total_emotions and stats.positivity_ratio < 0.3:
        return "Try adding a few activities you enjoy to lift your overall mood"
    return None


def _high_positivity(stats: EmotionStatistics) -> str | None:
    if stats.total_emotions and stats.positivity_ratio > 0.7:
        return "You are keeping a very positive outlook; keep it up"
    return None


def _low_stability(stats: EmotionStatistics) -> str | None:
    if stats.total_emotions and stats.mood_stability < 0.5:
        return "Your mood swings quite a bit; meditation or a regular routine may help"
    return None


def _weekly_drop(stats: EmotionStatistics) -> str | None:
    if stats.weekly_change <= -0.1:
        return "This week felt flatter than last week; plan something to look forward to"
    return None


SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    _declining,
    _improving,
    _low_positivity,
    _high_positivity,
    _low_stability,
    _weekly_drop,
)


def generate_suggestions(
    stats: EmotionStatistics,
    rules: Sequence[SuggestionRule] = SUGGESTION_RULES,
) -> list[str]:
    """Apply every rule in order; fall back to one default encouragement."""
    suggestions = [s for s in (rule(stats) for rule in rules) if s]
    return suggestions or [DEFAULT_SUGGESTION]
