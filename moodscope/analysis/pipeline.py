"""Run every analysis builder over one filtered record snapshot."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import timezone, tzinfo

from moodscope.analysis.aggregation import aggregate_emotions
from moodscope.analysis.calendar import project_calendar
from moodscope.analysis.graph import build_knowledge_graph
from moodscope.analysis.models import AnalysisResult, DateRange, TimeRange
from moodscope.analysis.statistics import compute_statistics, generate_suggestions
from moodscope.analysis.trends import DEFAULT_TREND_THRESHOLD, analyze_trends
from moodscope.models import EmotionRecord

logger = logging.getLogger(__name__)


def filter_records(
    records: Iterable[EmotionRecord],
    date_range: DateRange,
) -> tuple[EmotionRecord, ...]:
    """Records inside *date_range*, oldest first (ties keep input order)."""
    inside = [r for r in records if date_range.contains(r.timestamp)]
    inside.sort(key=lambda r: r.timestamp)
    return tuple(inside)


def analyze_records(
    records: Iterable[EmotionRecord],
    time_range: TimeRange,
    date_range: DateRange,
    *,
    tz: tzinfo = timezone.utc,
    trend_threshold: float = DEFAULT_TREND_THRESHOLD,
) -> AnalysisResult:
    """Compute all four views plus statistics and suggestions.

    Every view reads the same snapshot, so counts agree across views.
    """
    started = time.perf_counter()
    snapshot = filter_records(records, date_range)

    aggregations = aggregate_emotions(snapshot, date_range)
    trends = analyze_trends(snapshot, date_range, tz=tz, threshold=trend_threshold)
    calendar = project_calendar(trends.time_points)
    graph = build_knowledge_graph(snapshot)
    statistics = compute_statistics(len(snapshot), aggregations, trends)
    suggestions = generate_suggestions(statistics)

    logger.info(
        "Analysed %d records (%s, %s to %s) in %.1f ms",
        len(snapshot),
        time_range.value,
        date_range.start.date().isoformat(),
        date_range.end.date().isoformat(),
        (time.perf_counter() - started) * 1000,
    )
    return AnalysisResult(
        time_range=time_range,
        date_range=date_range,
        aggregations=tuple(aggregations),
        trends=trends,
        calendar=tuple(calendar),
        knowledge_graph=graph,
        statistics=statistics,
        suggestions=tuple(suggestions),
    )
