"""Data structures for the derived analysis views.

These are frozen dataclasses (not Pydantic): they are computed from
already-validated records, handed to renderers, and cached.  A cached
result is shared between callers, so nothing here can be changed after
construction; collections are tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from moodscope.emotions import EmotionCategory
from moodscope.models import EmotionDetection


class TimeRange(str, Enum):
    """Symbolic query window, counted back from now."""

    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class DateRange:
    """Concrete, inclusive ``[start, end]`` bounds (aware datetimes)."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def midpoint(self) -> datetime:
        return self.start + (self.end - self.start) / 2


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmotionAggregation:
    """Rollup of one emotion label across the filtered record set."""

    emotion: str  # label as it appeared in the records
    localized: str
    category: EmotionCategory
    color: str
    emoji: str
    count: int
    total_intensity: float  # sum of normalised (0–1) intensities
    average_intensity: float
    percentage: float  # share of all occurrences, 0–100
    last_occurrence: datetime
    trend: str  # "rising", "falling", "stable"


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmotionTimePoint:
    """One calendar day of the trend series."""

    date: str  # YYYY-MM-DD
    emotions: tuple[EmotionDetection, ...]
    dominant_emotion: str
    average_intensity: float
    active_ratio: float
    passive_ratio: float
    record_count: int
    summaries: tuple[str, ...] = ()  # record summaries in arrival order


@dataclass(frozen=True)
class EmotionInsight:
    """A short note raised by a threshold check on the trend metrics."""

    kind: str  # "positive", "negative", "neutral"
    message: str
    severity: str  # "low", "medium", "high"
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class EmotionTrend:
    time_points: tuple[EmotionTimePoint, ...]
    overall_trend: str  # "improving", "declining", "stable"
    mood_stability: float  # 0–1
    positivity_ratio: float  # 0–1
    weekly_comparison: float  # last 7 days minus the 7 before
    insights: tuple[EmotionInsight, ...] = ()


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalendarEmotion:
    emotion: str
    intensity: float  # 0–1
    color: str


@dataclass(frozen=True)
class CalendarDay:
    """Heat-map cell for one date."""

    date: str
    emotions: tuple[CalendarEmotion, ...]  # top 3 by intensity
    dominant_emotion: str
    record_count: int
    summary: str | None = None


# ---------------------------------------------------------------------------
# Knowledge graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GraphNode:
    """An emotion node or a cause node."""

    id: str
    kind: str  # "emotion" or "cause"
    label: str
    weight: int  # occurrence count
    size: float
    color: str
    description: str = ""
    emotion: str | None = None  # emotion nodes only
    intensity: float | None = None  # average 0–1, emotion nodes only
    related_causes: tuple[str, ...] = ()  # emotion nodes only
    affected_emotions: tuple[str, ...] = ()  # cause nodes only


@dataclass(frozen=True)
class GraphEdge:
    """Directed ``emotion -> cause`` link."""

    source: str
    target: str
    weight: float  # accumulated normalised intensity, capped at 1
    width: float
    relationship: str = "causes"
    color: str = "#d9d9d9"
    label: str = ""
    description: str = ""


@dataclass(frozen=True)
class GraphConnection:
    source: str
    target: str
    weight: float


@dataclass(frozen=True)
class GraphCluster:
    """Emotion nodes sharing at least two causes with the central emotion."""

    nodes: tuple[str, ...]
    central_emotion: str


@dataclass(frozen=True)
class GraphStatistics:
    total_nodes: int = 0
    total_edges: int = 0
    emotion_node_count: int = 0
    cause_node_count: int = 0
    avg_connections: float = 0.0
    max_weight: int = 0
    strongest_connections: tuple[GraphConnection, ...] = ()
    dominant_causes: tuple[str, ...] = ()
    clusters: tuple[GraphCluster, ...] = ()


@dataclass(frozen=True)
class EmotionKnowledgeGraph:
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    statistics: GraphStatistics = field(default_factory=GraphStatistics)


# ---------------------------------------------------------------------------
# Statistics and result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmotionStatistics:
    total_records: int
    total_emotions: int
    dominant_emotion: str
    average_intensity: float
    mood_stability: float
    positivity_ratio: float
    emotion_diversity: float
    recent_trend: str
    weekly_change: float


@dataclass(frozen=True)
class AnalysisResult:
    """Everything computed for one ``(time_range, date_range)`` query."""

    time_range: TimeRange
    date_range: DateRange
    aggregations: tuple[EmotionAggregation, ...]
    trends: EmotionTrend
    calendar: tuple[CalendarDay, ...]
    knowledge_graph: EmotionKnowledgeGraph
    statistics: EmotionStatistics
    suggestions: tuple[str, ...]
