"""Analysis computation: aggregation, trends, calendar, knowledge graph."""

from moodscope.analysis.aggregation import aggregate_emotions
from moodscope.analysis.calendar import project_calendar
from moodscope.analysis.dates import coerce_time_range, resolve_date_range
from moodscope.analysis.graph import build_knowledge_graph
from moodscope.analysis.models import AnalysisResult, DateRange, TimeRange
from moodscope.analysis.pipeline import analyze_records, filter_records
from moodscope.analysis.statistics import compute_statistics, generate_suggestions
from moodscope.analysis.trends import analyze_trends

__all__ = [
    "AnalysisResult",
    "DateRange",
    "TimeRange",
    "aggregate_emotions",
    "analyze_records",
    "analyze_trends",
    "build_knowledge_graph",
    "coerce_time_range",
    "compute_statistics",
    "filter_records",
    "generate_suggestions",
    "project_calendar",
    "resolve_date_range",
]
