"""Build the weighted emotion -> cause knowledge graph.

Two passes:

1. **Accumulate**: walk every detection once, totting up per-emotion and
   per-cause counts and intensities and the intensity carried by each
   ``(emotion, cause)`` pair.
2. **Materialize**: turn the totals into nodes, one edge per distinct
   pair, and summary statistics.

Iteration follows first-seen order throughout, so the same input always
yields the same graph.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import quote

from moodscope.analysis.metrics import clamp, normalize_intensity, scale_to_range
from moodscope.analysis.models import (
    EmotionKnowledgeGraph,
    GraphCluster,
    GraphConnection,
    GraphEdge,
    GraphNode,
    GraphStatistics,
)
from moodscope.emotions import emotion_color, localized_label
from moodscope.models import EmotionRecord

EMOTION_NODE_SIZE = (30.0, 80.0)
CAUSE_NODE_SIZE = (25.0, 60.0)
EDGE_WIDTH = (1.0, 8.0)
CAUSE_NODE_COLOR = "#1890ff"

TOP_N = 5
MIN_SHARED_CAUSES = 2


@dataclass
class _EmotionTotals:
    count: int = 0
    intensity: float = 0.0
    causes: dict[str, None] = field(default_factory=dict)  # ordered set
    localized: str | None = None


@dataclass
class _CauseTotals:
    count: int = 0
    intensity: float = 0.0
    emotions: dict[str, None] = field(default_factory=dict)  # ordered set


def emotion_node_id(emotion: str) -> str:
    return f"emotion_{emotion}"


def cause_node_id(cause: str) -> str:
    return f"cause_{quote(cause, safe='')}"


def _accumulate(
    records: Iterable[EmotionRecord],
) -> tuple[dict[str, _EmotionTotals], dict[str, _CauseTotals], dict[tuple[str, str], float]]:
    emotions: dict[str, _EmotionTotals] = {}
    causes: dict[str, _CauseTotals] = {}
    pairs: dict[tuple[str, str], float] = {}

    for record in records:
        for detection in record.detected_emotions:
            intensity = normalize_intensity(detection.intensity)
            e = emotions.setdefault(detection.emotion, _EmotionTotals())
            e.count += 1
            e.intensity += intensity
            e.localized = e.localized or detection.localized

            for cause in detection.cause_labels():
                c = causes.setdefault(cause, _CauseTotals())
                c.count += 1
                c.intensity += intensity
                c.emotions[detection.emotion] = None
                e.causes[cause] = None
                key = (detection.emotion, cause)
                pairs[key] = pairs.get(key, 0.0) + intensity

    return emotions, causes, pairs


def _emotion_node(emotion: str, totals: _EmotionTotals) -> GraphNode:
    avg = totals.intensity / totals.count
    label = localized_label(emotion, totals.localized)
    low, high = EMOTION_NODE_SIZE
    return GraphNode(
        id=emotion_node_id(emotion),
        kind="emotion",
        label=label,
        weight=totals.count,
        size=scale_to_range(avg, low, high - low, low, high),
        color=emotion_color(emotion),
        description=f"{label} ({emotion}) - average intensity {avg * 100:.1f}%",
        emotion=emotion,
        intensity=avg,
        related_causes=tuple(totals.causes),
    )


def _cause_node(cause: str, totals: _CauseTotals) -> GraphNode:
    low, high = CAUSE_NODE_SIZE
    n = len(totals.emotions)
    return GraphNode(
        id=cause_node_id(cause),
        kind="cause",
        label=cause,
        weight=totals.count,
        size=scale_to_range(totals.count, low, 4.0, low, high),
        color=CAUSE_NODE_COLOR,
        description=f"Trigger: {cause} - affects {n} emotion{'s' if n != 1 else ''}",
        affected_emotions=tuple(totals.emotions),
    )


def _edge(emotion: str, cause: str, accumulated: float, emotion_label: str) -> GraphEdge:
    weight = clamp(accumulated)
    low, high = EDGE_WIDTH
    return GraphEdge(
        source=emotion_node_id(emotion),
        target=cause_node_id(cause),
        weight=weight,
        width=clamp(weight * high, low, high),
        label=f"{weight * 100:.0f}%",
        description=f"{emotion_label} <- {cause}",
    )


def find_clusters(emotions: dict[str, _EmotionTotals]) -> list[GraphCluster]:
    """Greedy single pass: join every unvisited emotion sharing 2+ causes.

    Each emotion lands in at most one cluster; singletons are dropped.
    """
    clusters: list[GraphCluster] = []
    visited: set[str] = set()
    for emotion, totals in emotions.items():
        if emotion in visited:
            continue
        visited.add(emotion)
        members = [emotion]
        for other, other_totals in emotions.items():
            if other in visited:
                continue
            shared = sum(1 for c in totals.causes if c in other_totals.causes)
            if shared >= MIN_SHARED_CAUSES:
                members.append(other)
                visited.add(other)
        if len(members) > 1:
            clusters.append(
                GraphCluster(
                    nodes=tuple(emotion_node_id(m) for m in members),
                    central_emotion=emotion,
                )
            )
    return clusters


def build_knowledge_graph(records: Iterable[EmotionRecord]) -> EmotionKnowledgeGraph:
    emotions, causes, pairs = _accumulate(records)

    emotion_nodes = [_emotion_node(e, t) for e, t in emotions.items()]
    cause_nodes = [_cause_node(c, t) for c, t in causes.items()]
    nodes = emotion_nodes + cause_nodes
    labels = {e: localized_label(e, t.localized) for e, t in emotions.items()}
    edges = [_edge(e, c, w, labels[e]) for (e, c), w in pairs.items()]

    strongest = sorted(edges, key=lambda edge: edge.weight, reverse=True)[:TOP_N]
    dominant = sorted(causes.items(), key=lambda item: item[1].count, reverse=True)[:TOP_N]

    statistics = GraphStatistics(
        total_nodes=len(nodes),
        total_edges=len(edges),
        emotion_node_count=len(emotion_nodes),
        cause_node_count=len(cause_nodes),
        avg_connections=len(edges) / len(nodes) if nodes else 0.0,
        max_weight=max((n.weight for n in nodes), default=0),
        strongest_connections=tuple(
            GraphConnection(source=e.source, target=e.target, weight=e.weight) for e in strongest
        ),
        dominant_causes=tuple(cause for cause, _ in dominant),
        clusters=tuple(find_clusters(emotions)),
    )
    return EmotionKnowledgeGraph(nodes=tuple(nodes), edges=tuple(edges), statistics=statistics)
