"""Collapse records into per-emotion counts, intensities and shares.

The scan is a fold over ``(record, detection)`` pairs producing a fresh
tally map at each step, so the step function can be tested on its own
and independent queries never share state.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from functools import reduce

from moodscope.analysis.metrics import normalize_intensity
from moodscope.analysis.models import DateRange, EmotionAggregation
from moodscope.emotions import lookup_emotion, localized_label
from moodscope.models import EmotionDetection, EmotionRecord

# Second-half occurrences must beat the first half by this factor to count
# as rising (or fall below its inverse share to count as falling)
RISING_FACTOR = 1.2
FALLING_FACTOR = 0.8


@dataclass(frozen=True)
class EmotionTally:
    """Running totals for one emotion label."""

    count: int = 0
    total_intensity: float = 0.0
    last_occurrence: datetime | None = None
    first_half: int = 0
    second_half: int = 0
    localized: str | None = None  # first label supplied by the source

    def add(
        self,
        intensity: float,
        moment: datetime,
        in_second_half: bool,
        localized: str | None = None,
    ) -> EmotionTally:
        last = self.last_occurrence
        return replace(
            self,
            localized=self.localized or localized,
            count=self.count + 1,
            total_intensity=self.total_intensity + intensity,
            last_occurrence=moment if last is None or moment > last else last,
            first_half=self.first_half + (0 if in_second_half else 1),
            second_half=self.second_half + (1 if in_second_half else 0),
        )


def _detections(records: Iterable[EmotionRecord]) -> Iterator[tuple[EmotionRecord, EmotionDetection]]:
    for record in records:
        for detection in record.detected_emotions:
            yield record, detection


def tally_step(
    tallies: Mapping[str, EmotionTally],
    item: tuple[EmotionRecord, EmotionDetection],
    midpoint: datetime,
) -> dict[str, EmotionTally]:
    """Return a new tally map with one more detection folded in."""
    record, detection = item
    current = tallies.get(detection.emotion, EmotionTally())
    updated = current.add(
        normalize_intensity(detection.intensity),
        record.timestamp,
        record.timestamp >= midpoint,
        detection.localized,
    )
    return {**tallies, detection.emotion: updated}


def tally_emotions(
    records: Iterable[EmotionRecord],
    date_range: DateRange,
) -> dict[str, EmotionTally]:
    """Fold every detection into per-label tallies (first-seen order)."""
    midpoint = date_range.midpoint
    return reduce(
        lambda acc, item: tally_step(acc, item, midpoint),
        _detections(records),
        {},
    )


def occurrence_trend(first_half: int, second_half: int) -> str:
    """Compare occurrence density across the two halves of the range."""
    if first_half + second_half < 2:
        return "stable"
    if second_half > first_half * RISING_FACTOR:
        return "rising"
    if second_half < first_half * FALLING_FACTOR:
        return "falling"
    return "stable"


def aggregate_emotions(
    records: Iterable[EmotionRecord],
    date_range: DateRange,
) -> list[EmotionAggregation]:
    """Per-emotion aggregations sorted by count descending.

    Ties keep first-seen order.  Percentages are count-weighted and sum
    to 100 for any non-empty input.
    """
    tallies = tally_emotions(records, date_range)
    total = sum(t.count for t in tallies.values())

    aggregations: list[EmotionAggregation] = []
    for emotion, tally in tallies.items():
        profile = lookup_emotion(emotion)
        aggregations.append(
            EmotionAggregation(
                emotion=emotion,
                localized=localized_label(emotion, tally.localized),
                category=profile.category,
                color=profile.color,
                emoji=profile.emoji,
                count=tally.count,
                total_intensity=tally.total_intensity,
                average_intensity=tally.total_intensity / tally.count,
                percentage=tally.count / total * 100 if total else 0.0,
                last_occurrence=tally.last_occurrence,  # type: ignore[arg-type]
                trend=occurrence_trend(tally.first_half, tally.second_half),
            )
        )

    aggregations.sort(key=lambda a: a.count, reverse=True)
    return aggregations
