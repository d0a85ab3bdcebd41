"""Mock record generator for demos and local development.

Produces raw record dicts in the same shape a real record source returns,
timestamps in the zone-less ``YYYY-MM-DD HH:mm:ss`` storage format.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any

from moodscope.analysis.models import DateRange
from moodscope.emotions import localized_label

DEMO_EMOTIONS = (
    "Happiness", "Joy", "Excitement", "Hope", "Confidence", "Satisfaction",
    "Gratitude", "Relief", "Curiosity", "Anxiety", "Worry", "Stress",
    "Dejection", "Confusion", "Loneliness", "Tiredness", "Frustration", "Melancholy",
)

DEMO_CAUSES = (
    "project deadline", "team meeting", "morning workout", "family dinner",
    "late night coding", "performance review", "weekend trip", "new hobby",
    "commute", "friend's message", "sleep quality", "unexpected bug",
    "good weather", "financial planning", "reading a book",
)

_SUMMARY_TEMPLATES = (
    "The user talked about {cause} and mostly felt {emotion}.",
    "A conversation about {cause}; {emotion} came through strongly.",
    "The user reflected on {cause}, with {emotion} as the main feeling.",
    "{cause} came up again today and brought {emotion}.",
)


def _conversation(rng: random.Random, day: date) -> dict[str, Any]:
    hour = rng.randint(7, 22)
    minute = rng.randint(0, 59)
    second = rng.randint(0, 59)

    emotions = rng.sample(DEMO_EMOTIONS, rng.randint(1, 3))
    detected = []
    for emotion in emotions:
        cause = rng.choice(DEMO_CAUSES)
        detected.append(
            {
                "emotion": emotion,
                "emotion_cn": localized_label(emotion),
                "intensity": rng.randint(30, 99),
                "causes": [
                    {"cause": cause, "description": f"How {cause} shaped the feeling of {emotion.lower()}."}
                ],
            }
        )

    primary = detected[0]
    summary = rng.choice(_SUMMARY_TEMPLATES).format(
        cause=primary["causes"][0]["cause"], emotion=primary["emotion"].lower()
    )
    return {
        "timestamp": f"{day.isoformat()} {hour:02d}:{minute:02d}:{second:02d}",
        "summary": summary[0].upper() + summary[1:],
        "detected_emotions": detected,
    }


def generate_demo_records(
    end: date,
    days: int = 31,
    *,
    seed: int | None = None,
) -> list[dict[str, Any]]:
    """1–3 conversations per day for *days* days ending on *end*, oldest first."""
    rng = random.Random(seed)
    records: list[dict[str, Any]] = []
    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        day_records = [_conversation(rng, day) for _ in range(rng.randint(1, 3))]
        day_records.sort(key=lambda r: r["timestamp"])
        records.extend(day_records)
    for n, record in enumerate(records, start=1):
        record["thread_id"] = f"thread_{n:03d}"
    return records


class DemoSource:
    """Record source that fabricates data covering the requested window."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed

    async def __call__(self, date_range: DateRange) -> list[dict[str, Any]]:
        end = date_range.end.date()
        days = (end - date_range.start.date()).days + 1
        return generate_demo_records(end, days, seed=self.seed)
