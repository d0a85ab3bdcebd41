"""Shared test fixtures for Moodscope tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from moodscope.analysis.models import DateRange
from moodscope.models import EmotionRecord, parse_record

NOW = datetime(2025, 6, 30, 12, 0, 0, tzinfo=timezone.utc)


def raw_record(
    timestamp: str | datetime,
    *emotions: tuple[str, float] | tuple[str, float, list[str]],
    summary: str | None = None,
) -> dict[str, Any]:
    """Build a raw record dict: ``raw_record(ts, ("Joy", 80, ["work"]))``."""
    detected = []
    for item in emotions:
        label, intensity = item[0], item[1]
        causes = item[2] if len(item) > 2 else []  # type: ignore[misc]
        detected.append(
            {
                "emotion": label,
                "intensity": intensity,
                "causes": [{"cause": c, "description": None} for c in causes],
            }
        )
    ts = timestamp.isoformat() if isinstance(timestamp, datetime) else timestamp
    return {"timestamp": ts, "summary": summary, "detected_emotions": detected}


def record(
    timestamp: str | datetime,
    *emotions: tuple[str, float] | tuple[str, float, list[str]],
    summary: str | None = None,
) -> EmotionRecord:
    return parse_record(raw_record(timestamp, *emotions, summary=summary))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def month_range() -> DateRange:
    """The 30 days ending at NOW."""
    return DateRange(start=NOW - timedelta(days=30), end=NOW)


@pytest.fixture
def make_record() -> Callable[..., EmotionRecord]:
    return record


@pytest.fixture
def make_raw() -> Callable[..., dict[str, Any]]:
    return raw_record


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
