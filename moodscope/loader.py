"""Record loading: fetch raw records for a window, validate, and cache them.

The loader owns no data.  It is handed an async *fetch* callable (a JSON
file, the demo generator, or anything that can answer "records between
these dates") and caches the validated batch under a key built from the
calendar days of the window.  Fetches are widened to whole UTC days so
every query over the same days can reuse one fetch.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Any, Union

from moodscope.analysis.models import DateRange
from moodscope.cache import MemoryCache, make_cache_key
from moodscope.models import EmotionRecord, parse_records

logger = logging.getLogger(__name__)

RecordFetcher = Callable[[DateRange], Union[Awaitable[Iterable[Any]], Iterable[Any]]]


class RecordLoadError(RuntimeError):
    """The record source could not be reached or returned unusable data."""


def widen_to_days(date_range: DateRange) -> DateRange:
    """Stretch *date_range* to cover whole UTC days at both ends."""
    start = date_range.start.astimezone(timezone.utc).date()
    end = date_range.end.astimezone(timezone.utc).date()
    return DateRange(
        start=datetime.combine(start, time.min, tzinfo=timezone.utc),
        end=datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def records_cache_key(date_range: DateRange) -> str:
    wide = widen_to_days(date_range)
    return make_cache_key(
        "records",
        {"start": wide.start.date().isoformat(), "end": wide.end.date().isoformat()},
    )


def _newest(
    records: tuple[EmotionRecord, ...], window: DateRange, limit: int
) -> tuple[EmotionRecord, ...]:
    """The *limit* most recent records inside *window*, oldest first."""
    inside = sorted(
        (r for r in records if window.contains(r.timestamp)), key=lambda r: r.timestamp
    )
    if len(inside) > limit:
        logger.info("Keeping the newest %d of %d fetched records", limit, len(inside))
        inside = inside[-limit:]
    return tuple(inside)


class RecordLoader:
    """Fetch-and-validate front end for a record source."""

    def __init__(
        self,
        fetch: RecordFetcher,
        cache: MemoryCache[tuple[EmotionRecord, ...]] | None = None,
        *,
        limit: int = 0,
    ) -> None:
        self._fetch = fetch
        self.cache = cache if cache is not None else MemoryCache(name="records")
        self.limit = limit

    async def load(self, date_range: DateRange) -> tuple[EmotionRecord, ...]:
        """Validated records for the days of *date_range*.

        Raises:
            RecordLoadError: the fetch raised, or returned something that is
                not a list of records.  Nothing is cached in that case.
        """
        key = records_cache_key(date_range)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached records for %s", key)
            return cached

        wide = widen_to_days(date_range)
        try:
            raw = self._fetch(wide)
            if inspect.isawaitable(raw):
                raw = await raw
        except RecordLoadError:
            raise
        except Exception as exc:
            logger.warning("Record fetch failed: %s", exc)
            raise RecordLoadError(f"Could not load emotion records: {exc}") from exc

        if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
            raise RecordLoadError(
                f"Record source returned {type(raw).__name__}, expected a list of records"
            )

        records = tuple(parse_records(raw))
        if self.limit:
            records = _newest(records, wide, self.limit)

        self.cache.set(key, records)
        logger.debug("Loaded %d records for %s", len(records), key)
        return records


class JsonFileSource:
    """Record source backed by a JSON file.

    Accepts either a top-level array of records or an object with a
    ``records`` array.  The whole file is returned; the analysis filters
    to the exact window.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> list[Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"Records file not found: {self.path}") from None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {self.path.name}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("records")
        if not isinstance(data, list):
            raise TypeError(f"{self.path.name} must hold a list of records or a 'records' list")
        return data

    async def __call__(self, date_range: DateRange) -> list[Any]:
        return await asyncio.to_thread(self._read)
