"""Analysis orchestrator: load records, run the pipeline, cache the result.

``EmotionAnalysisService`` is an explicit object built from its
collaborators (record fetch function, caches, clock); there is no module
level state.  The only suspend point in a query is the record fetch;
everything after it is synchronous computation over one snapshot.

Concurrent queries for the same key share one in-flight task, so a burst
of identical requests costs one fetch and one computation.  Each time range
carries a generation counter that invalidation bumps: a computation that
started before the bump still answers its own callers but does not write
into the cache.  Invalidating one range leaves the others alone.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from moodscope.analysis.dates import coerce_time_range, resolve_date_range
from moodscope.analysis.models import AnalysisResult, TimeRange
from moodscope.analysis.pipeline import analyze_records
from moodscope.analysis.trends import DEFAULT_TREND_THRESHOLD
from moodscope.cache import CacheStats, MemoryCache, make_cache_key
from moodscope.config import MoodscopeSettings
from moodscope.demo import DemoSource
from moodscope.loader import JsonFileSource, RecordFetcher, RecordLoader
from moodscope.models import EmotionRecord

logger = logging.getLogger(__name__)

_ANALYSIS_PREFIX = "analysis"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _bound(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def analysis_cache_key(
    time_range: TimeRange,
    start_date: date | datetime | None = None,
    end_date: date | datetime | None = None,
) -> str:
    """Result-cache key: a pure function of the query parameters."""
    return make_cache_key(
        _ANALYSIS_PREFIX,
        {
            "time_range": time_range.value,
            "start": _bound(start_date),
            "end": _bound(end_date),
        },
    )


def _key_has_time_range(key: str, time_range: TimeRange) -> bool:
    return key.startswith(f"{_ANALYSIS_PREFIX}:") and f'time_range:"{time_range.value}"' in key


class EmotionAnalysisService:
    """Public query surface over the analysis pipeline."""

    def __init__(
        self,
        fetch: RecordFetcher,
        *,
        result_cache: MemoryCache[AnalysisResult] | None = None,
        record_cache: MemoryCache[tuple[EmotionRecord, ...]] | None = None,
        clock: Callable[[], datetime] = _utc_now,
        tz: tzinfo = timezone.utc,
        default_time_range: TimeRange | str = TimeRange.MONTH,
        trend_threshold: float = DEFAULT_TREND_THRESHOLD,
        fetch_limit: int = 0,
        sweep_interval: float = 60.0,
    ) -> None:
        self.result_cache = result_cache if result_cache is not None else MemoryCache(name="analysis")
        self.loader = RecordLoader(fetch, record_cache, limit=fetch_limit)
        self.clock = clock
        self.tz = tz
        self.default_time_range = coerce_time_range(default_time_range)
        self.trend_threshold = trend_threshold
        self.sweep_interval = sweep_interval
        self._inflight: dict[str, asyncio.Future[AnalysisResult]] = {}
        self._generations: dict[TimeRange, int] = dict.fromkeys(TimeRange, 0)

    @classmethod
    def from_settings(
        cls,
        settings: MoodscopeSettings,
        *,
        fetch: RecordFetcher | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> EmotionAnalysisService:
        """Build a service wired to the configured data source and cache sizes."""
        if fetch is None:
            if settings.data_source == "demo":
                fetch = DemoSource(seed=settings.demo_seed)
            else:
                fetch = JsonFileSource(settings.records_path)
        return cls(
            fetch,
            result_cache=MemoryCache(
                settings.cache_max_size, settings.cache_ttl_seconds, name="analysis"
            ),
            record_cache=MemoryCache(
                settings.cache_max_size, settings.cache_ttl_seconds, name="records"
            ),
            clock=clock,
            tz=ZoneInfo(settings.timezone),
            default_time_range=settings.default_time_range,
            trend_threshold=settings.trend_threshold,
            fetch_limit=settings.fetch_limit,
            sweep_interval=settings.cache_sweep_interval_seconds,
        )

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Start background TTL sweeps on the running event loop."""
        self.result_cache.start_sweeper(self.sweep_interval)
        self.loader.cache.start_sweeper(self.sweep_interval)

    async def aclose(self) -> None:
        await self.result_cache.stop_sweeper()
        await self.loader.cache.stop_sweeper()

    async def __aenter__(self) -> EmotionAnalysisService:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- queries ------------------------------------------------------------

    async def run_analysis(
        self,
        time_range: TimeRange | str | None = None,
        start_date: date | datetime | None = None,
        end_date: date | datetime | None = None,
    ) -> AnalysisResult:
        """Cached analysis for a symbolic range or explicit bounds.

        Raises:
            RecordLoadError: the record source failed.  Nothing is cached.
        """
        resolved_range = coerce_time_range(time_range or self.default_time_range)
        key = analysis_cache_key(resolved_range, start_date, end_date)

        cached = self.result_cache.get(key)
        if cached is not None:
            logger.debug("Analysis cache hit: %s", key)
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._compute(
                    key,
                    resolved_range,
                    start_date,
                    end_date,
                    self._generations[resolved_range],
                )
            )
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug("Joining in-flight analysis: %s", key)
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Future[AnalysisResult]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _compute(
        self,
        key: str,
        time_range: TimeRange,
        start_date: date | datetime | None,
        end_date: date | datetime | None,
        generation: int,
    ) -> AnalysisResult:
        date_range = resolve_date_range(time_range, start_date, end_date, now=self.clock())
        records = await self.loader.load(date_range)
        result = analyze_records(
            records,
            time_range,
            date_range,
            tz=self.tz,
            trend_threshold=self.trend_threshold,
        )
        if generation == self._generations[time_range]:
            self.result_cache.set(key, result)
        else:
            logger.debug("Discarding stale analysis for %s", key)
        return result

    # -- mutation -----------------------------------------------------------

    def invalidate(self, time_range: TimeRange | str | None = None) -> int:
        """Drop cached results for *time_range*, or all results when omitted.

        Returns the number of cache entries removed.  Raw records stay
        cached; use ``clear_all`` to drop those too.
        """
        if time_range is None:
            self._bump(*TimeRange)
            removed = len(self.result_cache)
            self.result_cache.clear()
            self._inflight.clear()
        else:
            wanted = coerce_time_range(time_range)
            self._bump(wanted)
            removed = self.result_cache.delete_matching(lambda k: _key_has_time_range(k, wanted))
            for key in [k for k in self._inflight if _key_has_time_range(k, wanted)]:
                del self._inflight[key]
        logger.debug("Invalidated %d cached analyses", removed)
        return removed

    def clear_all(self) -> None:
        """Drop every cached analysis and every cached record batch."""
        self._bump(*TimeRange)
        self._inflight.clear()
        self.result_cache.clear()
        self.loader.cache.clear()
        logger.info("Cleared analysis and record caches")

    def _bump(self, *ranges: TimeRange) -> None:
        for time_range in ranges:
            self._generations[time_range] += 1

    def cache_stats(self) -> dict[str, CacheStats]:
        return {
            "analysis": self.result_cache.stats(),
            "records": self.loader.cache.stats(),
        }
