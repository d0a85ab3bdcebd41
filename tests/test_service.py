"""Tests for the analysis orchestrator: caching, dedupe, invalidation."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from moodscope.analysis.models import TimeRange
from moodscope.cache import MemoryCache
from moodscope.config import load_settings
from moodscope.demo import DemoSource
from moodscope.loader import JsonFileSource, RecordLoadError
from moodscope.service import EmotionAnalysisService, analysis_cache_key

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


class _Fetch:
    """Records fetch that counts calls and can be held open or made to fail."""

    def __init__(self, records: list, *, gate: asyncio.Event | None = None) -> None:
        self.records = records
        self.gate = gate
        self.calls = 0
        self.error: Exception | None = None

    async def __call__(self, date_range) -> list:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.records


@pytest.fixture
def raw_records(make_raw) -> list:
    return [
        make_raw(NOW - timedelta(days=1), ("Joy", 80, ["work"])),
        make_raw(NOW - timedelta(days=3), ("Anxiety", 50, ["deadline"])),
        make_raw(NOW - timedelta(days=20), ("Hope", 60, ["family"])),
    ]


def _service(fetch, **kwargs) -> EmotionAnalysisService:
    return EmotionAnalysisService(fetch, clock=lambda: NOW, **kwargs)


class TestCacheKey:
    def test_pure_function_of_parameters(self) -> None:
        a = analysis_cache_key(TimeRange.WEEK, date(2025, 6, 1), None)
        b = analysis_cache_key(TimeRange.WEEK, date(2025, 6, 1), None)
        assert a == b
        assert a != analysis_cache_key(TimeRange.WEEK)
        assert a != analysis_cache_key(TimeRange.MONTH, date(2025, 6, 1), None)


class TestRunAnalysis:
    @pytest.mark.asyncio
    async def test_result_for_range(self, raw_records) -> None:
        result = await _service(_Fetch(raw_records)).run_analysis("week")
        assert result.time_range is TimeRange.WEEK
        assert result.statistics.total_records == 2
        assert result.date_range.end == NOW

    @pytest.mark.asyncio
    async def test_default_range(self, raw_records) -> None:
        result = await _service(_Fetch(raw_records)).run_analysis()
        assert result.time_range is TimeRange.MONTH
        assert result.statistics.total_records == 3

    @pytest.mark.asyncio
    async def test_explicit_dates(self, raw_records) -> None:
        service = _service(_Fetch(raw_records))
        result = await service.run_analysis("year", date(2025, 6, 25), date(2025, 6, 28))
        assert result.statistics.total_records == 1

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, raw_records) -> None:
        fetch = _Fetch(raw_records)
        service = _service(fetch)

        first = await service.run_analysis("week")
        second = await service.run_analysis("week")

        assert first is second
        assert fetch.calls == 1
        assert service.cache_stats()["analysis"].hits == 1

    @pytest.mark.asyncio
    async def test_records_reused_across_queries_over_same_days(self, raw_records) -> None:
        fetch = _Fetch(raw_records)
        service = _service(fetch)
        await service.run_analysis("week", date(2025, 6, 1), date(2025, 6, 30))
        await service.run_analysis("month", date(2025, 6, 1), date(2025, 6, 30))
        assert fetch.calls == 1
        assert len(service.result_cache) == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_computation(self, raw_records) -> None:
        gate = asyncio.Event()
        fetch = _Fetch(raw_records, gate=gate)
        service = _service(fetch)

        calls = [asyncio.ensure_future(service.run_analysis("week")) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*calls)

        assert fetch.calls == 1
        assert results[0] is results[1] is results[2]

    @pytest.mark.asyncio
    async def test_load_error_reaches_every_waiter_and_is_not_cached(self, raw_records) -> None:
        gate = asyncio.Event()
        fetch = _Fetch(raw_records, gate=gate)
        fetch.error = ConnectionError("storage down")
        service = _service(fetch)

        calls = [asyncio.ensure_future(service.run_analysis("week")) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        outcomes = await asyncio.gather(*calls, return_exceptions=True)

        assert all(isinstance(o, RecordLoadError) for o in outcomes)
        assert len(service.result_cache) == 0

        fetch.error = None
        result = await service.run_analysis("week")
        assert result.statistics.total_records == 2
        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_empty_source_is_not_an_error(self) -> None:
        result = await _service(_Fetch([])).run_analysis("month")
        assert result.statistics.total_records == 0
        assert result.aggregations == ()

    @pytest.mark.asyncio
    async def test_other_range_does_not_mutate_previous_result(self, raw_records) -> None:
        import dataclasses

        service = _service(_Fetch(raw_records))
        month = await service.run_analysis("month")
        before = dataclasses.asdict(month)
        await service.run_analysis("week")
        assert dataclasses.asdict(month) == before


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_invalidate_one_range(self, raw_records) -> None:
        service = _service(_Fetch(raw_records))
        await service.run_analysis("week")
        await service.run_analysis("month")

        assert service.invalidate("week") == 1
        keys = list(service.result_cache.keys())
        assert keys == [analysis_cache_key(TimeRange.MONTH)]

    @pytest.mark.asyncio
    async def test_invalidate_all_results_keeps_records(self, raw_records) -> None:
        fetch = _Fetch(raw_records)
        service = _service(fetch)
        await service.run_analysis("week")
        await service.run_analysis("month")

        assert service.invalidate() == 2
        assert len(service.result_cache) == 0
        assert len(service.loader.cache) == 2

    @pytest.mark.asyncio
    async def test_clear_all_drops_both_caches(self, raw_records) -> None:
        fetch = _Fetch(raw_records)
        service = _service(fetch)
        await service.run_analysis("week")

        service.clear_all()

        stats = service.cache_stats()
        assert stats["analysis"].size == 0
        assert stats["records"].size == 0
        await service.run_analysis("week")
        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_stale_computation_not_cached(self, raw_records) -> None:
        gate = asyncio.Event()
        service = _service(_Fetch(raw_records, gate=gate))

        pending = asyncio.ensure_future(service.run_analysis("week"))
        await asyncio.sleep(0)
        service.clear_all()
        gate.set()
        result = await pending

        assert result.statistics.total_records == 2
        assert len(service.result_cache) == 0

    @pytest.mark.asyncio
    async def test_invalidating_one_range_spares_others_in_flight(self, raw_records) -> None:
        gate = asyncio.Event()
        service = _service(_Fetch(raw_records, gate=gate))

        week = asyncio.ensure_future(service.run_analysis("week"))
        month = asyncio.ensure_future(service.run_analysis("month"))
        await asyncio.sleep(0)
        service.invalidate("week")
        gate.set()
        await asyncio.gather(week, month)

        assert list(service.result_cache.keys()) == [analysis_cache_key(TimeRange.MONTH)]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_runs_sweepers(self, raw_records) -> None:
        service = _service(_Fetch(raw_records), sweep_interval=60)
        async with service:
            assert service.result_cache.sweeper_running
            assert service.loader.cache.sweeper_running
        assert not service.result_cache.sweeper_running
        assert not service.loader.cache.sweeper_running

    def test_from_settings_demo(self) -> None:
        settings = load_settings(data_source="demo", demo_seed=3, cache_max_size=7)
        service = EmotionAnalysisService.from_settings(settings)
        assert isinstance(service.loader._fetch, DemoSource)
        assert service.result_cache.max_size == 7
        assert service.loader.cache.max_size == 7

    def test_from_settings_file(self, tmp_path) -> None:
        settings = load_settings(records_path=tmp_path / "r.json", default_time_range="7d")
        service = EmotionAnalysisService.from_settings(settings)
        assert isinstance(service.loader._fetch, JsonFileSource)
        assert service.default_time_range is TimeRange.WEEK

    def test_injected_caches_used(self, raw_records) -> None:
        cache: MemoryCache = MemoryCache(max_size=2, name="custom")
        service = _service(_Fetch(raw_records), result_cache=cache)
        assert service.result_cache is cache

    @pytest.mark.asyncio
    async def test_demo_source_end_to_end(self) -> None:
        service = _service(DemoSource(seed=7))
        result = await service.run_analysis("week")
        assert result.statistics.total_records > 0
        assert result.aggregations
        assert sum(a.percentage for a in result.aggregations) == pytest.approx(100.0)
