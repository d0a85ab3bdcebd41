"""Application settings loaded from environment variables or .env."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Shorthand time ranges accepted on the command line and in env vars
_TIME_RANGE_ALIASES: dict[str, str] = {
    "7d": "week",
    "30d": "month",
    "90d": "quarter",
    "365d": "year",
}


def _find_env_files() -> list[Path]:
    """Find .env files to load, searching upward from CWD.

    Stops at the first match, so a project-level .env shadows any further
    up the tree.
    """
    cwd = Path.cwd().resolve()
    for parent in [cwd, *cwd.parents]:
        env_path = parent / ".env"
        if env_path.is_file():
            return [env_path]
    return []


class MoodscopeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOODSCOPE_",
        env_file=_find_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache
    cache_max_size: int = 50
    cache_ttl_seconds: float = 300.0
    cache_sweep_interval_seconds: float = 60.0

    # Analysis
    trend_threshold: float = 0.1  # relative change for improving / declining
    default_time_range: str = "month"  # "week", "month", "quarter", "year"
    timezone: str = "UTC"  # zone used to derive calendar-day keys

    # Data source
    data_source: str = "file"  # "file" or "demo"
    records_path: Path = Path("records.json")
    demo_seed: int | None = None
    fetch_limit: int = 0  # 0 = unlimited

    # Logging
    log_level: str = "INFO"  # log file level; unknown names fall back to INFO


def normalise_time_range(value: str) -> str:
    """Map shorthand like ``30d`` to its canonical time range name."""
    lowered = value.strip().lower()
    return _TIME_RANGE_ALIASES.get(lowered, lowered)


def load_settings(**overrides: object) -> MoodscopeSettings:
    """Load settings with optional CLI overrides.

    ``None`` overrides are dropped so unset CLI options fall through to
    env vars and defaults.  Time range aliases are normalised.
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if isinstance(overrides.get("default_time_range"), str):
        overrides["default_time_range"] = normalise_time_range(
            overrides["default_time_range"]  # type: ignore[arg-type]
        )

    settings = MoodscopeSettings(**overrides)  # type: ignore[arg-type]

    normalised = normalise_time_range(settings.default_time_range)
    if normalised != settings.default_time_range:
        settings = settings.model_copy(update={"default_time_range": normalised})
    return settings
