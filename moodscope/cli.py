"""Command-line interface for Moodscope."""

from __future__ import annotations

import asyncio
import dataclasses
import json
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from moodscope import __version__
from moodscope.analysis.models import AnalysisResult, TimeRange
from moodscope.config import MoodscopeSettings, load_settings, normalise_time_range
from moodscope.loader import RecordLoadError

app = typer.Typer(
    name="moodscope",
    help="Emotion analytics over conversation records.",
    no_args_is_help=True,
)
console = Console(width=min(100, Console().width))

_TOP_AGGREGATIONS = 10


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"moodscope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Emotion analytics over conversation records."""


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def result_to_json(result: AnalysisResult) -> str:
    """Serialise a whole analysis result, nested views included."""
    return json.dumps(
        dataclasses.asdict(result), default=_json_default, ensure_ascii=False, indent=2
    )


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def _print_statistics(result: AnalysisResult) -> None:
    stats = result.statistics
    span = f"{result.date_range.start:%Y-%m-%d} → {result.date_range.end:%Y-%m-%d}"
    console.print(f"\n[bold]Emotion analysis[/bold]  [dim]{result.time_range.value}, {span}[/dim]\n")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Records", str(stats.total_records))
    table.add_row("Emotions detected", str(stats.total_emotions))
    table.add_row("Dominant emotion", stats.dominant_emotion)
    table.add_row("Average intensity", _pct(stats.average_intensity))
    table.add_row("Mood stability", _pct(stats.mood_stability))
    table.add_row("Positivity", _pct(stats.positivity_ratio))
    table.add_row("Diversity", _pct(stats.emotion_diversity))
    table.add_row("Trend", stats.recent_trend)
    table.add_row("Week over week", f"{stats.weekly_change:+.2f}")
    console.print(table)


def _print_aggregations(result: AnalysisResult) -> None:
    if not result.aggregations:
        console.print("\n[dim]No emotions in this range.[/dim]")
        return
    table = Table(title="Top emotions", title_justify="left")
    table.add_column("Emotion")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Avg intensity", justify="right")
    table.add_column("Trend")
    for agg in result.aggregations[:_TOP_AGGREGATIONS]:
        table.add_row(
            f"{agg.emoji} {agg.emotion} [dim]{agg.localized}[/dim]",
            str(agg.count),
            f"{agg.percentage:.1f}%",
            _pct(agg.average_intensity),
            agg.trend,
        )
    console.print()
    console.print(table)


def _print_connections(result: AnalysisResult) -> None:
    graph = result.knowledge_graph
    if not graph.statistics.strongest_connections:
        return
    labels = {node.id: node.label for node in graph.nodes}
    console.print("\n[bold]Strongest connections[/bold]")
    for conn in graph.statistics.strongest_connections:
        source = labels.get(conn.source, conn.source)
        target = labels.get(conn.target, conn.target)
        console.print(f"  {source} → {target}  [dim]{conn.weight:.2f}[/dim]")


def _print_suggestions(result: AnalysisResult) -> None:
    for insight in result.trends.insights:
        colour = {"positive": "green", "negative": "yellow"}.get(insight.kind, "dim")
        console.print(f"\n[{colour}]{insight.message}[/{colour}]")
    console.print("\n[bold]Suggestions[/bold]")
    for suggestion in result.suggestions:
        console.print(f"  • {suggestion}")
    console.print()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _run_analysis(
    settings: MoodscopeSettings,
    start: date | None,
    end: date | None,
) -> AnalysisResult:
    from moodscope.service import EmotionAnalysisService

    async with EmotionAnalysisService.from_settings(settings) as service:
        return await service.run_analysis(settings.default_time_range, start, end)


@app.command()
def analyze(
    records_file: Annotated[
        Path | None,
        typer.Argument(
            help="JSON file of emotion records (defaults to MOODSCOPE_RECORDS_PATH).",
            dir_okay=False,
        ),
    ] = None,
    time_range: Annotated[
        str | None,
        typer.Option("--range", "-r", help="week, month, quarter or year (or 7d, 30d, 90d, 365d)."),
    ] = None,
    start: Annotated[
        datetime | None,
        typer.Option("--start", formats=["%Y-%m-%d"], help="First day to include (overrides --range)."),
    ] = None,
    end: Annotated[
        datetime | None,
        typer.Option("--end", formats=["%Y-%m-%d"], help="Last day to include (default: today)."),
    ] = None,
    demo: Annotated[
        bool,
        typer.Option("--demo", help="Analyse generated mock records instead of a file."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the full result as JSON."),
    ] = False,
    log_dir: Annotated[
        Path | None,
        typer.Option("--log-dir", help="Write a rotating moodscope.log into this directory."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Analyse emotion records for a time range."""
    from moodscope.logging import reset_logging, setup_logging

    if time_range is not None:
        time_range = normalise_time_range(time_range)
        if time_range not in {tr.value for tr in TimeRange}:
            raise typer.BadParameter(
                f"unknown time range '{time_range}'", param_hint="--range"
            )

    settings = load_settings(
        records_path=records_file,
        data_source="demo" if demo else None,
        default_time_range=time_range,
    )
    setup_logging(log_dir=log_dir, verbose=verbose, file_level=settings.log_level)

    try:
        result = asyncio.run(
            _run_analysis(
                settings,
                start.date() if start is not None else None,
                end.date() if end is not None else None,
            )
        )
    except RecordLoadError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None
    finally:
        reset_logging()

    if as_json:
        typer.echo(result_to_json(result))
        return

    _print_statistics(result)
    _print_aggregations(result)
    _print_connections(result)
    _print_suggestions(result)


# British English alias for analyze
analyse = app.command(name="analyse", hidden=True)(analyze)


@app.command()
def demo(
    output: Annotated[
        Path,
        typer.Argument(help="Where to write the generated records (JSON).", dir_okay=False),
    ],
    days: Annotated[
        int,
        typer.Option("--days", "-d", min=1, help="Number of days to generate, ending today."),
    ] = 31,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed for reproducible output."),
    ] = None,
) -> None:
    """Write mock emotion records to a JSON file."""
    from moodscope.demo import generate_demo_records

    records = generate_demo_records(datetime.now(timezone.utc).date(), days, seed=seed)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    console.print(f"Wrote {len(records)} records to [bold]{output}[/bold]")
