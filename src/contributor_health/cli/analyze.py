# src/contributor_health/cli/analyze.py

"""CLI command for running the contributor health analysis."""

import json
import os

import click
from rich.console import Console
from rich.table import Table

from ..config.settings import get_settings
from ..data.normalizer import ActivityNormalizer
from ..data.store import JsonFileStore
from ..engine.analyzer import HealthAnalyzer
from ..engine.metrics import DailyMetricsBuilder
from ..engine.trend import TrendAggregator
from ..utils.helpers import today_utc

console = Console()


def _load_json(path: str, default=None):
    if not os.path.exists(path):
        if default is not None:
            return default
        raise click.ClickException(f"Missing {path}; run `fetch` first.")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@click.command()
@click.option(
    "--data-dir",
    default="data",
    help="Directory containing the fetched raw JSON files (e.g., 'data/')",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
)
@click.option(
    "--store",
    "store_path",
    default="contributor_health.json",
    help="JSON file holding snapshots, daily metrics and insights.",
    type=click.Path(dir_okay=False),
)
@click.option(
    "--repository",
    default=None,
    help="Repository id (defaults to GITHUB_OWNER/GITHUB_REPO).",
)
def analyze_command(data_dir: str, store_path: str, repository: str | None):
    """Scores contributors, refreshes insights and daily metrics."""
    settings = get_settings()
    repository = repository or settings.repository_id
    if not repository:
        raise click.ClickException(
            "Pass --repository or set GITHUB_OWNER and GITHUB_REPO."
        )

    for required in ("prs_raw.json", "issues_raw.json"):
        if not os.path.exists(os.path.join(data_dir, required)):
            raise click.ClickException(f"Missing {required} in {data_dir}; run `fetch` first.")

    today = settings.analysis_date or today_utc()
    contributors = _load_json(os.path.join(data_dir, "contributors_raw.json"))
    profiles = _load_json(os.path.join(data_dir, "profiles_raw.json"), default={})

    normalizer = ActivityNormalizer.from_data_dir(
        data_dir,
        today=today,
        recent_window_days=settings.recent_window_days,
        historical_window_days=settings.historical_window_days,
    )
    inputs = normalizer.build_inputs(
        contributors, profiles, metrics_window_days=settings.metrics_window_days
    )

    store = JsonFileStore(store_path)
    analyzer = HealthAnalyzer(
        store,
        metrics_builder=DailyMetricsBuilder(window_days=settings.metrics_window_days),
        trend_aggregator=TrendAggregator(
            window_days=settings.metrics_window_days, seed=settings.synthetic_seed
        ),
        max_contributors=settings.max_contributors,
        recent_window_days=settings.recent_window_days,
    )

    with console.status("[bold green]Analyzing contributors..."):
        result = analyzer.analyze(repository, inputs, today=today)
        store.flush()

    table = Table(
        title=f"Contributor Health: {repository}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Measure", style="cyan", width=24)
    table.add_column("Value", style="green", width=12)
    table.add_row("Contributors analyzed", str(result.analyzed))
    table.add_row("Failed", str(len(result.failures)))
    table.add_row("Skipped (batch limit)", str(result.skipped))
    table.add_row("Active insights", str(len(result.insights)))
    table.add_row("Daily metrics", str(result.daily_metrics_written))
    table.add_row("Dominant country", result.dominant_country or "-")
    table.add_row(
        "Trend data", "synthetic" if result.trend and result.trend.synthetic else "real"
    )
    console.print(table)

    for failure in result.failures:
        console.print(
            f"[yellow]Skipped {failure.contributor_id} ({failure.stage}): "
            f"{failure.error}[/yellow]"
        )
    console.print(f"[green]Store saved to {store_path}[/green]")
