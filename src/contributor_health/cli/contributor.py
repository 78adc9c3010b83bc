# src/contributor_health/cli/contributor.py

"""CLI command for a single contributor's detailed report."""

import json
import os

import click
from rich.console import Console

from ..config.settings import get_settings
from ..data.store import JsonFileStore
from ..engine.final_reporter import ContributorReporter
from ..engine.reporter import TIME_RANGES

console = Console()


def _load_items(data_dir: str | None, filename: str) -> list:
    if not data_dir:
        return []
    path = os.path.join(data_dir, filename)
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@click.command()
@click.argument("login")
@click.option(
    "--store",
    "store_path",
    default="contributor_health.json",
    help="JSON store written by `analyze`.",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option(
    "--repository",
    default=None,
    help="Repository id (defaults to GITHUB_OWNER/GITHUB_REPO).",
)
@click.option(
    "--data-dir",
    default=None,
    help="Fetched data directory, used for PR and issue quality metrics.",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
)
@click.option(
    "--time-range",
    default="30d",
    type=click.Choice(sorted(TIME_RANGES)),
    help="Reporting window.",
)
@click.option(
    "--output",
    default=None,
    help="Path for the report JSON file (defaults to <login>_report.json).",
    type=click.Path(dir_okay=False),
)
def contributor_command(
    login: str,
    store_path: str,
    repository: str | None,
    data_dir: str | None,
    time_range: str,
    output: str | None,
):
    """Generates a detailed report for one contributor."""
    settings = get_settings()
    repository = repository or settings.repository_id
    if not repository:
        raise click.ClickException(
            "Pass --repository or set GITHUB_OWNER and GITHUB_REPO."
        )

    reporter = ContributorReporter(JsonFileStore(store_path))
    try:
        report = reporter.generate(
            repository,
            login,
            time_range,
            today=settings.analysis_date,
            prs=_load_items(data_dir, "prs_raw.json"),
            issues=_load_items(data_dir, "issues_raw.json"),
        )
    except LookupError as exc:
        raise click.ClickException(str(exc)) from exc

    output = output or f"{login}_report.json"
    with open(output, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)

    snapshot = report["contributor"]
    console.print(f"[green]Contributor report saved to {output}[/green]")
    console.print(
        f"[bold]{login}: retention {snapshot['retention_score']:.0f}, "
        f"engagement {snapshot['engagement_score']:.0f}, "
        f"burnout risk {snapshot['burnout_risk']:.0f}[/bold]"
    )
