"""CLI command for fetching data from GitHub."""

from datetime import datetime, timedelta, timezone

import click
from rich.console import Console

from ..data.fetcher import GitHubDataFetcher
from ..config.settings import get_settings

console = Console()


@click.command()
@click.option(
    "--output-dir",
    default="data",
    help="Directory to save the fetched data",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
)
def fetch_command(output_dir):
    """Fetch contributors, profiles, issues and PRs from GitHub."""
    settings = get_settings()
    if not (settings.github_token and settings.github_owner and settings.github_repo):
        raise click.ClickException(
            "GITHUB_TOKEN, GITHUB_OWNER and GITHUB_REPO must be set to fetch data."
        )

    # Enough history for both the recent and the historical window
    lookback = settings.recent_window_days + settings.historical_window_days
    start_date = datetime.now(timezone.utc) - timedelta(days=lookback)

    fetcher = GitHubDataFetcher(
        token=settings.github_token,
        owner=settings.github_owner,
        repo=settings.github_repo,
        start_date=start_date,
        output_dir=output_dir,
    )

    with console.status("[bold green]Fetching data from GitHub..."):
        counts = fetcher.fetch_all(max_contributors=settings.max_contributors)

    console.print(
        f"[green]Saved {counts['contributors']} contributors "
        f"({counts['profiles']} profiles), {counts['prs']} PRs and "
        f"{counts['issues']} issues.[/green]"
    )
