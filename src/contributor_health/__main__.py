"""Main entry point for the contributor-health CLI."""

import click
from rich.console import Console

from .cli.analyze import analyze_command
from .cli.contributor import contributor_command
from .cli.fetch import fetch_command
from .cli.report import report_command
from .config.settings import get_settings
from .utils.helpers import configure_logging

console = Console()


@click.group()
@click.version_option(package_name="contributor-health")
@click.option("--log-level", default=None, help="Override the LOG_LEVEL setting.")
def main(log_level):
    """Contributor Health Analyzer - Score and track repository contributors."""
    configure_logging(log_level or get_settings().log_level)


main.add_command(fetch_command, name="fetch")
main.add_command(analyze_command, name="analyze")
main.add_command(report_command, name="report")
main.add_command(contributor_command, name="contributor")


if __name__ == "__main__":
    main()
