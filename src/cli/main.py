"""CLI commands for ContriBuddy."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import contributions, recommend, skills, trending
from cli.logging_config import setup_logging
from cli.utils import get_config
from observability import log_run_summary


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, json_logs: bool):
    """ContriBuddy - find open-source projects that fit your skills."""
    config = get_config()
    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=json_logs or config.logging.json_mode, level=level)
    ctx.call_on_close(log_run_summary)


cli.add_command(skills)
cli.add_command(contributions)
cli.add_command(recommend)
cli.add_command(trending)


if __name__ == "__main__":
    cli()
