"""Command line interface for GameQA."""

import asyncio
import logging
import sys
from typing import Optional

import click

from . import __version__, default_language_model, run
from .config import settings
from .utils.errors import GameQAError
from .utils.helpers import is_valid_url

# Exit codes
EXIT_PASS = 0
EXIT_NOT_PASSED = 1
EXIT_USAGE = 2


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr so stdout carries only the report."""
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.command(help="Run an automated playability test against a browser game.")
@click.version_option(version=__version__, package_name="gameqa")
@click.argument("game_url")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for screenshots, logs and reports (default: OUTPUT_DIR).",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Session timeout in seconds (default: DEFAULT_TIMEOUT).",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def main(game_url: str, output_dir: Optional[str], timeout: Optional[float], verbose: bool) -> None:
    configure_logging(verbose)

    if not is_valid_url(game_url):
        click.echo(f"Error: invalid game URL: {game_url}", err=True)
        sys.exit(EXIT_USAGE)

    options = {"verbose": verbose}
    if output_dir:
        options["output_dir"] = output_dir
    if timeout is not None:
        options["timeout"] = timeout

    try:
        result = asyncio.run(run(game_url, options, llm=default_language_model()))
    except GameQAError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(EXIT_USAGE)

    click.echo(result.to_json())
    sys.exit(EXIT_PASS if result.status == "pass" else EXIT_NOT_PASSED)


if __name__ == "__main__":
    main()
