"""Click CLI entry point for dict-client.

One-shot lookups against a DICT server: each invocation connects, runs
a single command, prints the result and disconnects.
"""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .client import DictClient
from .config import load_settings
from .display import (
    format_databases,
    format_definitions,
    format_matches,
    format_strategies,
)
from .errors import DictError
from .models import ALL_DATABASES, FIRST_MATCH

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.option("--host", default=None, help="DICT server host (default: $DICT_HOST or dict.org).")
@click.option("--port", default=None, type=int, help="DICT server port (default: 2628).")
@click.option("--timeout", default=None, type=float, help="Read timeout in seconds.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log protocol traffic to stderr.")
@click.version_option(version=__version__, prog_name="dict-client")
@click.pass_context
def cli(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Look up words on a DICT (RFC 2229) dictionary server."""
    try:
        settings = load_settings()
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    ctx.obj = DictClient(
        host if host is not None else settings.host,
        port if port is not None else settings.port,
        timeout=timeout if timeout is not None else settings.timeout_s,
        connect_timeout=settings.connect_timeout_s,
    )


@cli.command()
@click.pass_obj
def databases(client: DictClient) -> None:
    """List the databases the server offers."""
    result = _run(client, lambda c: c.list_databases())
    console.print(format_databases(result))


@cli.command()
@click.pass_obj
def strategies(client: DictClient) -> None:
    """List the matching strategies the server supports."""
    result = _run(client, lambda c: c.list_strategies())
    console.print(format_strategies(result))


@cli.command()
@click.argument("word")
@click.option("-s", "--strategy", default="prefix", show_default=True, help="Matching strategy name.")
@click.option(
    "-d",
    "--database",
    default=ALL_DATABASES.name,
    show_default=True,
    help=f"Database name; '{ALL_DATABASES.name}' searches all, '{FIRST_MATCH.name}' stops at the first hit.",
)
@click.pass_obj
def match(client: DictClient, word: str, strategy: str, database: str) -> None:
    """List words matching WORD."""
    words = _run(client, lambda c: c.match(word, strategy, database))
    if not words:
        console.print(f"[dim]No matches for {escape(repr(word))}.[/dim]")
        return
    console.print(format_matches(words))


@cli.command()
@click.argument("word")
@click.option(
    "-d",
    "--database",
    default=ALL_DATABASES.name,
    show_default=True,
    help=f"Database name; '{ALL_DATABASES.name}' searches all, '{FIRST_MATCH.name}' stops at the first hit.",
)
@click.pass_obj
def define(client: DictClient, word: str, database: str) -> None:
    """Print every definition of WORD."""
    definitions = _run(client, lambda c: c.define(word, database))
    if not definitions:
        console.print(f"[dim]No definitions for {escape(repr(word))}.[/dim]")
        return
    console.print(format_definitions(definitions))


def _run(client: DictClient, operation):
    """Connect, run one operation, always disconnect; exit 1 on failure."""
    try:
        with client:
            return operation(client)
    except DictError as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
