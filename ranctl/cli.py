"""ranctl CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import DebugHeaderArgs, RenderArgs, WatchArgs
from .commands import cmd_debug_header, cmd_render, cmd_watch
from .constants import DEFAULT_POLL_INTERVAL_S, STDIN_PATH
from .exceptions import RanCtlError, UserError
from .utils import expand_escapes

# Module logger
logger = logging.getLogger("ranctl")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


def _expand_format(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    return expand_escapes(value) if value is not None else None


def format_option(func):
    """Decorator adding the --format option."""
    return click.option(
        "--format",
        "-f",
        "fmt",
        required=True,
        callback=_expand_format,
        help=r"Output template, e.g. 'table{{.ID}}\t{{.Status}}' (\t and \n are expanded).",
    )(func)


def match_option(func):
    """Decorator adding the repeatable --match option."""
    return click.option(
        "--match",
        "match",
        multiple=True,
        metavar="PATH=VALUE",
        help="Only show records whose field equals VALUE, e.g. 'Status.State=UP' (repeatable).",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("ranctl"), prog_name="ranctl")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """ranctl: render RAN controller records as tables or free-form text."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    setup_logging(debug=debug)


@cli.command("render")
@click.argument("path", metavar="[FILE]", default=STDIN_PATH)
@format_option
@click.option(
    "--no-headers",
    is_flag=True,
    help="Disable output headers.",
)
@click.option(
    "--name-limit",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Keep only the last N field path segments in column names (0 = full path).",
)
@match_option
def render(path: str, fmt: str, no_headers: bool, name_limit: int, match: tuple[str, ...]):
    """Render records from a JSON or JSONL file (default: stdin)."""
    args = RenderArgs(
        path=path,
        format=fmt,
        no_headers=no_headers,
        name_limit=name_limit,
        match=list(match),
    )
    cmd_render(args)


@cli.command("watch")
@click.argument("path", metavar="FILE")
@format_option
@click.option(
    "--widths",
    required=True,
    metavar="JSON|@FILE",
    help='Column widths mirroring the record fields, e.g. \'{"ID": 8, "Status": 10}\'.',
)
@click.option(
    "--no-headers",
    is_flag=True,
    help="Disable output headers.",
)
@click.option(
    "--no-replay",
    "-r",
    is_flag=True,
    help="Do not replay existing records; start at the end of the file.",
)
@click.option(
    "--once",
    is_flag=True,
    help="Render the records currently in the file and exit (no follow).",
)
@match_option
@click.option(
    "--poll-interval",
    type=click.FloatRange(min=0.01),
    default=DEFAULT_POLL_INTERVAL_S,
    show_default=True,
    help="Seconds between checks for new records.",
)
def watch(
    path: str,
    fmt: str,
    widths: str,
    no_headers: bool,
    no_replay: bool,
    once: bool,
    match: tuple[str, ...],
    poll_interval: float,
):
    """Follow a JSONL event file, printing one fixed-width row per record."""
    args = WatchArgs(
        path=path,
        format=fmt,
        widths=widths,
        no_headers=no_headers,
        no_replay=no_replay,
        once=once,
        match=list(match),
        poll_interval=poll_interval,
    )
    cmd_watch(args)


@cli.command("debug-header")
@format_option
@click.option(
    "--name-limit",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Keep only the last N field path segments in column names (0 = full path).",
)
def debug_header(fmt: str, name_limit: int):
    """Print the header line synthesized from a format template."""
    cmd_debug_header(DebugHeaderArgs(format=fmt, name_limit=name_limit))


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except RanCtlError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
