"""CLI entry point for prompt-router.

Invoked as::

    prompt-router [OPTIONS] COMMAND [ARGS]...

or::

    python -m prompt_router COMMAND [ARGS]...

Commands
--------
- run      — Hook handler: read the payload on stdin, print the reply
- scan     — List the matchers discovered for this project and user
- check    — Load one matcher, run it on a test prompt, validate the result
- version  — Show detailed version information

The ``run`` command writes nothing but the reply JSON to stdout; logs go
to stderr.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

import prompt_router_filter as _filter

if TYPE_CHECKING:
    from prompt_router.config import RouterConfig

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("prompt_router")

_PROTOCOL_OPTION = click.option(
    "--protocol",
    "protocol",
    default=None,
    type=click.Choice(sorted(_filter.PROTOCOL_FILES)),
    help="Matcher protocol version (default: $PROMPT_ROUTER_PROTOCOL or the current one).",
)


def _configure_logging(level: str) -> None:
    """Send prompt_router logs to stderr through rich."""
    if any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.setLevel(level)
        return
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


def _load_config(protocol: str | None) -> RouterConfig:
    from prompt_router.config import ConfigError, load_config

    try:
        return load_config(protocol_version=protocol)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def _load_hook_config(protocol: str | None) -> RouterConfig:
    """Like ``_load_config``, but a bad setting never fails the hook."""
    from prompt_router.config import ConfigError, default_config, load_config

    try:
        return load_config(protocol_version=protocol)
    except ConfigError as exc:
        _configure_logging("WARNING")
        logger.warning("Ignoring configuration, using defaults: %s", exc)
        return default_config(protocol_version=protocol)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="prompt-router")
def cli() -> None:
    """Suggest relevant skills, agents, and commands for each prompt"""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from prompt_router import __version__
    from prompt_router.protocol import SchemaVersion

    console.print(f"[bold]prompt-router[/bold] v{__version__}")
    console.print(
        f"protocols: {', '.join(sorted(SchemaVersion.SUPPORTED))} "
        f"(current {SchemaVersion.CURRENT})"
    )


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command(name="run")
@_PROTOCOL_OPTION
def run_command(protocol: str | None) -> None:
    """Handle one UserPromptSubmit event.

    Reads the hook payload from stdin.  Matcher paths come from
    $MATCHER_PATHS when the fast filter set it; otherwise the search roots
    are scanned here.  Prints the reply JSON, or nothing when no matcher is
    relevant.
    """
    from prompt_router.context.payload import PayloadError
    from prompt_router.discovery.scanner import parse_path_list
    from prompt_router.pipeline import MatchPipeline

    config = _load_hook_config(protocol)
    _configure_logging(config.log_level)

    paths_env = os.environ.get(_filter.PATHS_ENV)
    matcher_paths = parse_path_list(paths_env) if paths_env is not None else None

    raw_payload = click.get_text_stream("stdin").read()
    pipeline = MatchPipeline(config)

    # stdout carries the reply alone; matcher output goes to stderr.
    reply_stream = sys.stdout
    with contextlib.redirect_stdout(sys.stderr):
        try:
            reply = pipeline.run_json(raw_payload, matcher_paths)
        except PayloadError as exc:
            logger.error("Invalid hook payload: %s", exc)
            sys.exit(1)

        if reply is not None:
            click.echo(reply.to_json(), file=reply_stream)


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------


@cli.command(name="scan")
@_PROTOCOL_OPTION
@click.option("--json", "json_output", is_flag=True, help="Output raw JSON.")
def scan_command(protocol: str | None, json_output: bool) -> None:
    """List the matchers that would run for a prompt."""
    from prompt_router.pipeline import MatchPipeline

    config = _load_config(protocol)
    _configure_logging(config.log_level)
    records = MatchPipeline(config).discover()

    if json_output:
        console.print_json(
            json.dumps([record.model_dump(mode="json") for record in records])
        )
        return

    if not records:
        console.print(
            f"[yellow]No protocol {config.protocol_version} matchers found.[/yellow]"
        )
        return

    table = Table(title=f"Matchers (protocol {config.protocol_version})")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Scope", style="green", no_wrap=True)
    table.add_column("Path", style="dim", overflow="fold")
    for record in records:
        scope = record.scope.value if record.scope else "-"
        table.add_row(record.kind.value, record.name, scope, str(record.path))
    console.print(table)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("matcher_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_PROTOCOL_OPTION
@click.option(
    "--prompt",
    default="test keywords build typescript compile check",
    show_default=True,
    help="Prompt text to evaluate the matcher against.",
)
def check_command(matcher_path: Path, protocol: str | None, prompt: str) -> None:
    """Load MATCHER_PATH, run it on a test prompt, and validate its result."""
    from prompt_router.context.builder import build_test_context
    from prompt_router.discovery.records import PluginKind, PluginRecord
    from prompt_router.discovery.scanner import record_for_path, search_roots
    from prompt_router.matching.executor import PluginExecutor
    from prompt_router.protocol import get_protocol

    config = _load_config(protocol)
    _configure_logging(config.log_level)
    active = get_protocol(config.protocol_version)

    roots = search_roots(config.project_dir, config.home_dir)
    record = record_for_path(matcher_path, roots, active) or PluginRecord(
        name=matcher_path.name.split(".")[0],
        path=matcher_path.absolute(),
        kind=PluginKind.CAPABILITY,
    )
    context = build_test_context(prompt, active.version)
    executor = PluginExecutor(timeout=config.plugin_timeout, concurrent=False)
    outcome = asyncio.run(executor.evaluate(record, context))

    if not outcome.ok:
        console.print(
            f"[red]✗ {record.label}[/red] ({outcome.status.value}) {escape(outcome.error)}"
        )
        sys.exit(1)

    console.print(f"[green]✓ {record.label}[/green] is a valid protocol {active.version} matcher")
    console.print_json(outcome.result.model_dump_json(by_alias=True))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
