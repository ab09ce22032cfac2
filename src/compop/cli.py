"""CLI entry point for compop."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from compop.config import load_config
from compop.scope import Scope, ScopeError
from compop.target import InvalidTargetError
from compop.types import OpType

console = Console(stderr=True)


def _parse_assignment(raw: str) -> tuple[str, Any]:
    name, sep, value = raw.partition("=")
    name = name.strip()
    if not sep or not name.isidentifier():
        raise click.BadParameter(f"expected NAME=JSON, got {raw!r}", param_hint="--set")
    try:
        return name, json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON for {name}: {e}", param_hint="--set")


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """Compound assignment operators as callables."""
    pass


@main.command("ops")
def list_ops() -> None:
    """List the available compound operators."""
    table = Table(title="Compound operators")
    table.add_column("Symbol")
    table.add_column("Operation")
    table.add_column("Infix spelling")

    for op in OpType:
        table.add_row(op.compound_symbol, op.value, op.infix_name)

    console.print(table)


@main.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option("--set", "assignments", multiple=True, metavar="NAME=JSON",
              help="Bind NAME to a JSON value before running.")
@click.option("--strict", is_flag=True, default=False,
              help="Only allow bare names as compound assignment targets.")
@click.option("--no-recycle", is_flag=True, default=False,
              help="Reject unequal-length sequence operands instead of recycling.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Verbose output.")
@click.option("--trace", "trace_path", type=click.Path(), default=None,
              help="Write rebinding trace JSON to PATH.")
def run(
    script: str,
    assignments: tuple[str, ...],
    strict: bool,
    no_recycle: bool,
    verbose: bool,
    trace_path: str | None,
) -> None:
    """Run a compound-assignment SCRIPT and print the final bindings as JSON."""
    config = load_config(
        allow_paths=False if strict else None,
        recycle=False if no_recycle else None,
        verbose=verbose or None,
    )
    if config.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    scope = Scope(dict(_parse_assignment(raw) for raw in assignments))
    source = Path(script).read_text()

    from compop.evaluator.script import ScriptError, ScriptEvaluator
    from compop.trace import TraceCollector

    trace_collector = TraceCollector(enabled=trace_path is not None)
    evaluator = ScriptEvaluator(config, trace_collector=trace_collector)

    start = time.monotonic()
    failed = False
    try:
        evaluator.run(source, scope)
    except (ScriptError, InvalidTargetError, ScopeError, ArithmeticError,
            LookupError, TypeError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        failed = True
    elapsed = time.monotonic() - start

    if trace_path is not None:
        trace = evaluator.get_trace()
        assert trace is not None
        trace_file = Path(trace_path)
        TraceCollector.write_trace(trace, trace_file)
        console.print(f"[dim]Trace written to {trace_file}[/dim]")

    if failed:
        raise SystemExit(1)

    click.echo(json.dumps(scope.snapshot(), indent=2))
    if config.verbose:
        console.print(f"[dim]Completed in {elapsed * 1000:.1f}ms[/dim]")
