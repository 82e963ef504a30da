"""CLI for valuelens - all commands in one module.

Provides developer commands for poking at the engine: simplify, parse,
classify, rank, detect, languages.

valuelens/src/valuelens/cli.py
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from valuelens.classifier import assess_variable, rank_variables, signal_variables
from valuelens.config import Config, load_config
from valuelens.console_utils import console
from valuelens.detection import detect_language
from valuelens.handlers.base import BaseLanguageHandler
from valuelens.handlers.registry import UnsupportedLanguageError, handler_registry
from valuelens.models import SimplifiedValue
from valuelens.simplifier import ValueSimplifier

logger = logging.getLogger(__name__)


@dataclass
class ValuelensContext:
    """Shared context for CLI commands."""

    project_root: Path | None = None
    config: Config = field(default_factory=lambda: Config(None, {}))
    verbose: bool = False


def _handler_for(ctx: click.Context, language: str | None) -> BaseLanguageHandler:
    valuelens_ctx: ValuelensContext = ctx.obj
    tag = language or valuelens_ctx.config.default_language
    try:
        return handler_registry.require_handler(tag)
    except UnsupportedLanguageError as e:
        raise click.BadParameter(str(e), param_hint="'--language'") from e


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def _tree_label(key: str, node: SimplifiedValue) -> str:
    label = f"[bold]{escape(key)}[/bold]"
    if node.original_type:
        label += f" [dim]({escape(node.original_type)})[/dim]"
    label += f": {escape(node.display_value)}"
    if node.metadata.is_pointer and node.metadata.memory_address:
        label += f" [cyan]@{escape(node.metadata.memory_address)}[/cyan]"
    if node.has_more:
        label += " [yellow]...[/yellow]"
    return label


def _add_children(tree: Tree, node: SimplifiedValue) -> None:
    for key, child in (node.children or {}).items():
        branch = tree.add(_tree_label(key, child))
        _add_children(branch, child)


language_option = click.option(
    "--language", "-l", help="Language or debug adapter (go, cpp, python, java, javascript, dlv, ...)"
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """valuelens: normalize raw debugger values into bounded trees."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    config = load_config(Path.cwd())
    ctx.obj = ValuelensContext(
        project_root=config.project_root,
        config=config,
        verbose=verbose,
    )


@cli.command("simplify")
@click.argument("raw_value")
@language_option
@click.option("--type", "-t", "type_name", default="", help="Declared type (inferred when omitted)")
@click.option("--name", "-n", default="", help="Variable name used for type inference")
@click.option("--max-depth", type=int, help="Override max_depth")
@click.option("--max-array-length", type=int, help="Override max_array_length")
@click.option("--max-object-keys", type=int, help="Override max_object_keys")
@click.option("--max-string-length", type=int, help="Override max_string_length")
@click.option(
    "--show-addresses/--hide-addresses", default=None, help="Show pointer addresses in output"
)
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["tree", "json"]), default="tree",
    help="Output format",
)
@click.pass_context
def simplify(
    ctx: click.Context,
    raw_value: str,
    language: str | None,
    type_name: str,
    name: str,
    max_depth: int | None,
    max_array_length: int | None,
    max_object_keys: int | None,
    max_string_length: int | None,
    show_addresses: bool | None,
    output_format: str,
) -> None:
    """Simplify RAW_VALUE into a bounded tree."""
    handler = _handler_for(ctx, language)
    valuelens_ctx: ValuelensContext = ctx.obj

    overrides = {
        key: value
        for key, value in (
            ("max_depth", max_depth),
            ("max_array_length", max_array_length),
            ("max_object_keys", max_object_keys),
            ("max_string_length", max_string_length),
            ("show_pointer_addresses", show_addresses),
        )
        if value is not None
    }
    options = handler_registry.resolve_options(handler.variant, overrides, valuelens_ctx.config)
    node = ValueSimplifier(handler, options).simplify_value(raw_value, type_name, name)

    if output_format == "json":
        _echo_json(node.to_dict())
        return

    tree = Tree(_tree_label(name or "value", node))
    _add_children(tree, node)
    console.print(tree)


@cli.command("parse")
@click.argument("raw_value")
@language_option
@click.option("--type", "-t", "type_name", default="", help="Declared type")
@click.pass_context
def parse(ctx: click.Context, raw_value: str, language: str | None, type_name: str) -> None:
    """Show how a handler parses RAW_VALUE."""
    handler = _handler_for(ctx, language)
    _echo_json(handler.parse_variable_value(raw_value, type_name).to_dict())


@cli.command("classify")
@click.argument("name")
@click.argument("value")
@language_option
@click.pass_context
def classify(ctx: click.Context, name: str, value: str, language: str | None) -> None:
    """Classify one variable and show its importance score."""
    handler = _handler_for(ctx, language)
    assessment = assess_variable(handler, name, value)

    table = Table(title=f"{escape(name)} ({handler.variant})")
    table.add_column("Property")
    table.add_column("Value")
    table.add_row("type", escape(assessment.inferred_type))
    table.add_row("importance", str(assessment.importance))
    table.add_row("system", str(assessment.is_system))
    table.add_row("application relevant", str(assessment.is_application_relevant))
    table.add_row("control flow", str(assessment.is_control_flow))
    console.print(table)


@cli.command("rank")
@click.argument("variables", nargs=-1, required=True)
@language_option
@click.option("--signal-only", is_flag=True, help="Only show application-relevant and control-flow variables")
@click.pass_context
def rank(ctx: click.Context, variables: tuple[str, ...], language: str | None, signal_only: bool) -> None:
    """Rank NAME=VALUE pairs by importance."""
    handler = _handler_for(ctx, language)

    pairs = []
    for item in variables:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got '{item}'", param_hint="VARIABLES")
        pairs.append((name, value))

    table = Table(title=f"Variables ({handler.variant})")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Importance", justify="right")
    ranked = signal_variables(handler, pairs) if signal_only else rank_variables(handler, pairs)
    for assessment in ranked:
        table.add_row(
            escape(assessment.name), escape(assessment.inferred_type), str(assessment.importance)
        )
    console.print(table)


@cli.command("detect")
@click.option("--debugger-type", help="Debug adapter type, e.g. dlv or debugpy")
@click.option("--program", type=click.Path(path_type=Path), help="Program being debugged")
@click.option(
    "--workspace", type=click.Path(file_okay=False, path_type=Path), help="Workspace root"
)
@click.pass_context
def detect(
    ctx: click.Context, debugger_type: str | None, program: Path | None, workspace: Path | None
) -> None:
    """Detect the language of a debug session."""
    variant = detect_language(debugger_type, program, workspace)
    if variant is None:
        console.print("[yellow]No language detected[/yellow]")
        ctx.exit(1)
    click.echo(variant.value)


@cli.command("languages")
def languages() -> None:
    """List registered languages and their default options."""
    table = Table(title="Languages")
    table.add_column("Language")
    table.add_column("Handler")
    table.add_column("Depth", justify="right")
    table.add_column("Array", justify="right")
    table.add_column("Keys", justify="right")
    table.add_column("String", justify="right")
    table.add_column("Addresses")

    for tag, handler_class in handler_registry.get_all_handlers().items():
        options = handler_class().get_default_config()
        table.add_row(
            tag,
            handler_class.__name__,
            str(options.max_depth),
            str(options.max_array_length),
            str(options.max_object_keys),
            str(options.max_string_length),
            "shown" if options.show_pointer_addresses else "hidden",
        )
    console.print(table)


def main() -> None:
    """Entry point for valuelens CLI."""
    try:
        cli(obj=ValuelensContext(), prog_name="valuelens")
    except SystemExit as e:
        sys.exit(e.code)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        logger.error("CLI error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
