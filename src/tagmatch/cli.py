"""Command-line interface for tagmatch.

Provides commands to evaluate expressions, check their syntax, and list
which configured rules apply to a set of tags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tagmatch import __version__

app = typer.Typer(
    name="tagmatch",
    help="Check whether a set of tags satisfies a boolean tag expression.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

EXIT_NO_MATCH = 1
EXIT_CONFIG_ERROR = 1
EXIT_SYNTAX_ERROR = 2

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file (default: ./tagmatch.yaml if present).",
    ),
]
TagsOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--tag",
        "-t",
        help="Active tag. Repeat or comma-separate for several. Defaults to configured tags.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]tagmatch[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """tagmatch - Gate work on contexts, labels and filters."""
    pass


def _load_settings(config_path: Path | None):
    """Load settings and configure logging, exiting on configuration errors."""
    from tagmatch.config import get_settings
    from tagmatch.logging import setup_logging

    try:
        settings = get_settings(config_path, reload=True)
    except (FileNotFoundError, ValidationError) as e:
        err_console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    setup_logging(settings.logging)
    return settings


@app.command()
def check(
    expression: Annotated[str, typer.Argument(help="Tag expression to evaluate.")],
    tags: TagsOption = None,
    config_path: ConfigOption = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Print nothing; report the result through the exit code only.",
        ),
    ] = False,
) -> None:
    """Evaluate EXPRESSION against the active tags.

    Exits 0 when the tags satisfy the expression and 1 when they do not.
    """
    from tagmatch.logging import get_logger
    from tagmatch.matcher import ExpressionSyntaxError, matches, parse_tags

    settings = _load_settings(config_path)
    log = get_logger("tagmatch.cli")

    active = parse_tags(tags) if tags else tuple(settings.tags)

    try:
        result = matches(expression, active)
    except ExpressionSyntaxError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_SYNTAX_ERROR)

    log.debug("Evaluated expression", expression=expression, tags=list(active), result=result)

    if not quiet:
        console.print("true" if result else "false")

    if not result:
        raise typer.Exit(EXIT_NO_MATCH)


@app.command()
def validate(
    expression: Annotated[str, typer.Argument(help="Tag expression to check.")],
) -> None:
    """Check EXPRESSION for unbalanced parentheses without evaluating it."""
    from tagmatch.matcher import ExpressionSyntaxError, check_syntax

    try:
        check_syntax(expression)
    except ExpressionSyntaxError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_SYNTAX_ERROR)

    console.print("[green]Expression is valid.[/green]")


@app.command("rules")
def list_rules(
    tags: TagsOption = None,
    config_path: ConfigOption = None,
    only_matching: Annotated[
        bool,
        typer.Option(
            "--matching",
            "-m",
            help="Only show rules that apply to the tags.",
        ),
    ] = False,
) -> None:
    """List configured rules and whether each applies to the active tags."""
    from tagmatch.matcher import parse_tags
    from tagmatch.rules import RuleSet

    settings = _load_settings(config_path)

    if not settings.rules:
        console.print("[yellow]No rules configured.[/yellow]")
        console.print("Add rules to your tagmatch.yaml file.")
        return

    active = parse_tags(tags) if tags else tuple(settings.tags)
    rule_set = RuleSet(settings.rules)
    results = rule_set.evaluate(active)
    if only_matching:
        results = [r for r in results if r.applies]

    title = f"Rules for tags: {escape(', '.join(active))}" if active else "Rules (no active tags)"
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Expression", style="green")
    table.add_column("Applies", style="yellow")
    table.add_column("Description", style="dim")

    for result in results:
        table.add_row(
            escape(result.rule.name),
            escape(result.rule.expression) or "[dim](empty)[/dim]",
            "Yes" if result.applies else "No",
            escape(result.rule.description or ""),
        )

    console.print(table)


if __name__ == "__main__":
    app()
