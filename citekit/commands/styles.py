"""Citation style commands for citekit."""

import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from ..exceptions import CitekitError
from ..styles import SUPPORTED_TARGETS, StyleCatalog, group_of
from .prompts import make_style_chooser

console = Console()


@click.command()
@click.option(
    "--format",
    "name_format",
    type=click.Choice(["long", "short"]),
    help="Style name format (default: from configuration)",
)
@click.option(
    "--target",
    "-t",
    "targets",
    multiple=True,
    type=click.Choice(SUPPORTED_TARGETS),
    help="Restrict to styles supported by an export target (repeatable)",
)
@click.pass_context
def styles(
    ctx: click.Context, name_format: Optional[str], targets: Tuple[str, ...]
) -> None:
    """List citation styles with example renderings."""
    core = ctx.obj["core"]
    config = core.config

    try:
        catalog = StyleCatalog(
            name_format=name_format or config.styles_format,
            targets=list(targets) or config.style_targets,
            previews=config.style_previews,
        )
        candidates = catalog.candidates()
    except CitekitError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    table = Table(title=f"Citation Styles ({len(candidates)})")
    table.add_column("Group", style="bold")
    table.add_column("Style", style="cyan")
    table.add_column("Preview", style="green")

    for candidate, preview in sorted(
        candidates, key=lambda item: group_of(item[0]).value
    ):
        table.add_row(group_of(candidate).value, candidate, preview)

    console.print(table)


@click.command("select-style")
@click.pass_context
def select_style(ctx: click.Context) -> None:
    """Choose a citation style interactively and print it."""
    processor = ctx.obj["core"].processor

    try:
        style = processor.select_style(make_style_chooser(console))
    except (CitekitError, click.BadParameter) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if style is None:
        console.print("[dim]Default style selected[/dim]")
    else:
        click.echo(style)
