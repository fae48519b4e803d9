"""Citation editing commands for citekit.

Document commands read an org file, place the cursor with ``--point`` (a
character offset) or ``--at`` (the first reference to a key), run one
processor command and write the file back unless ``--dry-run`` is given.
"""

import sys
from pathlib import Path
from typing import Callable, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from ..actions import reference_target
from ..document.org_buffer import OrgCiteBuffer
from ..exceptions import CitekitError, TargetNotFoundError
from ..references.resources import ResourceOpener
from .prompts import PromptSelector, entry_table

console = Console()


def document_options(func: Callable) -> Callable:
    """Shared FILE argument and cursor placement options."""
    func = click.option(
        "--at", "at_key", help="Place the cursor on the first reference to KEY"
    )(func)
    func = click.option("--point", "-p", type=int, help="Cursor offset in the file")(func)
    return click.argument(
        "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
    )(func)


def open_document(file: Path, point: Optional[int], at_key: Optional[str]) -> OrgCiteBuffer:
    document = OrgCiteBuffer.from_file(file)
    if at_key:
        offset = document.find_key(at_key.lstrip("@"))
        if offset is None:
            raise TargetNotFoundError(f"No reference to '{at_key}' in {file.name}")
        document.move_cursor(offset)
    elif point is not None:
        document.move_cursor(point)
    return document


def finish(document: OrgCiteBuffer, dry_run: bool) -> None:
    if dry_run:
        console.print("[dim]Dry run, file not modified. Result:[/dim]")
        click.echo(document.text)
    else:
        document.save()
        console.print(f"[green]Updated {document.path.name}[/green]")


def run_command(ctx: click.Context, label: str, func: Callable, *args):
    """Run a processor command, reporting errors the citekit way."""
    try:
        return func(*args)
    except CitekitError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]{label} failed: {e}[/red]")
        if ctx.obj["verbose"]:
            console.print_exception()
        sys.exit(1)


@click.command()
@document_options
@click.argument("keys", nargs=-1)
@click.option("--style", "-s", help="Citation style for a new citation")
@click.option("--dry-run", is_flag=True, help="Show the result without modifying the file")
@click.pass_context
def insert(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    keys: Tuple[str, ...],
    style: Optional[str],
    dry_run: bool,
) -> None:
    """Insert a citation, or add KEYS to the citation at the cursor.

    Without KEYS the bibliography is listed and references are chosen
    interactively.

    Example:
        citekit insert paper.org smith2020 jones2021 --point 120
        citekit insert paper.org doe2019 --at smith2020
    """
    core = ctx.obj["core"]
    processor = core.processor

    def _insert():
        document = open_document(file, point, at_key)
        if not keys:
            processor.selector = PromptSelector(core, console, document)
        added = processor.insert(document, [k.lstrip("@") for k in keys] or None, style)
        if not added:
            console.print("[yellow]Nothing inserted[/yellow]")
            return
        console.print(f"[cyan]Cited:[/cyan] {', '.join(added)}")
        finish(document, dry_run)

    run_command(ctx, "Insert", _insert)


@click.command()
@document_options
@click.option(
    "--action",
    "-a",
    type=click.Choice(ResourceOpener.ACTIONS),
    default="dwim",
    show_default=True,
    help="What to open for the keys at the cursor",
)
@click.pass_context
def follow(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    action: str,
) -> None:
    """Open resources for the citation or reference at the cursor."""
    core = ctx.obj["core"]

    def _follow():
        document = open_document(file, point, at_key)
        opened = core.processor.follow(document, core.opener(document), action)
        if not opened:
            console.print("[yellow]Nothing to open[/yellow]")

    run_command(ctx, "Follow", _follow)


@click.command()
@document_options
@click.option("--dry-run", is_flag=True, help="Show the result without modifying the file")
@click.pass_context
def delete(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    dry_run: bool,
) -> None:
    """Delete the reference at the cursor, or the whole citation."""

    def _delete():
        document = open_document(file, point, at_key)
        removed = ctx.obj["core"].processor.delete_citation(document)
        console.print(f"[cyan]Deleted:[/cyan] {removed}")
        finish(document, dry_run)

    run_command(ctx, "Delete", _delete)


@click.command()
@document_options
@click.option("--dry-run", is_flag=True, help="Show the result without modifying the file")
@click.pass_context
def kill(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    dry_run: bool,
) -> None:
    """Remove the citation at the cursor and print its text."""

    def _kill():
        document = open_document(file, point, at_key)
        killed = ctx.obj["core"].processor.kill_citation(document)
        click.echo(killed)
        finish(document, dry_run)

    run_command(ctx, "Kill", _kill)


@click.command()
@document_options
@click.option(
    "--direction",
    "-d",
    type=click.Choice(["left", "right"]),
    required=True,
    help="Where to move the reference",
)
@click.option("--dry-run", is_flag=True, help="Show the result without modifying the file")
@click.pass_context
def shift(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    direction: str,
    dry_run: bool,
) -> None:
    """Swap the reference at the cursor with its neighbour.

    Example:
        citekit shift paper.org --at jones2021 --direction left
    """

    def _shift():
        document = open_document(file, point, at_key)
        index = ctx.obj["core"].processor.shift_reference(document, direction)
        console.print(f"[cyan]Reference moved to position {index + 1}[/cyan]")
        finish(document, dry_run)

    run_command(ctx, "Shift", _shift)


@click.command("update-affixes")
@document_options
@click.option("--prefix", default="", help="Text before the key")
@click.option("--suffix", default="", help="Text after the key, such as a locator")
@click.option("--dry-run", is_flag=True, help="Show the result without modifying the file")
@click.pass_context
def update_affixes(
    ctx: click.Context,
    file: Path,
    point: Optional[int],
    at_key: Optional[str],
    prefix: str,
    suffix: str,
    dry_run: bool,
) -> None:
    """Set the prefix and suffix of the reference at the cursor."""

    def _update():
        document = open_document(file, point, at_key)
        ctx.obj["core"].processor.update_affixes(document, prefix, suffix)
        finish(document, dry_run)

    run_command(ctx, "Update", _update)


@click.command()
@click.argument(
    "file", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def keys(ctx: click.Context, file: Optional[Path]) -> None:
    """List bibliography entries, including those named by FILE."""
    core = ctx.obj["core"]

    def _keys():
        document = OrgCiteBuffer.from_file(file) if file else None
        bibliography = core.refresh(document)
        if not bibliography.entries:
            console.print("[yellow]No bibliography entries found[/yellow]")
            console.print("[dim]Add #+bibliography: to the document or configure citekit.yaml[/dim]")
            return
        entries = sorted(bibliography.entries.values(), key=lambda e: e.key.lower())
        console.print(entry_table(entries))

    run_command(ctx, "Listing", _keys)


@click.command()
@click.pass_context
def actions(ctx: click.Context) -> None:
    """Show the key bindings of every target kind."""
    host = ctx.obj["host"]

    for kind in host.actions.kinds:
        table = Table(title=kind)
        table.add_column("Key", style="bold")
        table.add_column("Action", style="cyan")
        table.add_column("Description")
        for key, action in host.actions.keymap(kind).items():
            table.add_row(key, action.name, action.description)
        console.print(table)


@click.command()
@click.argument("binding")
@click.argument(
    "file", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--point", "-p", type=int, help="Cursor offset in the file")
@click.option("--at", "at_key", help="Place the cursor on the first reference to KEY")
@click.option("--key", "-k", "entry_key", help="Act on a bibliography key instead of a document")
@click.option("--prefix", default="", help="Prefix for update-affixes")
@click.option("--suffix", default="", help="Suffix for update-affixes")
@click.pass_context
def act(
    ctx: click.Context,
    binding: str,
    file: Optional[Path],
    point: Optional[int],
    at_key: Optional[str],
    entry_key: Optional[str],
    prefix: str,
    suffix: str,
) -> None:
    """Run the action bound to BINDING on the thing at the cursor.

    Example:
        citekit act "S-<left>" paper.org --at jones2021
        citekit act l --key smith2020
    """
    host = ctx.obj["host"]

    def _act():
        if entry_key:
            target = reference_target(entry_key)
            document, original = None, None
        else:
            if file is None:
                raise click.UsageError("Give a FILE or --key")
            document = open_document(file, point, at_key)
            original = document.text
            target = host.find_target(document)
            if target is None:
                raise TargetNotFoundError("Not on a citation")
        target.options.update(prefix=prefix, suffix=suffix)

        host.act(target, binding)
        if document is not None and document.text != original:
            finish(document, dry_run=False)

    run_command(ctx, "Action", _act)
