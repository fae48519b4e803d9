"""Terminal prompts used as the selection and completion UI."""

import logging
from itertools import groupby
from typing import Callable, List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..document.model import DocumentPort
from ..extension import CitekitCore
from ..references.bibtex_manager import BibEntry

logger = logging.getLogger(__name__)


def _authors(entry: BibEntry) -> str:
    if not entry.authors:
        return "Unknown"
    authors = ", ".join(entry.authors[:2])
    if len(entry.authors) > 2:
        authors += " et al."
    return authors


def entry_table(entries: List[BibEntry], numbered: bool = False) -> Table:
    table = Table()
    if numbered:
        table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Authors")
    table.add_column("Year", justify="right")
    table.add_column("Title")
    for number, entry in enumerate(entries, 1):
        title = entry.title[:60] + "..." if len(entry.title) > 60 else entry.title
        row = [entry.key, _authors(entry), entry.year or "n.d.", title]
        table.add_row(*([str(number)] + row if numbered else row))
    return table


def entry_panel(entry: BibEntry) -> Panel:
    lines = [f"[bold]{entry.title or 'Untitled'}[/bold]", _authors(entry)]
    if entry.journal:
        lines.append(f"{entry.journal} {entry.volume}".strip())
    lines.append(entry.year or "n.d.")
    for link in entry.links:
        lines.append(f"[blue]{link}[/blue]")
    if entry.source_file:
        lines.append(f"[dim]{entry.source_file}[/dim]")
    return Panel("\n".join(lines), title=f"@{entry.key} ({entry.entry_type})")


def _resolve_choices(answer: str, options: List[str]) -> List[str]:
    chosen = []
    for token in answer.replace(",", " ").split():
        token = token.lstrip("@")
        if token.isdigit() and 1 <= int(token) <= len(options):
            chosen.append(options[int(token) - 1])
        elif token in options:
            chosen.append(token)
        else:
            raise click.BadParameter(f"Unknown choice: {token}")
    return chosen


class PromptSelector:
    """Reference selection in the terminal."""

    def __init__(self, core: CitekitCore, console: Console, document: Optional[DocumentPort] = None):
        self.core = core
        self.console = console
        self.document = document
        self.entries: List[BibEntry] = []

    def refresh_index(self) -> None:
        bibliography = self.core.refresh(self.document)
        self.entries = sorted(bibliography.entries.values(), key=lambda e: e.key.lower())
        logger.debug(f"{len(self.entries)} entries available for selection")

    def select_references(self) -> List[str]:
        if not self.entries:
            self.console.print("[yellow]No bibliography entries found[/yellow]")
            return []
        self.console.print(entry_table(self.entries, numbered=True))
        answer = click.prompt(
            "References (numbers or keys, separated by spaces)",
            default="",
            show_default=False,
        )
        return _resolve_choices(answer, [entry.key for entry in self.entries])


def make_style_chooser(console: Console) -> Callable:
    """Completion prompt: candidates grouped under headings, with previews."""

    def choose(
        candidates: List[str],
        annotate: Callable[[str], str],
        group: Callable[[str, bool], str],
    ) -> Optional[str]:
        table = Table(show_header=False, box=None)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Style", style="cyan")
        table.add_column("Preview", style="green")

        ordered = sorted(candidates, key=lambda c: group(c, False))
        numbered = []
        for heading, members in groupby(ordered, key=lambda c: group(c, False)):
            table.add_row("", f"[bold]{heading}[/bold]", "")
            for candidate in members:
                numbered.append(candidate)
                table.add_row(str(len(numbered)), group(candidate, True), annotate(candidate))
        console.print(table)

        answer = click.prompt("Style", default="", show_default=False)
        if not answer.strip():
            return None
        if answer.strip() in candidates:
            return answer.strip()
        return _resolve_choices(answer, numbered)[0]

    return choose
