"""Command-line interface for citekit."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from .commands.citations import act, actions, delete, follow, insert, keys, kill, shift, update_affixes
from .commands.prompts import entry_panel
from .commands.styles import select_style, styles
from .config import CitekitConfig, find_project_root
from .exceptions import ConfigError
from .extension import CitekitCore, ExtensionHost, register_extension

# Setup rich console and logging
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project root directory (auto-detected if not specified)",
)
@click.pass_context
def main(
    ctx: click.Context, verbose: bool, project_root: Optional[Path]
) -> None:
    """citekit - org-cite citation processor backed by BibTeX bibliographies."""
    setup_logging(verbose)

    # Find or set project root
    if not project_root:
        project_root = find_project_root(Path.cwd())
        if not project_root:
            project_root = Path.cwd()

    try:
        config = CitekitConfig.load(project_root)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    core = CitekitCore.from_config(
        config, show_entry=lambda entry: console.print(entry_panel(entry))
    )
    host = ExtensionHost()
    register_extension(host, core)

    ctx.ensure_object(dict)
    ctx.obj["project_root"] = project_root
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    ctx.obj["core"] = core
    ctx.obj["host"] = host

    if verbose:
        console.print(f"[dim]Using project root: {project_root}[/dim]")


# Style commands
main.add_command(styles)
main.add_command(select_style)

# Citation commands
main.add_command(insert)
main.add_command(follow)
main.add_command(delete)
main.add_command(kill)
main.add_command(shift)
main.add_command(update_affixes)

# Bibliography and actions
main.add_command(keys)
main.add_command(actions)
main.add_command(act)


if __name__ == "__main__":
    main()
