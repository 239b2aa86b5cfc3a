"""owners: print the declared owners of paths at a revision."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prowners_core.errors import QueryExecutionError, SnapshotCreationError
from prowners_core.git.attributes import AttributeQueryClient
from prowners_core.git.command import GitRepository
from prowners_core.git.snapshot import SnapshotManager

console = Console()


@click.command("owners")
@click.argument("paths", nargs=-1, required=True)
@click.option("--rev", default="HEAD", show_default=True, help="Revision whose .gitattributes are used.")
@click.option("--git-dir", default=None, help="Local clone to query. Overrides config file.")
@click.pass_context
def owners_cmd(ctx, paths: tuple[str, ...], rev: str, git_dir: str | None):
    """Show who owns PATHS at a revision.

    Useful for checking .gitattributes changes before they land: no GitHub
    access is needed and the working tree and index are left untouched.
    """
    config = ctx.obj["config"] if ctx.obj else {}
    repository = GitRepository(git_dir or config.get("git_dir", "."), timeout=config.get("git_timeout"))
    attributes = AttributeQueryClient(attribute=config.get("attribute", "owners"))

    table = Table(title=f"Owners at {rev}", show_header=True, header_style="bold cyan")
    table.add_column("Path")
    table.add_column("Owners")

    failed = False
    try:
        with SnapshotManager().snapshot(repository, rev) as snapshot:
            for path in paths:
                try:
                    owners = attributes.owners_for(snapshot, path)
                except QueryExecutionError as e:
                    failed = True
                    table.add_row(path, f"[red]{e}[/red]")
                    continue
                table.add_row(path, ", ".join(owners) if owners else "[dim]none[/dim]")
    except SnapshotCreationError as e:
        raise click.ClickException(str(e))

    console.print(table)
    if failed:
        ctx.exit(1)
