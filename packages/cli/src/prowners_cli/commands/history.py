"""history: display past assignment runs from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _require_store(ctx):
    from prowners_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError("No store configured. Add 'store: sqlite' to .prowners.yml.")
    return store


@click.command("history")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--pr", "pr_number", type=int, default=None, help="Filter by PR number.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.pass_context
def history_cmd(ctx, repo: str, pr_number: int | None, limit: int):
    """Show past reviewer assignment runs for a repository."""
    store = _require_store(ctx)

    records = store.list_assignments(repo, pr_number=pr_number)
    if not records:
        console.print("[yellow]No assignment records found.[/yellow]")
        return

    # Most recent first, capped at --limit.
    records = list(reversed(records))[:limit]

    table = Table(title=f"Assignment History: {repo}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Title", max_width=30)
    table.add_column("SHA", width=8)
    table.add_column("Added", max_width=30)
    table.add_column("Unresolved", max_width=20)
    table.add_column("Files", justify="right", width=6)
    table.add_column("Assigned At", width=20)

    for r in records:
        added = ", ".join(r.names_with("added") + r.names_with("planned"))
        table.add_row(
            f"#{r.pr_number}",
            r.pr_title[:30] if r.pr_title else "",
            r.head_sha[:7],
            "[red]aborted[/red]" if r.aborted else (f"[green]{added}[/green]" if added else "[dim]none[/dim]"),
            f"[yellow]{', '.join(r.unresolved)}[/yellow]" if r.unresolved else "",
            str(r.files_checked),
            r.assigned_at[:19].replace("T", " "),
        )

    console.print(table)
