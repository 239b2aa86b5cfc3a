"""stats: aggregate patterns across assignment history."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from prowners_cli.commands.history import _require_store

console = Console()


@click.command("stats")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--top", default=10, show_default=True, help="Number of top entries to show per category.")
@click.pass_context
def stats_cmd(ctx, repo: str, top: int):
    """Show aggregated assignment statistics for a repository.

    Reports who is asked to review most often, which helps spot overloaded
    owners, and which owner tokens keep failing to resolve, which usually
    means stale .gitattributes entries.
    """
    store = _require_store(ctx)

    records = store.list_assignments(repo)
    if not records:
        console.print("[yellow]No assignment records found for this repository.[/yellow]")
        return

    outcome_counter: Counter[str] = Counter()
    reviewer_counter: Counter[str] = Counter()
    unresolved_counter: Counter[str] = Counter()

    for record in records:
        for reviewer in record.reviewers:
            outcome_counter[reviewer.outcome] += 1
            if reviewer.outcome == "added":
                reviewer_counter[reviewer.name] += 1
        unresolved_counter.update(record.unresolved)

    aborted = sum(1 for r in records if r.aborted)

    console.print(f"\n[bold]Assignment stats for [cyan]{repo}[/cyan][/bold]")
    console.print(f"  Total runs:       {len(records)}")
    console.print(f"  Aborted runs:     {aborted}")
    console.print(f"  Reviewers added:  {outcome_counter.get('added', 0)}")

    if outcome_counter:
        outcome_table = Table(title="Outcome Breakdown", show_header=True)
        outcome_table.add_column("Outcome", style="bold")
        outcome_table.add_column("Count", justify="right")
        for outcome, count in outcome_counter.most_common():
            outcome_table.add_row(outcome, str(count))
        console.print(outcome_table)

    if reviewer_counter:
        reviewer_table = Table(title=f"Top {top} Requested Reviewers", show_header=True)
        reviewer_table.add_column("Reviewer")
        reviewer_table.add_column("PRs", justify="right")
        for name, count in reviewer_counter.most_common(top):
            reviewer_table.add_row(name, str(count))
        console.print(reviewer_table)

    if unresolved_counter:
        unresolved_table = Table(title=f"Top {top} Unresolved Owners", show_header=True)
        unresolved_table.add_column("Owner token")
        unresolved_table.add_column("Runs", justify="right")
        for token, count in unresolved_counter.most_common(top):
            unresolved_table.add_row(f"[yellow]{token}[/yellow]", str(count))
        console.print(unresolved_table)
