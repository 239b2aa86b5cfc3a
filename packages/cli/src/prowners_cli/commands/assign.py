"""assign: request reviews from the owners of a pull request's changed files."""

from __future__ import annotations

import click
from rich.console import Console

from prowners_core.assigner import run_assignment
from prowners_core.config import CHANGE_SOURCES
from prowners_core.gh.pull_request import get_pull_requests, get_repo, pr_number_from_event
from prowners_core.models import AssignmentSummary
from prowners_store.models import AssignmentRecord, ReviewerRecord

console = Console()


def _summary_to_record(summary: AssignmentSummary) -> AssignmentRecord:
    """Map an AssignmentSummary to the store's AssignmentRecord.

    The CLI owns this mapping: prowners_core has no store knowledge and
    prowners_store has no core knowledge.
    """
    return AssignmentRecord(
        repo=summary.repository,
        pr_number=summary.proposal_id,
        pr_title=summary.title,
        head_sha=summary.source_revision,
        assigned_at=summary.assigned_at,
        files_checked=len(summary.checked_files),
        aborted=summary.aborted,
        reviewers=[ReviewerRecord(name=name, outcome=outcome.value) for name, outcome in summary.reviewers.items()],
        unresolved=list(summary.unresolved),
    )


@click.command("assign")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to read it from --event-path or pick from open PRs.",
)
@click.option(
    "--event-path",
    default=None,
    envvar="GITHUB_EVENT_PATH",
    help="GitHub Actions event payload to read the PR number from.",
)
@click.option("--git-dir", default=None, help="Local clone used for snapshots. Overrides config file.")
@click.option(
    "--changes",
    type=click.Choice(CHANGE_SOURCES),
    default=None,
    help="Where changed files come from. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: resolve owners but do not request any reviews.",
)
@click.pass_context
def assign_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    event_path: str | None,
    git_dir: str | None,
    changes: str | None,
    shadow: bool,
):
    """Request reviews from the declared owners of a pull request's files.

    Owners come from the `owners` git attribute of each changed file, read
    from the pull request's head revision in a local clone:

    \b
      # .gitattributes
      src/billing/**   owners=alice,bob@example.com

    \b
    Environment variables:
      GITHUB_TOKEN           GitHub token (or use gh CLI)
      PROWNERS_ADMIN_TOKEN   Optional token used only for user lookups
    """
    config = dict(ctx.obj["config"])
    for key, value in {"git_dir": git_dir, "changes": changes}.items():
        if value is not None:
            config[key] = value

    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    this_repo = get_repo(repo, token=token)

    if pr_number is None and event_path:
        pr_number = pr_number_from_event(event_path)

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    try:
        summary = run_assignment(
            repo=repo,
            pr_number=pr_number,
            config=config,
            shadow=shadow,
            repo_obj=this_repo,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    if summary is not None:
        store = ctx.obj.get("store") if ctx.obj else None
        if store is not None:
            store.save(_summary_to_record(summary))
