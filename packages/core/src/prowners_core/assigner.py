"""Core reviewer assignment orchestration."""

from __future__ import annotations

import fnmatch
import logging

from github import GithubException
from rich.console import Console
from rich.table import Table

from prowners_core.changes import ChangeCallback, ChangeEnumerator
from prowners_core.errors import (
    ChangeEnumerationError,
    QueryExecutionError,
    ReviewerAssignmentError,
    ReviewerRoleUnmodifiable,
    SnapshotCreationError,
)
from prowners_core.gh.host import GitHubChangeSource, GitHubReviewerStorage, GitHubSecurityScope, GitHubUserDirectory
from prowners_core.gh.pull_request import get_client, get_pull, get_repo, proposal_from_pull
from prowners_core.git.attributes import AttributeQueryClient
from prowners_core.git.command import GitRepository
from prowners_core.git.diff import GitDiffChangeSource
from prowners_core.git.snapshot import Snapshot, SnapshotManager
from prowners_core.host import ReviewerStorage
from prowners_core.identity import IdentityResolver
from prowners_core.models import AddOutcome, AssignmentSummary, ChangeSummary, Proposal, User

console = Console()
logger = logging.getLogger(__name__)


def _is_excluded(filename: str, patterns: list[str]) -> bool:
    """Return True if filename matches any exclude pattern.

    Supports:
    - fnmatch globs on the full path: "src/generated/*.py"
    - fnmatch globs on the basename: "*.lock", "*.min.js"
    - Directory names/prefixes: "vendor/", "third_party" (matches any file within that tree)
    """
    for pattern in patterns:
        if fnmatch.fnmatch(filename, pattern):
            return True
        if fnmatch.fnmatch(filename.rsplit("/", 1)[-1], pattern):
            return True
        prefix = pattern.rstrip("/") + "/"
        if filename.startswith(prefix) or ("/" + prefix) in filename:
            return True
    return False


class _OwnersCallback(ChangeCallback):
    """Per-run state for one pass over a proposal's changes."""

    def __init__(self, engine: ReviewerAssignmentEngine, proposal: Proposal, snapshot: Snapshot, summary: AssignmentSummary):
        self._engine = engine
        self._proposal = proposal
        self._snapshot = snapshot
        self._summary = summary
        # token -> resolved user (or None); each token is looked up once per run
        self._resolved: dict[str, User | None] = {}

    def on_change(self, path: str) -> bool:
        return self._engine._process_file(self._proposal, self._snapshot, path, self._summary, self._resolved)

    def on_end(self, summary: ChangeSummary) -> None:
        self._summary.truncated = summary.truncated


class ReviewerAssignmentEngine:
    """Adds the declared owners of every changed file as reviewers.

    Strictly additive and best-effort: only a failed snapshot (or a broken
    change stream) ends a run early, and nothing is ever raised to the host.
    """

    def __init__(
        self,
        repository: GitRepository,
        changes: ChangeEnumerator,
        attributes: AttributeQueryClient,
        identities: IdentityResolver,
        reviewers: ReviewerStorage,
        snapshots: SnapshotManager | None = None,
        exclude: list[str] | None = None,
        max_files: int = 0,
        shadow: bool = False,
        logger: logging.Logger | None = None,
    ):
        self._repository = repository
        self._changes = changes
        self._attributes = attributes
        self._identities = identities
        self._reviewers = reviewers
        self._log = logger or logging.getLogger(__name__)
        self._snapshots = snapshots or SnapshotManager(logger=self._log)
        self._exclude = list(exclude or [])
        self._max_files = max_files
        self._shadow = shadow

    def check(self, proposal: Proposal) -> None:
        """Host entry point. Never raises."""
        try:
            self.assign(proposal)
        except Exception:
            self._log.exception("Reviewer assignment for %s#%s failed", proposal.repository, proposal.proposal_id)

    def assign(self, proposal: Proposal) -> AssignmentSummary:
        summary = AssignmentSummary(
            repository=proposal.repository,
            proposal_id=proposal.proposal_id,
            source_revision=proposal.source_revision,
            title=proposal.title,
        )
        try:
            with self._snapshots.snapshot(self._repository, proposal.source_revision) as snapshot:
                callback = _OwnersCallback(self, proposal, snapshot, summary)
                self._changes.stream(proposal, callback)
        except SnapshotCreationError as e:
            self._log.error("%s", e)
            summary.aborted = True
            summary.error = str(e)
        except ChangeEnumerationError as e:
            self._log.error("%s", e)
            summary.error = str(e)
        return summary

    def _process_file(
        self,
        proposal: Proposal,
        snapshot: Snapshot,
        path: str,
        summary: AssignmentSummary,
        resolved: dict[str, User | None],
    ) -> bool:
        """Handle one changed path. Returns False to stop the change stream."""
        if _is_excluded(path, self._exclude):
            summary.skipped_files.append(path)
            return True

        if self._max_files and len(summary.checked_files) >= self._max_files:
            self._log.info("Reached max_files=%d; remaining changes are not checked", self._max_files)
            return False

        summary.checked_files.append(path)
        try:
            owners = self._attributes.owners_for(snapshot, path)
        except QueryExecutionError as e:
            self._log.error("%s", e)
            summary.failed_files.append(path)
            return True

        for token in owners:
            if token not in resolved:
                resolved[token] = self._identities.resolve(token)
            user = resolved[token]
            if user is None:
                if token not in summary.unresolved:
                    self._log.warning("User not found by name or email: %s", token)
                    summary.unresolved.append(token)
                continue
            if user.name in summary.reviewers:
                continue
            summary.reviewers[user.name] = self._add_reviewer(proposal, user)
        return True

    def _add_reviewer(self, proposal: Proposal, user: User) -> AddOutcome:
        if self._shadow:
            return AddOutcome.PLANNED
        try:
            outcome = self._reviewers.add_reviewer(proposal.repository, proposal.proposal_id, user.name)
        except ReviewerRoleUnmodifiable:
            self._log.debug("%s is the author of %s#%s; not added", user.name, proposal.repository, proposal.proposal_id)
            return AddOutcome.AUTHOR_CONFLICT
        except Exception as e:
            error = e if isinstance(e, ReviewerAssignmentError) else ReviewerAssignmentError(str(e))
            self._log.error("Failed to add reviewer %s: %s", user.name, error)
            return AddOutcome.FAILED
        if outcome is AddOutcome.ALREADY_PRESENT:
            self._log.debug("%s is already a reviewer", user.name)
        return outcome


def build_engine(
    config: dict,
    client,
    repository: GitRepository | None = None,
    shadow: bool = False,
) -> ReviewerAssignmentEngine:
    """Wire a GitHub-backed engine from loaded configuration."""
    repository = repository or GitRepository(config.get("git_dir", "."), timeout=config.get("git_timeout"))

    if config.get("changes", "github") == "git":
        source = GitDiffChangeSource(repository)
    else:
        source = GitHubChangeSource(client)

    security = GitHubSecurityScope(admin_token=config.get("admin_token"))
    if not security.can_elevate:
        logger.debug("PROWNERS_ADMIN_TOKEN not set; user lookups run with the check token")

    return ReviewerAssignmentEngine(
        repository=repository,
        changes=ChangeEnumerator(source),
        attributes=AttributeQueryClient(attribute=config.get("attribute", "owners")),
        identities=IdentityResolver(GitHubUserDirectory(client), security),
        reviewers=GitHubReviewerStorage(client),
        exclude=config.get("exclude", []),
        max_files=config.get("max_files", 0) or 0,
        shadow=shadow,
    )


def print_summary(summary: AssignmentSummary) -> None:
    """Print the outcome of a run to the terminal."""
    _outcome_style = {
        AddOutcome.ADDED: "green",
        AddOutcome.PLANNED: "cyan",
        AddOutcome.ALREADY_PRESENT: "dim",
        AddOutcome.AUTHOR_CONFLICT: "dim",
        AddOutcome.FAILED: "red",
    }

    if summary.aborted:
        console.print(f"[red]Assignment aborted: {summary.error}[/red]")
        return

    if summary.reviewers:
        table = Table(title=f"Reviewers for {summary.repository}#{summary.proposal_id}", show_header=True)
        table.add_column("Reviewer", style="bold")
        table.add_column("Outcome")
        for name, outcome in summary.reviewers.items():
            style = _outcome_style.get(outcome, "white")
            table.add_row(name, f"[{style}]{outcome.value}[/{style}]")
        console.print(table)
    else:
        console.print("[yellow]No owners declared for the changed files.[/yellow]")

    line = f"[bold]{len(summary.checked_files)}[/bold] file(s) checked"
    if summary.skipped_files:
        line += f", {len(summary.skipped_files)} excluded"
    if summary.failed_files:
        line += f", [red]{len(summary.failed_files)} failed[/red]"
    if summary.truncated:
        line += " (stopped at max_files)"
    console.print(line)

    if summary.unresolved:
        console.print(f"[yellow]Unresolved owners: {', '.join(summary.unresolved)}[/yellow]")
    if summary.error:
        console.print(f"[red]{summary.error}[/red]")


def run_assignment(
    repo: str,
    pr_number: int,
    config: dict,
    shadow: bool = False,
    repo_obj=None,
    client=None,
    repository: GitRepository | None = None,
) -> AssignmentSummary | None:
    """Assign owners of a pull request's changed files as its reviewers.

    Returns None when the PR is a draft and drafts are not assigned.
    """
    client = client if client is not None else get_client(config["github_token"])
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    if this_pr.draft and not config.get("assign_draft_prs", False):
        console.print("[yellow]Skipping draft PR. Set assign_draft_prs: true in .prowners.yml to assign drafts.[/yellow]")
        return None

    proposal = proposal_from_pull(this_pr, repository=repo)
    console.print(
        f"Assigning owners for [bold]{repo}#{pr_number}[/bold] at {proposal.source_revision[:7]}"
        + (" [cyan](shadow)[/cyan]" if shadow else "")
    )

    engine = build_engine(config, client, repository=repository, shadow=shadow)
    summary = engine.assign(proposal)
    print_summary(summary)
    return summary
