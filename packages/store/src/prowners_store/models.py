"""Assignment history data models.

Decoupled from prowners_core so the store layer can be used independently
and prowners_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ReviewerRecord:
    """One reviewer-add attempt persisted to the store."""

    name: str
    outcome: str  # "added" | "already_present" | "author_conflict" | "failed" | "planned"


@dataclass
class AssignmentRecord:
    """A completed assignment run persisted to the store.

    Created by the CLI layer after run_assignment() returns an AssignmentSummary.
    """

    repo: str
    pr_number: int
    pr_title: str
    head_sha: str
    assigned_at: str  # ISO-8601 UTC timestamp
    files_checked: int
    aborted: bool = False
    reviewers: list[ReviewerRecord] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    def names_with(self, outcome: str) -> list[str]:
        return [r.name for r in self.reviewers if r.outcome == outcome]
