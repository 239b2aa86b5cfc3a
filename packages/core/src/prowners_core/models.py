"""Value types shared by the assignment core, the GitHub adapters and the CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Proposal:
    """A change under review. Immutable for the duration of a check."""

    repository: str  # "owner/name"
    proposal_id: int
    target_revision: str  # base SHA
    source_revision: str  # head SHA
    author: str
    title: str = ""


@dataclass(frozen=True)
class User:
    """A resolved user account, keyed by its unique account name."""

    name: str
    email: str | None = None
    display_name: str | None = None


class AddOutcome(str, enum.Enum):
    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    AUTHOR_CONFLICT = "author_conflict"
    FAILED = "failed"
    PLANNED = "planned"  # shadow mode: resolved but never sent to the host


@dataclass
class ChangeSummary:
    """Reported to ChangeCallback.on_end once the stream is exhausted or stopped."""

    count: int = 0
    truncated: bool = False


@dataclass
class AssignmentSummary:
    """Result of one assignment run.

    ReviewerAssignmentEngine.check() discards it; assign() returns it so the
    CLI can print it and persist it as an AssignmentRecord.
    """

    repository: str
    proposal_id: int
    source_revision: str
    title: str = ""
    reviewers: dict[str, AddOutcome] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    checked_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    aborted: bool = False
    truncated: bool = False
    error: str | None = None
    assigned_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def names_with(self, *outcomes: AddOutcome) -> list[str]:
        return [name for name, outcome in self.reviewers.items() if outcome in outcomes]

    @property
    def added(self) -> list[str]:
        return self.names_with(AddOutcome.ADDED)
