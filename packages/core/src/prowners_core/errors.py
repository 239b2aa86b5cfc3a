"""Exception taxonomy for reviewer assignment.

Only SnapshotCreationError (and a broken change stream) ends a run early.
Everything else is caught and logged at its own unit of work (an owner token,
a reviewer, a file) and processing moves on.
"""

from __future__ import annotations


class PrownersError(Exception):
    """Base class for all prowners errors."""


class GitCommandError(PrownersError):
    """A git subprocess could not be started, timed out, or exited non-zero."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr or "no output"
        status = f"exit code {returncode}" if returncode is not None else "did not run"
        super().__init__(f"{' '.join(command)} ({status}): {detail}")


class SnapshotCreationError(PrownersError):
    """The index snapshot of the source revision could not be materialized."""


class SnapshotCleanupError(PrownersError):
    """The snapshot location could not be removed. Logged only, never raised to callers."""


class ChangeEnumerationError(PrownersError):
    """The change stream for a proposal failed mid-way."""


class QueryExecutionError(PrownersError):
    """The attribute query itself failed to run (not the same as "attribute unset")."""


class IdentityNotFound(PrownersError):
    """No user account matches an owner token."""


class IdentityLookupError(PrownersError):
    """The user directory failed for a reason other than "not found"."""


class ReviewerRoleUnmodifiable(PrownersError):
    """The host refused the reviewer role because the target is the proposal's author."""


class ReviewerAssignmentError(PrownersError):
    """Adding a reviewer failed for any reason other than an author conflict."""
