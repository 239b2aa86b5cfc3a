from __future__ import annotations

from collections.abc import Iterator

from prowners_core.git.command import GitRepository
from prowners_core.host import ChangeSource
from prowners_core.models import Proposal


class GitDiffChangeSource(ChangeSource):
    """Changed paths computed by the local clone instead of the host API.

    Uses the three-dot form so the diff is taken against the merge base, the
    same file set a pull request page shows.
    """

    def __init__(self, repository: GitRepository):
        self._repository = repository

    def iter_changes(self, proposal: Proposal) -> Iterator[str]:
        yield from self._repository.stream(
            "diff",
            "--name-only",
            "-z",
            f"{proposal.target_revision}...{proposal.source_revision}",
            "--",
        )
