from __future__ import annotations

import json
from pathlib import Path

from github import Github

from prowners_core.models import Proposal


def get_client(token: str) -> Github:
    return Github(token)


def get_repo(repo_name: str, token: str):
    return get_client(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def proposal_from_pull(pull, repository: str | None = None) -> Proposal:
    """Freeze the fields a check needs so later API calls can't shift them mid-run."""
    return Proposal(
        repository=repository or pull.base.repo.full_name,
        proposal_id=pull.number,
        target_revision=pull.base.sha,
        source_revision=pull.head.sha,
        author=pull.user.login,
        title=pull.title or "",
    )


def pr_number_from_event(event_path: str | Path) -> int | None:
    """Return the PR number from a GitHub Actions event payload, or None.

    ``pull_request`` and ``pull_request_target`` events carry it under
    ``pull_request.number``; other events (push, schedule) have no PR.
    """
    path = Path(event_path)
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        event = json.load(f)
    pull_request = event.get("pull_request") or {}
    number = pull_request.get("number")
    return int(number) if number is not None else None
