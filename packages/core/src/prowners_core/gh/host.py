"""GitHub implementations of the host interfaces in prowners_core.host.

Elevation on GitHub means switching tokens. The token that runs the check
(often the Actions GITHUB_TOKEN) can request reviewers but cannot always see
user emails or private org members, so user lookups may run under an admin
token instead. GitHubSecurityScope swaps that client in for the duration of one
call through a ContextVar, which GitHubUserDirectory consults on every lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextvars import ContextVar
from typing import TypeVar

from github import Github, GithubException, UnknownObjectException

from prowners_core.errors import IdentityNotFound, ReviewerAssignmentError, ReviewerRoleUnmodifiable
from prowners_core.gh.pull_request import get_client, get_pull
from prowners_core.host import ChangeSource, ReviewerStorage, SecurityScope, UserDirectory
from prowners_core.models import AddOutcome, Proposal, User

logger = logging.getLogger(__name__)

T = TypeVar("T")

_elevated_client: ContextVar[Github | None] = ContextVar("prowners_elevated_client", default=None)


class GitHubSecurityScope(SecurityScope):
    def __init__(self, admin_token: str | None = None):
        self._admin = get_client(admin_token) if admin_token else None

    @property
    def can_elevate(self) -> bool:
        return self._admin is not None

    def run_with_elevated_scope(self, fn: Callable[[], T], reason: str = "") -> T:
        if self._admin is None:
            return fn()
        token = _elevated_client.set(self._admin)
        try:
            logger.debug("Elevated scope entered: %s", reason or "unnamed call")
            return fn()
        finally:
            _elevated_client.reset(token)


def _to_user(named_user) -> User:
    return User(name=named_user.login, email=named_user.email, display_name=named_user.name)


class GitHubUserDirectory(UserDirectory):
    def __init__(self, client: Github):
        self._client = client

    def _active_client(self) -> Github:
        return _elevated_client.get() or self._client

    def find_user_by_name_or_email(self, name_or_email: str) -> User:
        # CODEOWNERS habit: "@alice" means the login "alice".
        token = name_or_email[1:] if name_or_email.startswith("@") else name_or_email
        client = self._active_client()

        if "@" in token:
            # User search is full-text; only an exact (case-insensitive) email counts.
            wanted = token.lower()
            for named_user in client.search_users(f"{token} in:email"):
                if (named_user.email or "").lower() == wanted:
                    return _to_user(named_user)
            raise IdentityNotFound(name_or_email)

        try:
            named_user = client.get_user(token)
        except UnknownObjectException:
            raise IdentityNotFound(name_or_email) from None
        return _to_user(named_user)


class GitHubChangeSource(ChangeSource):
    def __init__(self, client: Github):
        self._client = client

    def iter_changes(self, proposal: Proposal) -> Iterator[str]:
        pull = get_pull(self._client.get_repo(proposal.repository), proposal.proposal_id)
        # get_files() is a PaginatedList: later pages are only fetched if iteration gets there.
        for file in pull.get_files():
            yield file.filename


class GitHubReviewerStorage(ReviewerStorage):
    """Requests reviews on pull requests.

    GitHub itself re-requests silently and rejects the author with a 422, so
    both conditions are checked up front to report a precise AddOutcome.
    """

    def __init__(self, client: Github):
        self._client = client
        self._pulls: dict[tuple[str, int], object] = {}

    def _pull(self, repository: str, proposal_id: int):
        key = (repository, proposal_id)
        if key not in self._pulls:
            self._pulls[key] = get_pull(self._client.get_repo(repository), proposal_id)
        return self._pulls[key]

    def add_reviewer(self, repository: str, proposal_id: int, user_name: str) -> AddOutcome:
        pull = self._pull(repository, proposal_id)
        login = user_name.lower()

        if pull.user.login.lower() == login:
            raise ReviewerRoleUnmodifiable(f"{user_name} is the author of {repository}#{proposal_id}")

        requested_users, _teams = pull.get_review_requests()
        if any(u.login.lower() == login for u in requested_users):
            return AddOutcome.ALREADY_PRESENT
        if any(r.user is not None and r.user.login.lower() == login for r in pull.get_reviews()):
            return AddOutcome.ALREADY_PRESENT

        try:
            pull.create_review_request(reviewers=[user_name])
        except GithubException as e:
            if e.status == 422 and "author" in str(e.data).lower():
                raise ReviewerRoleUnmodifiable(f"{user_name} is the author of {repository}#{proposal_id}") from e
            raise ReviewerAssignmentError(f"Could not request review from {user_name}: {e}") from e
        return AddOutcome.ADDED
