"""Interfaces to the code-review host.

The assignment core never talks to GitHub (or any other host) directly. It
depends on these four capabilities, which prowners_core.gh implements for
GitHub and tests implement in memory:

  ChangeSource: lazily lists the paths a proposal touches
  ReviewerStorage: adds a reviewer to a proposal
  UserDirectory: finds an account by name or email
  SecurityScope: runs one call with elevated permission
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from prowners_core.models import AddOutcome, Proposal, User

T = TypeVar("T")


class ChangeSource(ABC):
    @abstractmethod
    def iter_changes(self, proposal: Proposal) -> Iterable[str]:
        """Yield each changed path of the proposal's diff, in diff order.

        Implementations should produce paths lazily rather than materializing
        the whole diff.
        """


class ReviewerStorage(ABC):
    @abstractmethod
    def add_reviewer(self, repository: str, proposal_id: int, user_name: str) -> AddOutcome:
        """Add ``user_name`` as a reviewer of the proposal.

        Returns ADDED or ALREADY_PRESENT. Raises ReviewerRoleUnmodifiable when
        the user is the proposal's author; any other exception is a failure.
        """


class UserDirectory(ABC):
    @abstractmethod
    def find_user_by_name_or_email(self, name_or_email: str) -> User | None:
        """Return the matching account, or None / IdentityNotFound when there is none."""


class SecurityScope(ABC):
    @abstractmethod
    def run_with_elevated_scope(self, fn: Callable[[], T], reason: str = "") -> T:
        """Call ``fn`` with elevated permission and revert when it returns or raises."""


class NullSecurityScope(SecurityScope):
    """For hosts where the caller's own credentials already suffice."""

    def run_with_elevated_scope(self, fn: Callable[[], T], reason: str = "") -> T:
        return fn()
