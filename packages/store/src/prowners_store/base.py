"""Abstract store interface.

The CLI depends on BaseStore, not on a concrete backend, so backends are
swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prowners_store.models import AssignmentRecord


class BaseStore(ABC):
    """Pluggable persistence layer for assignment history."""

    @abstractmethod
    def save(self, record: AssignmentRecord) -> None:
        """Persist a completed assignment run."""

    @abstractmethod
    def list_assignments(self, repo: str, pr_number: int | None = None) -> list[AssignmentRecord]:
        """Return runs for a repo in chronological order, optionally filtered by PR number.

        Returns an empty list if there are none. Never raises for that case.
        """

    def close(self) -> None:
        """Release any resources held by the store. Default is a no-op."""
