"""No-op store, the default when no store is configured."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prowners_store.base import BaseStore

if TYPE_CHECKING:
    from prowners_store.models import AssignmentRecord


class NoOpStore(BaseStore):
    """Discards all records so the CLI can always call store.save()."""

    def save(self, record: AssignmentRecord) -> None:
        pass

    def list_assignments(self, repo: str, pr_number: int | None = None) -> list[AssignmentRecord]:
        return []
