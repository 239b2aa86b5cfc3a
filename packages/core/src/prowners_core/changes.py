"""Streaming enumeration of a proposal's changed files."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import closing

from prowners_core.errors import ChangeEnumerationError
from prowners_core.host import ChangeSource
from prowners_core.models import ChangeSummary, Proposal


class ChangeCallback:
    """Receives one proposal's changes, one path at a time.

    on_change returns False to stop the stream; no further paths are produced.
    """

    def on_start(self, proposal: Proposal) -> None:
        pass

    def on_change(self, path: str) -> bool:
        return True

    def on_end(self, summary: ChangeSummary) -> None:
        pass


class ChangeEnumerator:
    def __init__(self, source: ChangeSource, logger: logging.Logger | None = None):
        self._source = source
        self._log = logger or logging.getLogger(__name__)

    def changes(self, proposal: Proposal) -> Iterator[str]:
        """Single-pass, lazy sequence of changed paths. Request a fresh one per check."""
        try:
            for path in self._source.iter_changes(proposal):
                yield path
        except ChangeEnumerationError:
            raise
        except Exception as e:
            raise ChangeEnumerationError(
                f"Could not list changes of {proposal.repository}#{proposal.proposal_id}: {e}"
            ) from e

    def stream(self, proposal: Proposal, callback: ChangeCallback) -> ChangeSummary:
        summary = ChangeSummary()
        callback.on_start(proposal)
        with closing(self.changes(proposal)) as paths:
            for path in paths:
                summary.count += 1
                if not callback.on_change(path):
                    summary.truncated = True
                    self._log.debug("Change stream stopped after %d path(s)", summary.count)
                    break
        callback.on_end(summary)
        return summary
