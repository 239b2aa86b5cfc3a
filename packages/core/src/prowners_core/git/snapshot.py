"""Disposable index snapshots of a revision's tree.

Attribute queries must see the .gitattributes files of the proposal's source
revision, not whatever happens to be checked out. ``git read-tree`` into an
alternate index (GIT_INDEX_FILE) gives exactly that without touching the
repository's primary index or working tree. ``check-attr --cached`` then
reads attributes from that index.

Each snapshot lives in its own temporary directory so the index file and the
``index.lock`` git writes next to it are removed together.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from prowners_core.errors import GitCommandError, SnapshotCleanupError, SnapshotCreationError
from prowners_core.git.command import GitRepository

_INDEX_NAME = "index"


@dataclass(frozen=True)
class Snapshot:
    """Handle to a materialized index. Owned by exactly one check."""

    repository: GitRepository
    revision: str
    location: Path
    tree: str | None = None

    @property
    def index_path(self) -> Path:
        return self.location / _INDEX_NAME

    @property
    def env(self) -> dict[str, str]:
        return {"GIT_INDEX_FILE": str(self.index_path)}


class SnapshotManager:
    def __init__(self, prefix: str = "git_idx_", tmp_dir: str | Path | None = None, logger: logging.Logger | None = None):
        self._prefix = prefix
        self._tmp_dir = tmp_dir
        self._log = logger or logging.getLogger(__name__)

    def acquire(self, repository: GitRepository, revision: str) -> Snapshot:
        """Resolve ``revision`` to its tree and read that into a fresh alternate index.

        Raises SnapshotCreationError. Anything created before the failure is
        released first, so the caller has nothing to clean up.
        """
        if not revision or revision.startswith("-"):
            raise SnapshotCreationError(f"Invalid revision: {revision!r}")

        try:
            tree = repository.single_line("rev-parse", "--verify", f"{revision}^{{tree}}")
        except GitCommandError as e:
            raise SnapshotCreationError(f"Could not read tree of {revision}: {e}") from e
        if not tree:
            raise SnapshotCreationError(f"Could not read tree of {revision}: no tree id")

        try:
            location = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._tmp_dir))
        except OSError as e:
            raise SnapshotCreationError(f"Could not create snapshot location: {e}") from e

        snapshot = Snapshot(repository=repository, revision=revision, location=location, tree=tree)
        try:
            repository.run("read-tree", tree, env=snapshot.env)
        except GitCommandError as e:
            self.release(snapshot)
            raise SnapshotCreationError(f"Could not read tree of {revision}: {e}") from e

        self._log.debug("Snapshot of %s created at %s", revision, location)
        return snapshot

    def release(self, snapshot: Snapshot) -> None:
        """Remove the snapshot. Failures are logged, never raised."""
        try:
            self._remove(snapshot.location)
        except SnapshotCleanupError as e:
            self._log.warning("%s", e)
        else:
            self._log.debug("Snapshot at %s released", snapshot.location)

    @staticmethod
    def _remove(location: Path) -> None:
        try:
            shutil.rmtree(location)
        except OSError as e:
            raise SnapshotCleanupError(f"Could not remove snapshot {location}: {e}") from e

    @contextmanager
    def snapshot(self, repository: GitRepository, revision: str) -> Iterator[Snapshot]:
        """Acquire a snapshot and release it exactly once on every exit path."""
        handle = self.acquire(repository, revision)
        try:
            yield handle
        finally:
            self.release(handle)
