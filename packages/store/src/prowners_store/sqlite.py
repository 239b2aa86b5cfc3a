"""SQLiteStore, a local file-based store for assignment history.

Schema:
  assignments: one row per run; reviewers and unresolved tokens are JSON
                columns so read paths never need a JOIN.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from prowners_store.base import BaseStore
from prowners_store.models import AssignmentRecord, ReviewerRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS assignments (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    repo            TEXT NOT NULL,
    pr_number       INTEGER NOT NULL,
    pr_title        TEXT,
    head_sha        TEXT,
    assigned_at     TEXT,
    files_checked   INTEGER DEFAULT 0,
    aborted         INTEGER DEFAULT 0,
    reviewers_json  TEXT DEFAULT '[]',
    unresolved_json TEXT DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_assignments_repo ON assignments (repo);
CREATE INDEX IF NOT EXISTS idx_assignments_pr   ON assignments (repo, pr_number);
"""


class SQLiteStore(BaseStore):
    """Stores assignment history in a local SQLite database file.

    Configure via .prowners.yml: ``store: sqlite`` and optionally
    ``store_path: /path/to/prowners.db`` (default ``.prowners.db``).
    """

    def __init__(self, db_path: str = ".prowners.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, record: AssignmentRecord) -> None:
        reviewers_json = json.dumps([{"name": r.name, "outcome": r.outcome} for r in record.reviewers])
        self._conn.execute(
            """
            INSERT INTO assignments
              (repo, pr_number, pr_title, head_sha, assigned_at,
               files_checked, aborted, reviewers_json, unresolved_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.repo,
                record.pr_number,
                record.pr_title,
                record.head_sha,
                record.assigned_at,
                record.files_checked,
                int(record.aborted),
                reviewers_json,
                json.dumps(record.unresolved),
            ),
        )
        self._conn.commit()
        logger.debug("Saved assignment record for %s#%d", record.repo, record.pr_number)

    def list_assignments(self, repo: str, pr_number: int | None = None) -> list[AssignmentRecord]:
        if pr_number is not None:
            rows = self._conn.execute(
                "SELECT * FROM assignments WHERE repo=? AND pr_number=? ORDER BY assigned_at, id",
                (repo, pr_number),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM assignments WHERE repo=? ORDER BY assigned_at, id",
                (repo,),
            ).fetchall()

        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> AssignmentRecord:
        reviewers = [
            ReviewerRecord(name=r.get("name", ""), outcome=r.get("outcome", "added"))
            for r in json.loads(row["reviewers_json"] or "[]")
        ]
        return AssignmentRecord(
            repo=row["repo"],
            pr_number=row["pr_number"],
            pr_title=row["pr_title"] or "",
            head_sha=row["head_sha"] or "",
            assigned_at=row["assigned_at"] or "",
            files_checked=row["files_checked"],
            aborted=bool(row["aborted"]),
            reviewers=reviewers,
            unresolved=json.loads(row["unresolved_json"] or "[]"),
        )
