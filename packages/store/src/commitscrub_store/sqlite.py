"""SQLiteStore: local file-based store for single-user setups.

Schema:
  repositories: one row per registered repository, keyed by a UUID with a
                 unique canonical remote_url.
"""

from __future__ import annotations

import logging
import sqlite3

from commitscrub_store.base import BaseStore, check_changes, new_record_id
from commitscrub_store.models import RepositoryRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS repositories (
    id                  TEXT PRIMARY KEY,
    remote_url          TEXT NOT NULL UNIQUE,
    name                TEXT NOT NULL,
    owner               TEXT NOT NULL,
    visibility          TEXT DEFAULT 'public',
    status              TEXT DEFAULT 'pending',
    last_scanned_at     TEXT,
    tool_commits_found  INTEGER
);
"""


class SQLiteStore(BaseStore):
    """Stores repository records in a local SQLite database file.

    The database file path defaults to `.commitscrub.db` in the current working
    directory. Configure via .commitscrub.yml: `store_path: /path/to/file.db`.
    """

    def __init__(self, db_path: str = ".commitscrub.db"):
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def create(self, remote_url, name, owner, visibility="public", status="pending") -> RepositoryRecord:
        record = RepositoryRecord(
            id=new_record_id(),
            remote_url=remote_url,
            name=name,
            owner=owner,
            visibility=visibility,
            status=status,
        )
        try:
            self._conn.execute(
                """
                INSERT INTO repositories (id, remote_url, name, owner, visibility, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (record.id, record.remote_url, record.name, record.owner, record.visibility, record.status),
            )
            self._conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Repository already stored: {remote_url}") from e
        return record

    def get(self, record_id: str) -> RepositoryRecord | None:
        row = self._conn.execute("SELECT * FROM repositories WHERE id=?", (record_id,)).fetchone()
        return self._row_to_record(row) if row else None

    def get_by_url(self, remote_url: str) -> RepositoryRecord | None:
        row = self._conn.execute("SELECT * FROM repositories WHERE remote_url=?", (remote_url,)).fetchone()
        return self._row_to_record(row) if row else None

    def list_repositories(self) -> list[RepositoryRecord]:
        rows = self._conn.execute("SELECT * FROM repositories ORDER BY owner, name").fetchall()
        return [self._row_to_record(r) for r in rows]

    def update(self, record_id: str, **changes) -> RepositoryRecord | None:
        check_changes(changes)
        if changes:
            # Column names come from UPDATABLE_FIELDS, never from user input.
            assignments = ", ".join(f"{column}=?" for column in changes)
            self._conn.execute(
                f"UPDATE repositories SET {assignments} WHERE id=?",
                (*changes.values(), record_id),
            )
            self._conn.commit()
        return self.get(record_id)

    def delete(self, record_id: str) -> bool:
        cursor = self._conn.execute("DELETE FROM repositories WHERE id=?", (record_id,))
        self._conn.commit()
        return cursor.rowcount > 0

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> RepositoryRecord:
        return RepositoryRecord(
            id=row["id"],
            remote_url=row["remote_url"],
            name=row["name"],
            owner=row["owner"],
            visibility=row["visibility"] or "public",
            status=row["status"] or "pending",
            last_scanned_at=row["last_scanned_at"],
            tool_commits_found=row["tool_commits_found"],
        )
