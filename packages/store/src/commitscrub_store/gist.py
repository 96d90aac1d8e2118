"""GistStore: shared repository registry kept in a GitHub Gist.

Data format: a single JSON file named `commitscrub_repositories.json` inside
the Gist, holding a JSON array of RepositoryRecord dicts.

Persistence is not on the critical path of a scan or cleanup: a failed
write is logged and reported, never raised. Reads that fail behave as if the
registry were empty.
"""

from __future__ import annotations

import dataclasses
import json
import logging

from commitscrub_store.base import BaseStore, check_changes, new_record_id
from commitscrub_store.models import RepositoryRecord

logger = logging.getLogger(__name__)

_GIST_FILENAME = "commitscrub_repositories.json"


class GistStore(BaseStore):
    """Stores repository records in a GitHub Gist as one JSON array.

    Every write reads the full array, changes it in memory and writes it
    back, which suits for tens or hundreds of repositories.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Auth, Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore.")
        self._gist_id = gist_id
        self._gh = Github(auth=Auth.Token(token))

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def _load(self) -> tuple[object, list[RepositoryRecord]]:
        gist = self._get_gist()
        return gist, [self._from_dict(d) for d in self._read_records(gist)]

    def _write(self, gist, records: list[RepositoryRecord]) -> bool:
        try:
            content = json.dumps([self._to_dict(r) for r in records], indent=2)
            gist.edit(files={_GIST_FILENAME: {"content": content}})
            return True
        except Exception as e:
            logger.warning("GistStore write failed (%s): %s", type(e).__name__, e)
            print(f"Warning: could not persist repository registry to Gist ({type(e).__name__}: {e})")
            return False

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
            gist, records = self._load()
        except Exception as e:
            logger.warning("GistStore.create() could not read the registry: %s", e)
            print(f"Warning: could not persist repository registry to Gist ({type(e).__name__}: {e})")
            return record
        if any(r.remote_url == remote_url for r in records):
            raise ValueError(f"Repository already stored: {remote_url}")
        records.append(record)
        self._write(gist, records)
        return record

    def get(self, record_id: str) -> RepositoryRecord | None:
        return next((r for r in self.list_repositories() if r.id == record_id), None)

    def get_by_url(self, remote_url: str) -> RepositoryRecord | None:
        return next((r for r in self.list_repositories() if r.remote_url == remote_url), None)

    def list_repositories(self) -> list[RepositoryRecord]:
        try:
            _, records = self._load()
        except Exception as e:
            logger.warning("GistStore.list_repositories() failed: %s", e)
            return []
        return records

    def update(self, record_id: str, **changes) -> RepositoryRecord | None:
        check_changes(changes)
        try:
            gist, records = self._load()
        except Exception as e:
            logger.warning("GistStore.update() could not read the registry: %s", e)
            return None
        for index, record in enumerate(records):
            if record.id == record_id:
                records[index] = dataclasses.replace(record, **changes)
                self._write(gist, records)
                return records[index]
        return None

    def delete(self, record_id: str) -> bool:
        try:
            gist, records = self._load()
        except Exception as e:
            logger.warning("GistStore.delete() could not read the registry: %s", e)
            return False
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        return self._write(gist, remaining)

    def _read_records(self, gist) -> list[dict]:
        """Read the current JSON array from the Gist file, or return []."""
        file_obj = gist.files.get(_GIST_FILENAME)
        if file_obj is None:
            return []
        try:
            return json.loads(file_obj.content) or []
        except (json.JSONDecodeError, AttributeError):
            return []

    @staticmethod
    def _to_dict(record: RepositoryRecord) -> dict:
        return dataclasses.asdict(record)

    @staticmethod
    def _from_dict(d: dict) -> RepositoryRecord:
        return RepositoryRecord(
            id=d.get("id", ""),
            remote_url=d.get("remote_url", ""),
            name=d.get("name", ""),
            owner=d.get("owner", ""),
            visibility=d.get("visibility", "public"),
            status=d.get("status", "pending"),
            last_scanned_at=d.get("last_scanned_at"),
            tool_commits_found=d.get("tool_commits_found"),
        )
