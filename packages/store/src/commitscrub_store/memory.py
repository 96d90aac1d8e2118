"""In-process store: the default when no store is configured.

Records live for the lifetime of the process only.
"""

from __future__ import annotations

import dataclasses
import threading

from commitscrub_store.base import BaseStore, check_changes, new_record_id
from commitscrub_store.models import RepositoryRecord


class MemoryStore(BaseStore):
    def __init__(self):
        self._records: dict[str, RepositoryRecord] = {}
        self._lock = threading.Lock()

    def create(self, remote_url, name, owner, visibility="public", status="pending") -> RepositoryRecord:
        with self._lock:
            if any(r.remote_url == remote_url for r in self._records.values()):
                raise ValueError(f"Repository already stored: {remote_url}")
            record = RepositoryRecord(
                id=new_record_id(),
                remote_url=remote_url,
                name=name,
                owner=owner,
                visibility=visibility,
                status=status,
            )
            self._records[record.id] = record
            return dataclasses.replace(record)

    def get(self, record_id: str) -> RepositoryRecord | None:
        record = self._records.get(record_id)
        return dataclasses.replace(record) if record else None

    def get_by_url(self, remote_url: str) -> RepositoryRecord | None:
        for record in self._records.values():
            if record.remote_url == remote_url:
                return dataclasses.replace(record)
        return None

    def list_repositories(self) -> list[RepositoryRecord]:
        return [dataclasses.replace(r) for r in self._records.values()]

    def update(self, record_id: str, **changes) -> RepositoryRecord | None:
        check_changes(changes)
        with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                return None
            updated = dataclasses.replace(existing, **changes)
            self._records[record_id] = updated
            return dataclasses.replace(updated)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None
