"""Abstract store interface.

Any storage backend (memory, Gist, SQLite) implements this interface. The
CLI and the core service depend on BaseStore, not on a concrete backend,
so backends are swappable without touching either.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from commitscrub_store.models import STATUSES

if TYPE_CHECKING:
    from commitscrub_store.models import RepositoryRecord

UPDATABLE_FIELDS = frozenset({"name", "owner", "visibility", "status", "last_scanned_at", "tool_commits_found"})


def new_record_id() -> str:
    return str(uuid.uuid4())


def check_changes(changes: dict) -> None:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    if "status" in changes and changes["status"] not in STATUSES:
        raise ValueError(f"Unknown status: {changes['status']!r}")


class BaseStore(ABC):
    """Pluggable persistence layer for registered repositories.

    ``remote_url`` is unique; ``create`` raises ValueError on a duplicate.
    """

    @abstractmethod
    def create(
        self,
        remote_url: str,
        name: str,
        owner: str,
        visibility: str = "public",
        status: str = "pending",
    ) -> RepositoryRecord:
        """Persist a new repository record and return it with its id."""

    @abstractmethod
    def get(self, record_id: str) -> RepositoryRecord | None:
        """Return the record with this id, or None."""

    @abstractmethod
    def get_by_url(self, remote_url: str) -> RepositoryRecord | None:
        """Return the record for this canonical URL, or None."""

    @abstractmethod
    def list_repositories(self) -> list[RepositoryRecord]:
        """Return every record. Returns an empty list if none exist."""

    @abstractmethod
    def update(self, record_id: str, **changes) -> RepositoryRecord | None:
        """Apply field changes and return the updated record, or None if absent."""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional. Subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
