"""Repository metadata models.

Decoupled from commitscrub_core so the store layer can be used independently;
the store only ever holds a per-repository summary, never commit detail.
"""

from __future__ import annotations

from dataclasses import dataclass

STATUSES = ("pending", "scanning", "clean", "needs_cleanup", "processing", "error")


@dataclass
class RepositoryRecord:
    """A registered repository and the outcome of its latest scan or cleanup."""

    id: str
    remote_url: str  # canonical https://host/owner/name, unique
    name: str
    owner: str
    visibility: str = "public"  # "public" | "private"
    status: str = "pending"
    last_scanned_at: str | None = None  # ISO-8601 UTC timestamp
    tool_commits_found: int | None = None
