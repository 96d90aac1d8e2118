"""Commit and rewrite data models.

Remote responses are converted into these structs at the adapter boundary
(commitscrub_core.gh), so nothing past that point handles raw API payloads.
Decoupled from commitscrub_store: the store only ever sees the per-repository
summary, never commit-level detail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


def short_id(sha: str) -> str:
    return sha[:7]


@dataclass(frozen=True)
class Identity:
    """Author or committer identity with its timestamp."""

    name: str
    email: str
    date: datetime


@dataclass(frozen=True)
class RepositoryInfo:
    name: str
    owner: str
    private: bool
    default_branch: str
    html_url: str

    @property
    def visibility(self) -> str:
        return "private" if self.private else "public"


@dataclass(frozen=True)
class CommitSummary:
    """One entry of the branch commit listing (newest first on the remote)."""

    id: str
    message: str
    author: Identity
    committer: Identity
    tree_id: str
    parent_ids: tuple[str, ...]
    html_url: str = ""


@dataclass(frozen=True)
class CommitDetail:
    """Full content of a single commit object, as needed to recreate it."""

    id: str
    tree_id: str
    parent_ids: tuple[str, ...]
    author: Identity
    committer: Identity
    message: str


@dataclass(frozen=True)
class NewCommit:
    """Payload for creating a commit object on the remote."""

    message: str
    tree_id: str
    parent_ids: tuple[str, ...]
    author: Identity
    committer: Identity


@dataclass(frozen=True)
class GitHubUser:
    login: str
    name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class CommitRecord:
    """An immutable commit as seen in the fetched window."""

    id: str
    message: str
    author_name: str
    author_email: str
    author_date: datetime
    committer_name: str
    committer_email: str
    tree_id: str
    parent_ids: tuple[str, ...] = ()
    html_url: str = ""

    @classmethod
    def from_summary(cls, summary: CommitSummary) -> CommitRecord:
        return cls(
            id=summary.id,
            message=summary.message,
            author_name=summary.author.name,
            author_email=summary.author.email,
            author_date=summary.author.date,
            committer_name=summary.committer.name,
            committer_email=summary.committer.email,
            tree_id=summary.tree_id,
            parent_ids=tuple(summary.parent_ids),
            html_url=summary.html_url,
        )


@dataclass(frozen=True)
class ClassifiedCommit:
    """A CommitRecord plus the heuristic verdict. Recomputed on every scan."""

    commit: CommitRecord
    is_tool_generated: bool
    extracted_prompt: str | None = None

    @property
    def id(self) -> str:
        return self.commit.id

    @property
    def message(self) -> str:
        return self.commit.message


@dataclass
class RewritePlan:
    """Oldest-first commit window plus the ids to sanitize (or drop)."""

    commits: list[CommitRecord]
    target_ids: frozenset[str]
    drop_targets: bool = False

    def missing_targets(self) -> list[str]:
        seen = {c.id for c in self.commits}
        return sorted(t for t in self.target_ids if t not in seen)


@dataclass
class RewriteResult:
    new_head_id: str
    rewritten_count: int = 0
    errors: list[str] = field(default_factory=list)
