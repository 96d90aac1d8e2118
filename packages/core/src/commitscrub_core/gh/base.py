"""Abstract commit-graph interface.

The history fetcher, rebuilder and publisher depend on CommitGraph, not on
PyGithub, so tests drive them with an in-memory graph and a different host
only needs a new subclass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commitscrub_core.gh.url import RepoRef
    from commitscrub_core.models import CommitDetail, CommitSummary, GitHubUser, NewCommit, RepositoryInfo


class CommitGraph(ABC):
    """Content-addressed commit store behind a repository URL.

    Implementations raise NotFoundError, AuthRequiredError or RemoteError;
    they never retry.
    """

    @abstractmethod
    def get_repository(self, repo: RepoRef) -> RepositoryInfo:
        """Return repository metadata including the default branch."""

    @abstractmethod
    def list_commits(self, repo: RepoRef, branch: str, page: int, per_page: int) -> list[CommitSummary]:
        """Return one page (numbered from 1) of the branch history, newest first.

        An empty list means the history is exhausted.
        """

    @abstractmethod
    def get_commit(self, repo: RepoRef, commit_id: str) -> CommitDetail:
        """Return the full content of one commit object."""

    @abstractmethod
    def create_commit(self, repo: RepoRef, commit: NewCommit) -> str:
        """Create a commit object and return its id. Does not move any ref."""

    @abstractmethod
    def update_ref(self, repo: RepoRef, ref: str, new_id: str, force: bool = True) -> None:
        """Point ``ref`` (e.g. ``heads/main``) at ``new_id``."""

    @abstractmethod
    def get_authenticated_user(self) -> GitHubUser:
        """Return the identity behind the current credential."""
