"""Shared fixtures: an in-memory, content-addressed commit graph."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from commitscrub_core.errors import NotFoundError, RemoteError
from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import parse_repo_url
from commitscrub_core.models import (
    CommitDetail,
    CommitSummary,
    GitHubUser,
    Identity,
    NewCommit,
    RepositoryInfo,
)

REPO_URL = "https://github.com/owner/repo"
BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _commit_id(commit: NewCommit) -> str:
    payload = "\n".join(
        [
            commit.tree_id,
            ",".join(commit.parent_ids),
            commit.author.name,
            commit.author.email,
            commit.author.date.isoformat(),
            commit.committer.date.isoformat(),
            commit.message,
        ]
    )
    return hashlib.sha1(payload.encode()).hexdigest()


class FakeCommitGraph(CommitGraph):
    """Single-repository commit graph that records every call.

    ``fail_create_on`` makes create_commit raise RemoteError when the new
    commit's message equals the given string.
    """

    def __init__(self, default_branch: str = "main"):
        self.repo = parse_repo_url(REPO_URL)
        self.default_branch = default_branch
        self.objects: dict[str, CommitDetail] = {}
        self.refs: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.fail_create_on: str | None = None

    # -- setup helpers -------------------------------------------------- #

    def add_commit(self, message, parents=(), author=("Dev", "dev@example.com"), tree=None, index=0) -> str:
        date = BASE_DATE + timedelta(minutes=index)
        new = NewCommit(
            message=message,
            tree_id=tree or hashlib.sha1(f"tree-{index}".encode()).hexdigest(),
            parent_ids=tuple(parents),
            author=Identity(author[0], author[1], date),
            committer=Identity(author[0], author[1], date),
        )
        sha = _commit_id(new)
        self.objects[sha] = CommitDetail(sha, new.tree_id, new.parent_ids, new.author, new.committer, new.message)
        return sha

    def build_chain(self, messages, authors=None) -> list[str]:
        """Create a linear chain (oldest first) and point the default branch at its tip."""
        ids: list[str] = []
        for index, message in enumerate(messages):
            author = authors[index] if authors else ("Dev", "dev@example.com")
            ids.append(self.add_commit(message, parents=ids[-1:], author=author, index=index))
        self.refs[f"heads/{self.default_branch}"] = ids[-1]
        return ids

    def chain_from(self, head: str) -> list[CommitDetail]:
        """Walk first parents from ``head``; returns newest first."""
        chain = []
        sha = head
        while sha:
            detail = self.objects[sha]
            chain.append(detail)
            sha = detail.parent_ids[0] if detail.parent_ids else None
        return chain

    def calls_named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    # -- CommitGraph ---------------------------------------------------- #

    def _check_repo(self, repo):
        if repo.full_name != self.repo.full_name:
            raise NotFoundError(f"{repo.full_name} not found")

    def get_repository(self, repo):
        self.calls.append(("get_repository", repo.full_name))
        self._check_repo(repo)
        return RepositoryInfo(
            name=repo.name,
            owner=repo.owner,
            private=False,
            default_branch=self.default_branch,
            html_url=repo.url,
        )

    def list_commits(self, repo, branch, page, per_page):
        self.calls.append(("list_commits", branch, page, per_page))
        self._check_repo(repo)
        chain = self.chain_from(self.refs[f"heads/{branch}"])
        window = chain[(page - 1) * per_page : page * per_page]
        return [
            CommitSummary(
                id=d.id,
                message=d.message,
                author=d.author,
                committer=d.committer,
                tree_id=d.tree_id,
                parent_ids=d.parent_ids,
            )
            for d in window
        ]

    def get_commit(self, repo, commit_id):
        self.calls.append(("get_commit", commit_id))
        self._check_repo(repo)
        if commit_id not in self.objects:
            raise NotFoundError(f"commit {commit_id} not found")
        return self.objects[commit_id]

    def create_commit(self, repo, commit):
        self.calls.append(("create_commit", commit))
        self._check_repo(repo)
        if self.fail_create_on is not None and commit.message == self.fail_create_on:
            raise RemoteError("GitHub error 502 while trying to create commit")
        for parent in commit.parent_ids:
            if parent not in self.objects:
                raise RemoteError(f"parent {parent} does not exist")
        sha = _commit_id(commit)
        self.objects[sha] = CommitDetail(
            sha, commit.tree_id, commit.parent_ids, commit.author, commit.committer, commit.message
        )
        return sha

    def update_ref(self, repo, ref, new_id, force=True):
        self.calls.append(("update_ref", ref, new_id, force))
        self._check_repo(repo)
        self.refs[ref] = new_id

    def get_authenticated_user(self):
        self.calls.append(("get_authenticated_user",))
        return GitHubUser(login="octocat", name="The Octocat")


@pytest.fixture
def graph():
    return FakeCommitGraph()


@pytest.fixture
def repo_ref():
    return parse_repo_url(REPO_URL)
