"""Paginated retrieval of a branch's linear commit history."""

from __future__ import annotations

import logging
from typing import Iterable

from commitscrub_core.errors import NonLinearHistoryError
from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import RepoRef
from commitscrub_core.models import CommitRecord, short_id

logger = logging.getLogger(__name__)

MAX_COMMITS = 500
DEFAULT_PER_PAGE = 100


class HistoryFetcher:
    """Collect commits from the tip backwards, then hand them back oldest first.

    Paging stops at whichever comes first: the history runs out, ``max_commits``
    commits have been collected, or every id in ``wanted_ids`` has been seen.
    ``max_commits`` can lower the 500 cap but not raise it.
    """

    def __init__(self, graph: CommitGraph, max_commits: int = MAX_COMMITS, per_page: int = DEFAULT_PER_PAGE):
        self._graph = graph
        self._max_commits = max(1, min(max_commits, MAX_COMMITS))
        self._per_page = max(1, per_page)

    def fetch_chain(
        self,
        repo: RepoRef,
        branch: str | None = None,
        wanted_ids: Iterable[str] | None = None,
    ) -> list[CommitRecord]:
        if branch is None:
            branch = self._graph.get_repository(repo).default_branch

        outstanding = set(wanted_ids) if wanted_ids else None
        collected: list[CommitRecord] = []
        page = 0
        while len(collected) < self._max_commits:
            page += 1
            summaries = self._graph.list_commits(repo, branch, page, self._per_page)
            if not summaries:
                break
            for summary in summaries:
                collected.append(CommitRecord.from_summary(summary))
                if outstanding is not None:
                    outstanding.discard(summary.id)
                if len(collected) >= self._max_commits or outstanding == set():
                    break
            if outstanding == set() or len(summaries) < self._per_page:
                break

        logger.info(
            "Fetched %d commit(s) from %s@%s in %d page(s)",
            len(collected),
            repo.full_name,
            branch,
            page,
        )
        collected.reverse()
        return collected


def check_linear(commits: list[CommitRecord]) -> None:
    """Raise NonLinearHistoryError unless ``commits`` (oldest first) form one parent chain."""
    for index, commit in enumerate(commits):
        if len(commit.parent_ids) > 1:
            raise NonLinearHistoryError(
                f"Commit {short_id(commit.id)} is a merge commit; only linear history can be rewritten.",
                commit.id,
            )
        if index == 0:
            continue
        previous = commits[index - 1].id
        if commit.parent_ids != (previous,):
            raise NonLinearHistoryError(
                f"Commit {short_id(commit.id)} does not descend from {short_id(previous)}; "
                "history is not a single linear chain.",
                commit.id,
            )
