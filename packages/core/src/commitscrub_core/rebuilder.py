"""Recreate a linear commit chain with sanitized (or dropped) target commits.

A commit's id covers its parent id, so once one commit changes every
descendant has to be recreated too, even when its own message is untouched.
The rebuild walks the whole window oldest to newest, one remote write at a
time, each new commit parented on the one created just before it. Nothing
here moves a branch: the caller publishes ``new_head_id`` only after the
whole window was recreated.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from commitscrub_core.errors import ChainBrokenError, MissingCommitError
from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import RepoRef
from commitscrub_core.history import check_linear
from commitscrub_core.models import Identity, NewCommit, RewritePlan, RewriteResult, short_id
from commitscrub_core.sanitizer import sanitize_message

logger = logging.getLogger(__name__)


class ChainRebuilder:
    def __init__(
        self,
        graph: CommitGraph,
        sanitize: Callable[[str], str] = sanitize_message,
        clock: Callable[[], datetime] | None = None,
    ):
        self._graph = graph
        self._sanitize = sanitize
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def validate(self, plan: RewritePlan) -> None:
        """Check everything that can be checked before the first remote write."""
        missing = plan.missing_targets()
        if missing:
            raise MissingCommitError(missing)
        check_linear(plan.commits)
        if plan.drop_targets and all(c.id in plan.target_ids for c in plan.commits):
            raise ChainBrokenError("Dropping every commit in the window would leave an empty branch.")

    def rebuild(self, repo: RepoRef, plan: RewritePlan) -> RewriteResult:
        self.validate(plan)
        if not plan.commits:
            raise ChainBrokenError("Nothing to rebuild: the fetched window is empty.")

        errors: list[str] = []
        rewritten = 0
        # The oldest commit keeps whatever lies below the window.
        parent_ids = tuple(plan.commits[0].parent_ids)
        new_head_id: str | None = None
        rewrite_time = self._clock()

        for commit in plan.commits:
            is_target = commit.id in plan.target_ids
            if is_target and plan.drop_targets:
                logger.info("Dropping %s from %s", short_id(commit.id), repo.full_name)
                rewritten += 1
                continue

            try:
                detail = self._graph.get_commit(repo, commit.id)
                message = detail.message
                if is_target:
                    message = self._sanitize(detail.message)
                    if message == detail.message:
                        errors.append(f"{short_id(commit.id)}: message already clean, recreated unchanged")
                    else:
                        rewritten += 1
                new_id = self._graph.create_commit(
                    repo,
                    NewCommit(
                        message=message,
                        tree_id=detail.tree_id,
                        parent_ids=parent_ids,
                        author=detail.author,
                        committer=Identity(detail.committer.name, detail.committer.email, rewrite_time),
                    ),
                )
            except Exception as e:
                errors.append(f"{short_id(commit.id)}: {e}")
                logger.error("Rebuild of %s stopped at %s: %s", repo.full_name, short_id(commit.id), e)
                raise ChainBrokenError(
                    f"Failed to recreate commit {short_id(commit.id)} in {repo.full_name}: {e}",
                    errors=errors,
                    failed_commit_id=commit.id,
                    new_head_id=new_head_id,
                ) from e

            logger.debug("Recreated %s as %s", short_id(commit.id), short_id(new_id))
            new_head_id = new_id
            parent_ids = (new_id,)

        if new_head_id is None:
            raise ChainBrokenError("Rebuild produced no commits.", errors=errors)
        return RewriteResult(new_head_id=new_head_id, rewritten_count=rewritten, errors=errors)
