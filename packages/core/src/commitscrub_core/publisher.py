from __future__ import annotations

import logging

from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import RepoRef
from commitscrub_core.models import short_id

logger = logging.getLogger(__name__)


class BranchPublisher:
    """Force-move a branch to a rebuilt chain head.

    The one irreversible step of a cleanup: old commits stay on the remote
    until garbage-collected, but the branch no longer reaches them. Call only
    with the head of a fully recreated chain.
    """

    def __init__(self, graph: CommitGraph):
        self._graph = graph

    def publish(self, repo: RepoRef, branch: str, new_head_id: str) -> None:
        logger.info("Publishing %s to %s@%s", short_id(new_head_id), repo.full_name, branch)
        self._graph.update_ref(repo, f"heads/{branch}", new_head_id, force=True)
