"""Scan and cleanup orchestration.

``scan`` only reads and classifies. Only ``cleanup`` rebuilds and publishes.

The repository store is duck-typed (``get_by_url``, ``create``, ``update``,
``delete``) so commitscrub_core does not depend on commitscrub_store.
Status transitions follow:

    pending -> scanning -> needs_cleanup | clean | error
            -> processing -> clean | error
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable

from commitscrub_core.classifier import DEFAULT_SIGNATURE, ToolSignature, classify_all
from commitscrub_core.errors import (
    CommitScrubError,
    DuplicateRepositoryError,
    RewriteInProgressError,
)
from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import RepoRef, parse_repo_url
from commitscrub_core.history import DEFAULT_PER_PAGE, MAX_COMMITS, HistoryFetcher
from commitscrub_core.models import ClassifiedCommit, RewritePlan, RewriteResult
from commitscrub_core.publisher import BranchPublisher
from commitscrub_core.rebuilder import ChainRebuilder

logger = logging.getLogger(__name__)


class Status:
    PENDING = "pending"
    SCANNING = "scanning"
    CLEAN = "clean"
    NEEDS_CLEANUP = "needs_cleanup"
    PROCESSING = "processing"
    ERROR = "error"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CleanupService:
    def __init__(
        self,
        graph: CommitGraph,
        store,
        max_commits: int = MAX_COMMITS,
        per_page: int = DEFAULT_PER_PAGE,
        signature: ToolSignature = DEFAULT_SIGNATURE,
    ):
        self._graph = graph
        self._store = store
        self._fetcher = HistoryFetcher(graph, max_commits=max_commits, per_page=per_page)
        self._rebuilder = ChainRebuilder(graph)
        self._publisher = BranchPublisher(graph)
        self._signature = signature
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------ #
    # Registration                                                         #
    # ------------------------------------------------------------------ #

    def register(self, url: str):
        """Resolve ``url`` on the remote and store it with status pending."""
        repo = parse_repo_url(url)
        if self._store.get_by_url(repo.url) is not None:
            raise DuplicateRepositoryError(f"Repository already registered: {repo.url}")

        info = self._graph.get_repository(repo)
        record = self._store.create(
            remote_url=repo.url,
            name=info.name,
            owner=info.owner,
            visibility=info.visibility,
            status=Status.PENDING,
        )
        logger.info("Registered %s", repo.full_name)
        return record

    def _record_for(self, repo: RepoRef):
        record = self._store.get_by_url(repo.url)
        if record is None:
            record = self.register(repo.url)
        return record

    def _set_status(self, record_id: str, status: str, **changes):
        logger.debug("Repository %s -> %s", record_id, status)
        return self._store.update(record_id, status=status, **changes)

    # ------------------------------------------------------------------ #
    # Per-repository exclusion                                             #
    # ------------------------------------------------------------------ #

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    @contextmanager
    def _guarded(self, repo: RepoRef):
        """Hold the repository's lock and yield its record.

        Raises RewriteInProgressError when another scan or cleanup holds the
        lock, or when the stored status says a cleanup is still processing.
        """
        lock = self._lock_for(repo.url)
        if not lock.acquire(blocking=False):
            raise RewriteInProgressError(f"A scan or cleanup is already running for {repo.full_name}.")
        try:
            record = self._record_for(repo)
            if record.status == Status.PROCESSING:
                raise RewriteInProgressError(
                    f"{repo.full_name} is marked as processing; another cleanup may be running."
                )
            yield record
        finally:
            lock.release()

    # ------------------------------------------------------------------ #
    # Scan                                                                 #
    # ------------------------------------------------------------------ #

    def scan(self, url: str) -> list[ClassifiedCommit]:
        """Classify the branch history, newest first, and store the summary.

        On failure the status becomes ``error`` and ``tool_commits_found``
        keeps its previous value. A repository with a cleanup in flight is
        refused with RewriteInProgressError and its status is left alone.
        """
        repo = parse_repo_url(url)
        with self._guarded(repo) as record:
            self._set_status(record.id, Status.SCANNING)
            try:
                commits = self._fetcher.fetch_chain(repo)
            except Exception:
                self._set_status(record.id, Status.ERROR)
                raise

            classified = classify_all(list(reversed(commits)), self._signature)
            flagged = sum(1 for c in classified if c.is_tool_generated)
            self._set_status(
                record.id,
                Status.NEEDS_CLEANUP if flagged else Status.CLEAN,
                last_scanned_at=_now(),
                tool_commits_found=flagged,
            )
        logger.info("Scanned %s: %d of %d commit(s) flagged", repo.full_name, flagged, len(classified))
        return classified

    # ------------------------------------------------------------------ #
    # Cleanup                                                              #
    # ------------------------------------------------------------------ #

    def cleanup(self, url: str, target_ids: Iterable[str], drop: bool = False) -> RewriteResult:
        """Rewrite the default branch so the target commits are sanitized (or dropped).

        At most one scan or cleanup runs per repository. A failure at any
        point before publishing leaves the branch untouched and the status
        at ``error``.
        """
        targets = frozenset(t.strip() for t in target_ids if t and t.strip())
        if not targets:
            raise ValueError("No commits specified for cleanup.")

        repo = parse_repo_url(url)
        with self._guarded(repo) as record:
            previous_found = record.tool_commits_found or 0
            self._set_status(record.id, Status.PROCESSING)
            try:
                result = self._rewrite(repo, targets, drop)
            except Exception:
                self._set_status(record.id, Status.ERROR)
                raise
            self._set_status(
                record.id,
                Status.CLEAN,
                tool_commits_found=max(0, previous_found - result.rewritten_count),
            )
        return result

    def _rewrite(self, repo: RepoRef, targets: frozenset[str], drop: bool) -> RewriteResult:
        branch = self._graph.get_repository(repo).default_branch
        commits = self._fetcher.fetch_chain(repo, branch=branch, wanted_ids=targets)
        plan = RewritePlan(commits=commits, target_ids=targets, drop_targets=drop)
        self._rebuilder.validate(plan)

        logger.info(
            "Rewriting %d commit(s) on %s@%s (%d target(s), drop=%s)",
            len(commits),
            repo.full_name,
            branch,
            len(targets),
            drop,
        )
        result = self._rebuilder.rebuild(repo, plan)
        self._publisher.publish(repo, branch, result.new_head_id)
        return result

    # ------------------------------------------------------------------ #
    # Connection                                                           #
    # ------------------------------------------------------------------ #

    def connection_status(self) -> dict:
        """Report whether the current credential reaches GitHub. Never raises."""
        try:
            user = self._graph.get_authenticated_user()
        except CommitScrubError as e:
            return {"connected": False, "error": str(e)}
        return {"connected": True, "login": user.login, "name": user.name, "avatar_url": user.avatar_url}
