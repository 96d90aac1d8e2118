"""Error taxonomy for scan and cleanup operations.

Classification and sanitizing never raise. Everything that talks to the
remote, or rewrites history, raises one of the subclasses below so callers
(the CLI, an HTTP layer) can map failures to a response without string
matching on messages.
"""

from __future__ import annotations


class CommitScrubError(Exception):
    """Base class for every error raised by commitscrub_core."""


class InvalidUrlError(CommitScrubError):
    """The repository URL is not of the form https://<host>/<owner>/<repo>[.git][/]."""


class NotFoundError(CommitScrubError):
    """The repository (or an object inside it) does not exist or is not visible."""


class AuthRequiredError(CommitScrubError):
    """No usable credential is available, or the remote rejected it."""


class RemoteError(CommitScrubError):
    """Network failure, 5xx, timeout, or a response missing required fields."""


class DuplicateRepositoryError(CommitScrubError):
    """A repository with the same canonical URL is already registered."""


class RewriteInProgressError(CommitScrubError):
    """Another scan or cleanup is already running against the same repository."""


class NonLinearHistoryError(CommitScrubError):
    """The rewrite window contains a merge commit or a break in the parent chain."""

    def __init__(self, message: str, commit_id: str):
        super().__init__(message)
        self.commit_id = commit_id


class MissingCommitError(CommitScrubError):
    """One or more target ids are absent from the fetched window."""

    def __init__(self, missing_ids: list[str]):
        shown = ", ".join(sha[:7] for sha in missing_ids)
        super().__init__(f"{len(missing_ids)} target commit(s) not found in fetched history: {shown}")
        self.missing_ids = missing_ids


class ChainBrokenError(CommitScrubError):
    """Recreating the chain stopped partway; nothing was published."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        failed_commit_id: str | None = None,
        new_head_id: str | None = None,
    ):
        super().__init__(message)
        self.errors = list(errors or [])
        self.failed_commit_id = failed_commit_id
        self.new_head_id = new_head_id
