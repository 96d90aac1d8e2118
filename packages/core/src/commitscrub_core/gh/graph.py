"""GitHub implementation of CommitGraph (PyGithub)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timezone

import requests
from github import Auth, BadCredentialsException, Github, GithubException, InputGitAuthor, UnknownObjectException

from commitscrub_core.credentials import TokenProvider
from commitscrub_core.errors import AuthRequiredError, NotFoundError, RemoteError
from commitscrub_core.gh.base import CommitGraph
from commitscrub_core.gh.url import RepoRef
from commitscrub_core.models import (
    CommitDetail,
    CommitSummary,
    GitHubUser,
    Identity,
    NewCommit,
    RepositoryInfo,
    short_id,
)

logger = logging.getLogger(__name__)

_PUBLIC_HOST = "github.com"
_TIMEOUT = 30


def api_base_url(host: str) -> str:
    if host == _PUBLIC_HOST:
        return "https://api.github.com"
    return f"https://{host}/api/v3"


def _required(value, what: str):
    if value is None:
        raise RemoteError(f"Malformed response from GitHub: missing {what}")
    return value


def _identity(git_author, what: str) -> Identity:
    _required(git_author, what)
    return Identity(
        name=_required(git_author.name, f"{what}.name"),
        email=_required(git_author.email, f"{what}.email"),
        date=_required(git_author.date, f"{what}.date"),
    )


def _input_author(identity: Identity) -> InputGitAuthor:
    date = identity.date
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    stamp = date.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return InputGitAuthor(identity.name, identity.email, stamp)


@contextmanager
def _remote_call(action: str, repo: RepoRef | None = None):
    """Translate PyGithub and transport failures into the core error taxonomy."""
    where = f" ({repo.full_name})" if repo is not None else ""
    try:
        yield
    except BadCredentialsException as e:
        raise AuthRequiredError(f"GitHub rejected the credential while trying to {action}{where}.") from e
    except UnknownObjectException as e:
        raise NotFoundError(f"Not found while trying to {action}{where}: repository or object missing.") from e
    except GithubException as e:
        raise RemoteError(f"GitHub error {e.status} while trying to {action}{where}: {e.data}") from e
    except requests.RequestException as e:
        raise RemoteError(f"Network error while trying to {action}{where}: {e}") from e


class GitHubCommitGraph(CommitGraph):
    """Commit graph backed by the GitHub REST API.

    A fresh ``Github`` client is built for every call from a token requested
    from the provider at that moment; neither the client nor the token is
    kept between calls.
    """

    def __init__(self, token_provider: TokenProvider, base_url: str | None = None):
        self._tokens = token_provider
        self._base_url = base_url

    def _client(self, host: str = _PUBLIC_HOST, per_page: int = 30) -> Github:
        token = self._tokens.get_access_token()
        return Github(
            auth=Auth.Token(token),
            base_url=self._base_url or api_base_url(host),
            per_page=per_page,
            timeout=_TIMEOUT,
            retry=None,
        )

    def _repo(self, repo: RepoRef, per_page: int = 30):
        return self._client(repo.host, per_page).get_repo(repo.full_name)

    def get_repository(self, repo: RepoRef) -> RepositoryInfo:
        with _remote_call("fetch repository", repo):
            gh_repo = self._repo(repo)
            return RepositoryInfo(
                name=_required(gh_repo.name, "repository.name"),
                owner=_required(gh_repo.owner, "repository.owner").login,
                private=bool(gh_repo.private),
                default_branch=_required(gh_repo.default_branch, "repository.default_branch"),
                html_url=gh_repo.html_url or repo.url,
            )

    def list_commits(self, repo: RepoRef, branch: str, page: int, per_page: int) -> list[CommitSummary]:
        with _remote_call(f"list commits on {branch} (page {page})", repo):
            gh_repo = self._repo(repo, per_page=per_page)
            entries = gh_repo.get_commits(sha=branch).get_page(page - 1)
            summaries = []
            for entry in entries:
                git_commit = _required(entry.commit, "commit")
                summaries.append(
                    CommitSummary(
                        id=_required(entry.sha, "sha"),
                        message=_required(git_commit.message, "commit.message"),
                        author=_identity(git_commit.author, "commit.author"),
                        committer=_identity(git_commit.committer, "commit.committer"),
                        tree_id=_required(git_commit.tree, "commit.tree").sha,
                        parent_ids=tuple(p.sha for p in entry.parents),
                        html_url=entry.html_url or "",
                    )
                )
            return summaries

    def get_commit(self, repo: RepoRef, commit_id: str) -> CommitDetail:
        with _remote_call(f"fetch commit {short_id(commit_id)}", repo):
            git_commit = self._repo(repo).get_git_commit(commit_id)
            return CommitDetail(
                id=_required(git_commit.sha, "sha"),
                tree_id=_required(git_commit.tree, "tree").sha,
                parent_ids=tuple(p.sha for p in git_commit.parents),
                author=_identity(git_commit.author, "author"),
                committer=_identity(git_commit.committer, "committer"),
                message=_required(git_commit.message, "message"),
            )

    def create_commit(self, repo: RepoRef, commit: NewCommit) -> str:
        with _remote_call("create commit", repo):
            gh_repo = self._repo(repo)
            tree = gh_repo.get_git_tree(commit.tree_id)
            parents = [gh_repo.get_git_commit(pid) for pid in commit.parent_ids]
            created = gh_repo.create_git_commit(
                message=commit.message,
                tree=tree,
                parents=parents,
                author=_input_author(commit.author),
                committer=_input_author(commit.committer),
            )
            new_id = _required(created.sha, "sha")
        logger.debug("Created commit %s in %s", short_id(new_id), repo.full_name)
        return new_id

    def update_ref(self, repo: RepoRef, ref: str, new_id: str, force: bool = True) -> None:
        with _remote_call(f"update {ref}", repo):
            self._repo(repo).get_git_ref(ref).edit(sha=new_id, force=force)
        logger.info("Moved %s of %s to %s (force=%s)", ref, repo.full_name, short_id(new_id), force)

    def get_authenticated_user(self) -> GitHubUser:
        with _remote_call("fetch the authenticated user"):
            user = self._client().get_user()
            return GitHubUser(login=_required(user.login, "login"), name=user.name, avatar_url=user.avatar_url)
