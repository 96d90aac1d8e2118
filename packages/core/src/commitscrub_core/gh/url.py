from __future__ import annotations

import re
from dataclasses import dataclass

from commitscrub_core.errors import InvalidUrlError

_REPO_URL_RE = re.compile(r"^https://(?P<host>[^/\s]+)/(?P<owner>[^/\s]+)/(?P<name>[^/\s]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class RepoRef:
    host: str
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        """Canonical URL, used as the repository's unique key in the store."""
        return f"https://{self.host}/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


def parse_repo_url(url: str) -> RepoRef:
    """Parse ``https://<host>/<owner>/<repo>[.git][/]`` into a RepoRef."""
    match = _REPO_URL_RE.match((url or "").strip())
    if not match or match.group("name") in ("", ".git"):
        raise InvalidUrlError(f"Invalid repository URL: {url!r}. Expected https://<host>/<owner>/<repo>")
    return RepoRef(host=match.group("host").lower(), owner=match.group("owner"), name=match.group("name"))
