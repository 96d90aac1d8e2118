"""Heuristic classifier for commits created by an online coding environment.

No single signal is reliable, so any matching rule flags the commit. The
union favours recall: every flagged commit is shown to the user, who confirms
what actually gets rewritten.

Rules, checked in order (case-insensitive):
  1. message mentions the product name or its domain alias
  2. message mentions auto-save / autosave
  3. author name or email mentions the product name or its domain alias
  4. message is "<verb> <path>.<ext>" for a fixed verb and extension set
  5. trimmed message is one of a few stock short messages
  6. raw message is shorter than 10 characters (empty included)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from commitscrub_core.models import ClassifiedCommit, CommitRecord

PRODUCT_MARKER = "Generated by Replit"

_MIN_MESSAGE_LENGTH = 10
_STOCK_MESSAGES = frozenset({"initial commit", "update", "save"})
_AUTOSAVE_RE = re.compile(r"auto-?save", re.IGNORECASE)
_FILE_ACTION_RE = re.compile(
    r"^(created|updated|modified|added|deleted)\s+.*\.(js|py|ts|html|css|json)\Z",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ToolSignature:
    """Names the tool leaves behind in messages and author identities."""

    product_name: str = "replit"
    domain_alias: str = "repl.it"

    def names(self) -> tuple[str, str]:
        return (self.product_name.lower(), self.domain_alias.lower())


DEFAULT_SIGNATURE = ToolSignature()


@dataclass(frozen=True)
class Classification:
    is_tool_generated: bool
    explanation: str | None = None


def _mentions(text: str, names: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(name in lowered for name in names)


def classify_commit(commit: CommitRecord, signature: ToolSignature = DEFAULT_SIGNATURE) -> Classification:
    """Label one commit. Total over any CommitRecord; never raises."""
    message = commit.message or ""
    author_name = commit.author_name or ""
    author_email = commit.author_email or ""
    names = signature.names()

    matched = (
        _mentions(message, names)
        or _AUTOSAVE_RE.search(message) is not None
        or _mentions(author_email, names)
        or _mentions(author_name, names)
        or _FILE_ACTION_RE.match(message) is not None
        or message.strip().lower() in _STOCK_MESSAGES
        or len(message) < _MIN_MESSAGE_LENGTH
    )
    if not matched:
        return Classification(False)

    product = (signature.product_name.lower(),)
    if _mentions(message, product) or _mentions(author_email, product) or _mentions(author_name, product):
        return Classification(True, PRODUCT_MARKER)
    return Classification(True)


def is_tool_generated(commit: CommitRecord, signature: ToolSignature = DEFAULT_SIGNATURE) -> bool:
    return classify_commit(commit, signature).is_tool_generated


def classify_all(commits: list[CommitRecord], signature: ToolSignature = DEFAULT_SIGNATURE) -> list[ClassifiedCommit]:
    results = []
    for commit in commits:
        verdict = classify_commit(commit, signature)
        results.append(
            ClassifiedCommit(
                commit=commit,
                is_tool_generated=verdict.is_tool_generated,
                extracted_prompt=verdict.explanation,
            )
        )
    return results
