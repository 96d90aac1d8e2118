"""Strip tool-injected metadata lines from commit messages."""

from __future__ import annotations

import re

FALLBACK_MESSAGE = "Updated files"

_MIN_LENGTH = 5

# Each label removes its whole line, trailing newline included.
_METADATA_LINE_RE = re.compile(
    r"^[^\S\n]*(?:"
    r"replit-commit-author:"
    r"|replit-commit-session-id:"
    r"|replit-commit-checkpoint-type:"
    r"|prompt:"
    r"|auto-generated by\b"
    r")[^\n]*(?:\n|\Z)",
    re.IGNORECASE | re.MULTILINE,
)
_BLANK_RUN_RE = re.compile(r"\n(?:[^\S\n]*\n){2,}")


def sanitize_message(message: str) -> str:
    """Return ``message`` without metadata lines, never empty.

    Idempotent: sanitize_message(sanitize_message(m)) == sanitize_message(m).
    """
    cleaned = _METADATA_LINE_RE.sub("", message or "")
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)
    cleaned = cleaned.strip()
    if len(cleaned) < _MIN_LENGTH:
        return FALLBACK_MESSAGE
    return cleaned
