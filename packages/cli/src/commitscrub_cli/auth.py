"""GitHub credential resolution.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (CI / explicit override)
  2. `gh auth token` (GitHub CLI session, works after `gh auth login`)
  3. The hosting environment's GitHub connector (REPLIT_CONNECTORS_HOSTNAME
     plus REPL_IDENTITY or WEB_REPL_RENEWAL)
"""

from __future__ import annotations

import logging
import os
import subprocess

from commitscrub_core.credentials import ConnectorTokenProvider, StaticTokenProvider, TokenProvider

logger = logging.getLogger(__name__)


def resolve_github_token() -> str | None:
    """Return a personal GitHub token or None if no static source is available.

    Never raises.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out.
        pass

    return None


def build_token_provider(config: dict) -> TokenProvider | None:
    """Pick a token provider from the environment, or None when nothing is configured."""
    token = config.get("github_token")
    if token:
        return StaticTokenProvider(token)

    if config.get("connectors_hostname") and config.get("connectors_identity"):
        logger.debug("Using the GitHub connector service for credentials.")
        return ConnectorTokenProvider(config["connectors_hostname"], config["connectors_identity"])

    return None
