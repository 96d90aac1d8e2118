"""Helpers shared by the commands that talk to GitHub."""

from __future__ import annotations

from contextlib import contextmanager

import click

from commitscrub_core.errors import AuthRequiredError, CommitScrubError

STATUS_STYLE = {
    "pending": "dim",
    "scanning": "cyan",
    "clean": "green",
    "needs_cleanup": "yellow",
    "processing": "cyan",
    "error": "red",
}


def require_service(ctx: click.Context):
    service = ctx.obj.get("service") if ctx.obj else None
    if service is None:
        raise click.UsageError(
            "No GitHub credentials found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    return service


@contextmanager
def reported_errors():
    """Turn core errors into a clean non-zero exit with the error message."""
    try:
        yield
    except AuthRequiredError as e:
        raise click.ClickException(f"GitHub authentication required: {e}") from e
    except CommitScrubError as e:
        raise click.ClickException(str(e)) from e
    except ValueError as e:
        raise click.UsageError(str(e)) from e


def styled_status(status: str) -> str:
    style = STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"
