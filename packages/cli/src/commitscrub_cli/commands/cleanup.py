"""cleanup command: rewrite history to sanitize or drop flagged commits."""

from __future__ import annotations

import click
from rich.console import Console

from commitscrub_cli.commands._common import reported_errors, require_service
from commitscrub_cli.commands.scan import print_commits

console = Console()


def _resolve_targets(classified, requested: tuple[str, ...]) -> list[str]:
    """Expand (possibly abbreviated) SHAs against the scanned commits.

    With no explicit SHAs, every flagged commit is a target.
    """
    if not requested:
        return [c.id for c in classified if c.is_tool_generated]

    resolved = []
    for prefix in requested:
        matches = [c.id for c in classified if c.id.startswith(prefix.lower())]
        if not matches:
            raise click.UsageError(f"Commit {prefix} is not in the scanned history.")
        if len(matches) > 1:
            raise click.UsageError(f"Commit prefix {prefix} is ambiguous.")
        resolved.append(matches[0])
    return resolved


@click.command("cleanup")
@click.argument("url")
@click.option(
    "--commit",
    "commits",
    multiple=True,
    help="SHA (or unique prefix) to clean. Repeatable. Defaults to every flagged commit.",
)
@click.option("--drop", is_flag=True, help="Remove the commits from history instead of cleaning their messages.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def cleanup_cmd(ctx, url: str, commits: tuple[str, ...], drop: bool, yes: bool):
    """Rewrite the default branch of URL and force-push the result.

    Every commit from the oldest target to the tip is recreated; the branch is
    moved only if all of them were recreated successfully. Anyone with a clone
    will need to re-fetch and reset afterwards.
    """
    service = require_service(ctx)
    with reported_errors():
        classified = service.scan(url)

    targets = _resolve_targets(classified, commits)
    if not targets:
        console.print("[green]No auto-generated commits to clean up.[/green]")
        return

    chosen = set(targets)
    print_commits([c for c in classified if c.id in chosen], title="Commits to rewrite", show_all=True)
    action = "drop" if drop else "clean the messages of"
    if not yes and not click.confirm(
        f"\nThis will {action} {len(targets)} commit(s) and force-update the branch. Continue?",
        default=False,
    ):
        console.print("[yellow]Aborted. Nothing was changed.[/yellow]")
        return

    with reported_errors():
        result = service.cleanup(url, targets, drop=drop)

    verb = "Dropped" if drop else "Rewrote"
    console.print(f"[green]{verb} {result.rewritten_count} commit(s).[/green] New head: {result.new_head_id[:7]}")
    for note in result.errors:
        console.print(f"  [dim]{note}[/dim]")
