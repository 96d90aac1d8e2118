"""CLI entry point for commitscrub.

Commands:
  add       register a repository
  list      show registered repositories and their latest status
  remove    forget a registered repository
  scan      classify the default branch's commits
  cleanup   rewrite history so flagged commits carry clean messages
  status    check the GitHub connection
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from commitscrub_cli.commands.cleanup import cleanup_cmd
from commitscrub_cli.commands.repos import add_cmd, list_cmd, remove_cmd
from commitscrub_cli.commands.scan import scan_cmd
from commitscrub_cli.commands.status import status_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .commitscrub.yml settings.

    Store selection hierarchy:
      store: gist   → GistStore   (requires gist_id and github_token)
      store: sqlite → SQLiteStore (requires store_path or uses .commitscrub.db)
      (default)     → MemoryStore (nothing survives the process)
    """
    from commitscrub_store.memory import MemoryStore

    store_type = config.get("store", "memory")

    if store_type == "gist":
        from commitscrub_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to memory.[/yellow]")
            return MemoryStore()
        return GistStore(gist_id=gist_id, token=token)

    if store_type == "sqlite":
        from commitscrub_store.sqlite import SQLiteStore

        db_path = config.get("store_path", ".commitscrub.db")
        return SQLiteStore(db_path=db_path)

    return MemoryStore()


def _build_service(config: dict, store):
    """Wire the GitHub commit graph and the store into a CleanupService.

    Returns None when no credential source is available; commands that need
    the remote raise a UsageError in that case.
    """
    from commitscrub_cli.auth import build_token_provider
    from commitscrub_core.gh.graph import GitHubCommitGraph
    from commitscrub_core.service import CleanupService

    provider = build_token_provider(config)
    if provider is None:
        return None
    graph = GitHubCommitGraph(provider, base_url=config.get("github_api_url"))
    return CleanupService(
        graph,
        store,
        max_commits=config["max_commits"],
        per_page=config["per_page"],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("commitscrub"),
    prog_name="commitscrub",
)
@click.option(
    "--config",
    "config_path",
    default=".commitscrub.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="COMMITSCRUB_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Find and clean up auto-generated commits in GitHub repositories."""
    from commitscrub_cli.auth import resolve_github_token
    from commitscrub_core.config import load_config

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve token early so the store and every subcommand share it.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["service"] = _build_service(config, store)
    ctx.call_on_close(store.close)


main.add_command(add_cmd)
main.add_command(list_cmd)
main.add_command(remove_cmd)
main.add_command(scan_cmd)
main.add_command(cleanup_cmd)
main.add_command(status_cmd)
