"""add / list / remove: manage the repository registry."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from commitscrub_cli.commands._common import reported_errors, require_service, styled_status

console = Console()


@click.command("add")
@click.argument("url")
@click.pass_context
def add_cmd(ctx, url: str):
    """Register a GitHub repository by URL."""
    service = require_service(ctx)
    with reported_errors():
        record = service.register(url)
    console.print(f"[green]Added[/green] {record.owner}/{record.name} ({record.visibility})")


@click.command("list")
@click.pass_context
def list_cmd(ctx):
    """Show registered repositories and their latest scan results."""
    store = ctx.obj.get("store") if ctx.obj else None
    records = store.list_repositories() if store is not None else []
    if not records:
        console.print("[yellow]No repositories registered. Add one with `commitscrub add URL`.[/yellow]")
        return

    table = Table(title="Repositories", show_header=True, header_style="bold cyan")
    table.add_column("Repository", style="bold")
    table.add_column("Visibility", width=10)
    table.add_column("Status", width=14)
    table.add_column("Flagged", justify="right", width=8)
    table.add_column("Last Scanned", width=20)

    for r in records:
        table.add_row(
            f"{r.owner}/{r.name}",
            r.visibility,
            styled_status(r.status),
            "—" if r.tool_commits_found is None else str(r.tool_commits_found),
            (r.last_scanned_at or "never")[:19].replace("T", " "),
        )

    console.print(table)


@click.command("remove")
@click.argument("url")
@click.pass_context
def remove_cmd(ctx, url: str):
    """Forget a registered repository. Its history on GitHub is not touched."""
    from commitscrub_core.gh.url import parse_repo_url

    store = ctx.obj["store"]
    with reported_errors():
        repo = parse_repo_url(url)
    record = store.get_by_url(repo.url)
    if record is None or not store.delete(record.id):
        raise click.ClickException(f"Repository not registered: {repo.url}")
    console.print(f"Removed {repo.full_name}")
