"""scan command: classify a repository's commits."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from commitscrub_cli.commands._common import reported_errors, require_service

console = Console()


def print_commits(classified, title: str, show_all: bool = False) -> None:
    rows = [c for c in classified if show_all or c.is_tool_generated]
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("SHA", width=8)
    table.add_column("Flag", width=4)
    table.add_column("Message", max_width=60)
    table.add_column("Author", max_width=24)
    table.add_column("Date", width=20)

    for c in rows:
        first_line = (c.message.splitlines() or [""])[0]
        table.add_row(
            c.id[:7],
            "[yellow]●[/yellow]" if c.is_tool_generated else "",
            first_line[:60],
            c.commit.author_name,
            c.commit.author_date.isoformat()[:19].replace("T", " "),
        )
    console.print(table)


@click.command("scan")
@click.argument("url")
@click.option("--all", "show_all", is_flag=True, help="List every commit, not only flagged ones.")
@click.pass_context
def scan_cmd(ctx, url: str, show_all: bool):
    """Scan a repository's default branch for auto-generated commits.

    Read-only: nothing on GitHub changes. Unregistered repositories are
    registered on the fly.
    """
    service = require_service(ctx)
    with reported_errors():
        classified = service.scan(url)

    flagged = [c for c in classified if c.is_tool_generated]
    if not flagged and not show_all:
        console.print(f"[green]No auto-generated commits found in {len(classified)} commit(s).[/green]")
        return

    print_commits(classified, title=f"Scan: {url}", show_all=show_all)
    console.print(
        f"\n[bold]{len(flagged)}[/bold] of {len(classified)} commit(s) flagged. "
        "Run `commitscrub cleanup URL` to rewrite them."
    )
