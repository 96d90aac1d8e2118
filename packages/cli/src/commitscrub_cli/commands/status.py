"""status command: check the GitHub connection."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("status")
@click.pass_context
def status_cmd(ctx):
    """Show which GitHub account the current credentials belong to."""
    service = ctx.obj.get("service") if ctx.obj else None
    if service is None:
        console.print("[red]Not connected[/red]: no GitHub credentials found.")
        ctx.exit(1)

    status = service.connection_status()
    if not status["connected"]:
        console.print(f"[red]Not connected[/red]: {status['error']}")
        ctx.exit(1)

    name = f" ({status['name']})" if status.get("name") else ""
    console.print(f"[green]Connected[/green] as [bold]{status['login']}[/bold]{name}")
