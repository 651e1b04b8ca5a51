"""history command — display past builds from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from perflens_cli.commands.project import require_project

console = Console()


@click.command("history")
@click.option("--token", "build_token", required=True, help="Build token of the project.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of builds to show.")
@click.pass_context
def history_cmd(ctx, build_token: str, limit: int):
    """Show past collected builds for a project."""
    store = ctx.obj["store"]
    project = require_project(store, build_token)

    builds = store.list_builds(project.id)
    if not builds:
        console.print("[yellow]No builds found.[/yellow]")
        return

    # Show most recent first, capped at --limit.
    builds = list(reversed(builds))[:limit]

    table = Table(title=f"Build History — {project.name}", show_header=True, header_style="bold cyan")
    table.add_column("Build", style="bold", width=7)
    table.add_column("Branch", max_width=24)
    table.add_column("Hash", width=8)
    table.add_column("Lifecycle", width=10)
    table.add_column("Runs", justify="right", width=6)
    table.add_column("Run At", width=20)

    _lifecycle_style = {"unsealed": "yellow", "sealed": "green"}

    for b in builds:
        style = _lifecycle_style.get(b.lifecycle, "white")
        table.add_row(
            f"#{b.id}",
            b.branch,
            b.hash[:7],
            f"[{style}]{b.lifecycle}[/{style}]",
            str(len(store.list_runs(b.id))),
            b.run_at[:19].replace("T", " "),
        )

    console.print(table)
