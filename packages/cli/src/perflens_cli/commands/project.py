"""project commands — register and list monitored projects."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


def require_project(store, token: str):
    """Resolve a build token to its project or fail with a UsageError."""
    project = store.find_project_by_token(token)
    if project is None:
        raise click.UsageError(f'Invalid build token "{token}"')
    return project


@click.group("project")
def project_cmd():
    """Manage monitored projects."""


@project_cmd.command("create")
@click.option("--name", required=True, help="Human-readable project name.")
@click.option("--base-branch", default="main", show_default=True, help="Branch recorded when a site sets none.")
@click.pass_context
def create_cmd(ctx, name: str, base_branch: str):
    """Register a project and print its build token."""
    store = ctx.obj["store"]
    project = store.create_project(name=name, base_branch=base_branch)
    console.print(f"[green]Created project [bold]{project.name}[/bold] (id {project.id})[/green]")
    console.print(f"Build token: [bold]{project.token}[/bold]")
    console.print("[dim]Add it as `build_token` under `sites` in .perflens.yml.[/dim]")


@project_cmd.command("list")
@click.pass_context
def list_cmd(ctx):
    """List registered projects."""
    projects = ctx.obj["store"].list_projects()
    if not projects:
        console.print("[yellow]No projects registered. Run `perflens project create --name ...`.[/yellow]")
        return

    table = Table(title="Projects", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name", max_width=30)
    table.add_column("Base Branch")
    table.add_column("Build Token", no_wrap=True)
    for p in projects:
        table.add_row(str(p.id), p.name, p.base_branch, p.token)

    console.print(table)
