"""init command — interactive setup wizard.

Registers a project, appends a `sites` entry to .perflens.yml and can
generate a scheduled GitHub Actions workflow that runs `perflens collect`.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import click
import yaml
from rich.console import Console

from perflens_core.autocollect import DEFAULT_NUMBER_OF_RUNS

console = Console()
logger = logging.getLogger(__name__)

_WORKFLOW_TEMPLATE = """\
name: perflens collect

on:
  schedule:
    - cron: "{schedule}"
  workflow_dispatch:

jobs:
  collect:
    runs-on: ubuntu-latest

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Restore collection database
        uses: actions/cache@v4
        with:
          path: {store_path}
          key: perflens-db-${{{{ github.run_id }}}}
          restore-keys: perflens-db-

      - name: Install perflens
        run: pip install "perflens=={version}"

      - name: Collect PageSpeed Insights reports
        env:
          PSI_API_KEY: ${{{{ secrets.PSI_API_KEY }}}}
        run: perflens --config {config_path} collect
"""


@click.command("init")
@click.option("--name", default=None, help="Project name. Auto-detected from git remote.")
@click.pass_context
def init_cmd(ctx, name: str | None):
    """Set up perflens for a site.

    Registers a project, adds a site entry to .perflens.yml, and optionally
    generates a scheduled GitHub Actions workflow.
    """
    store = ctx.obj["store"]
    config = ctx.obj["config"]
    config_path = config.get("config_path", ".perflens.yml")

    console.print("\n[bold cyan]perflens init[/bold cyan] — site setup wizard\n")

    # --- Project ---
    if name is None:
        name = click.prompt("Project name", default=_detect_repo_from_git() or Path.cwd().name)
    base_branch = click.prompt("Base branch", default="main")

    # --- Site ---
    raw_urls = click.prompt("URLs to measure (comma-separated)")
    urls = [u.strip() for u in raw_urls.split(",") if u.strip()]
    if not urls:
        raise click.UsageError("At least one URL is required.")
    number_of_runs = click.prompt("Runs per URL", type=click.IntRange(min=1), default=DEFAULT_NUMBER_OF_RUNS)

    project = store.create_project(name=name, base_branch=base_branch)
    console.print(f"[green]Registered project {project.name} (id {project.id})[/green]")

    site: dict = {"build_token": project.token, "urls": urls}
    if number_of_runs != DEFAULT_NUMBER_OF_RUNS:
        site["number_of_runs"] = number_of_runs

    # --- Write .perflens.yml ---
    _write_config(config_path, site, config.get("store_path"))
    console.print(f"[green]Updated {config_path}[/green]")

    # --- GitHub Actions workflow ---
    setup_ci = click.confirm("\nGenerate .github/workflows/perflens.yml for scheduled collection?", default=False)
    if setup_ci:
        schedule = click.prompt("Cron schedule (UTC)", default="0 */6 * * *")
        _write_workflow(schedule, config_path, config.get("store_path") or ".perflens.db")
        console.print("[green]Created .github/workflows/perflens.yml[/green]")
        console.print(
            "\n[yellow]Remember to add [bold]PSI_API_KEY[/bold] to your "
            "GitHub repository secrets (Settings → Secrets → Actions).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Collect now with: [bold]perflens collect[/bold]")


def _detect_repo_from_git() -> str | None:
    """Try to detect a project name from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        # https://github.com/owner/repo.git  →  owner/repo
        # git@github.com:owner/repo.git      →  owner/repo
        if "github.com" not in url:
            return None
        slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
        return slug if "/" in slug else None
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _write_config(config_path: str, site: dict, store_path: str | None) -> None:
    """Append a site to the config file, preserving any existing keys and sites."""
    path = Path(config_path)
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    if store_path and "store_path" not in existing:
        existing["store_path"] = store_path
    existing["sites"] = list(existing.get("sites") or []) + [site]
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    """Read the current perflens version from the installed package metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("perflens")
    except PackageNotFoundError:
        logger.debug("perflens metadata not found; pinning workflow to 0.1.0")
        return "0.1.0"


def _write_workflow(schedule: str, config_path: str, store_path: str) -> None:
    """Write the GitHub Actions workflow file."""
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    workflow_path = workflow_dir / "perflens.yml"
    workflow_path.write_text(
        _WORKFLOW_TEMPLATE.format(
            schedule=schedule,
            config_path=config_path,
            store_path=store_path,
            version=_get_version(),
        )
    )
