"""stats command — median Lighthouse category scores per URL for a build."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from statistics import median

import click
from rich.console import Console
from rich.table import Table

from perflens_cli.commands.project import require_project

console = Console()
logger = logging.getLogger(__name__)

_CATEGORIES = {
    "performance": "Performance",
    "accessibility": "Accessibility",
    "best-practices": "Best Practices",
    "seo": "SEO",
}


def _category_scores(lhr: str) -> dict[str, float] | None:
    """Return 0-100 scores keyed by category id, or None if the report is unreadable."""
    try:
        report = json.loads(lhr)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(report, dict):
        return None
    categories = report.get("categories") or {}
    scores = {}
    for category_id in _CATEGORIES:
        score = (categories.get(category_id) or {}).get("score")
        if isinstance(score, (int, float)):
            scores[category_id] = score * 100
    return scores


def _score_style(score: float) -> str:
    if score >= 90:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


@click.command("stats")
@click.option("--token", "build_token", required=True, help="Build token of the project.")
@click.option("--build", "build_id", type=int, default=None, help="Build id. Defaults to the latest build.")
@click.pass_context
def stats_cmd(ctx, build_token: str, build_id: int | None):
    """Show median category scores per URL for a collected build.

    Each URL is measured several times per build; the median smooths out
    the run-to-run variance PageSpeed Insights is known for.
    """
    store = ctx.obj["store"]
    project = require_project(store, build_token)

    if build_id is None:
        builds = store.list_builds(project.id)
        if not builds:
            console.print("[yellow]No builds found.[/yellow]")
            return
        build = builds[-1]
    else:
        build = store.get_build(build_id)
        if build is None or build.project_id != project.id:
            raise click.UsageError(f"Build #{build_id} not found for project {project.name}.")

    runs = store.list_runs(build.id)
    if not runs:
        console.print(f"[yellow]Build #{build.id} has no runs.[/yellow]")
        return

    scores_by_url: dict[str, dict[str, list[float]]] = defaultdict(lambda: defaultdict(list))
    run_counts: dict[str, int] = defaultdict(int)
    for run in runs:
        run_counts[run.url] += 1
        scores = _category_scores(run.lhr)
        if scores is None:
            logger.warning("Skipping unreadable report for run %s (%s)", run.id, run.url)
            continue
        for category_id, score in scores.items():
            scores_by_url[run.url][category_id].append(score)

    console.print(f"\n[bold]Build #{build.id}[/bold] on [cyan]{build.branch}[/cyan] — {build.commit_message}")

    table = Table(title="Median Scores", show_header=True, header_style="bold cyan")
    table.add_column("URL")
    table.add_column("Runs", justify="right")
    for label in _CATEGORIES.values():
        table.add_column(label, justify="right")

    for url, count in run_counts.items():
        cells = []
        for category_id in _CATEGORIES:
            values = scores_by_url[url][category_id]
            if not values:
                cells.append("[dim]-[/dim]")
                continue
            value = median(values)
            style = _score_style(value)
            cells.append(f"[{style}]{value:.0f}[/{style}]")
        table.add_row(url, str(count), *cells)

    console.print(table)
