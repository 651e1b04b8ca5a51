"""collect command — run scheduled collection for configured sites."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from perflens_core.autocollect import DEFAULT_NUMBER_OF_RUNS, Site, autocollect_for_project

console = Console()
logger = logging.getLogger(__name__)


@click.command("collect")
@click.option("--token", "build_token", default=None, help="Build token of an ad-hoc site. Skips configured sites.")
@click.option("--url", "urls", multiple=True, help="URL to measure (repeatable). Used with --token.")
@click.option("--branch", default=None, help="Branch to record. Defaults to the project's base branch.")
@click.option("--runs", "number_of_runs", type=click.IntRange(min=1), default=None, help="Runs per URL (default 3).")
@click.pass_context
def collect_cmd(ctx, build_token: str | None, urls: tuple[str, ...], branch: str | None, number_of_runs: int | None):
    """Collect PageSpeed Insights reports into a new build per site.

    Intended to be run from cron or a scheduled CI workflow. Sites are
    collected one after another; a failing site is reported and the
    remaining sites still run.

    \b
    Required environment variables:
      PSI_API_KEY    PageSpeed Insights API key (or psi_api_key in .perflens.yml)
    """
    from perflens_cli.cli import _build_scoring_client
    from perflens_core.config import load_sites

    config = ctx.obj["config"]
    store = ctx.obj["store"]

    if build_token is not None:
        sites = [Site(build_token=build_token, urls=list(urls), branch=branch, number_of_runs=number_of_runs)]
    else:
        try:
            sites = load_sites(config)
        except ValueError as e:
            raise click.UsageError(f"Invalid sites configuration: {e}")

    if not sites:
        console.print("[yellow]No sites configured. Add a `sites` list to .perflens.yml or pass --token.[/yellow]")
        return

    scoring_client = _build_scoring_client(config)

    failures = 0
    for index, site in enumerate(sites):
        label = site.urls[0] if site.urls else f"site #{index + 1}"
        console.print(f"Collecting [bold]{escape(label)}[/bold] ...")
        try:
            autocollect_for_project(store, scoring_client, site)
        except Exception as e:
            failures += 1
            logger.debug("Collection failed for %s", label, exc_info=True)
            console.print(f"[red]Collection failed for {escape(label)}: {escape(str(e))}[/red]")
            continue
        runs = (site.number_of_runs or DEFAULT_NUMBER_OF_RUNS) * len(site.urls)
        console.print(f"[green]Collected {runs} run(s) for {escape(label)}[/green]")

    if failures:
        raise click.ClickException(f"{failures} of {len(sites)} site(s) failed.")
