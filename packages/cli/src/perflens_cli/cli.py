"""CLI entry point for perflens.

Commands:
  collect  — run scheduled collection for configured sites (the cron entry point)
  project  — register and list monitored projects
  history  — display past builds for a project
  stats    — median Lighthouse scores per URL for a build
  init     — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console

from perflens_cli.commands.collect import collect_cmd
from perflens_cli.commands.history import history_cmd
from perflens_cli.commands.init import init_cmd
from perflens_cli.commands.project import project_cmd
from perflens_cli.commands.stats import stats_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .perflens.yml settings.

    This factory lives in cli.py so neither perflens_core nor perflens_store
    know about the CLI config format.
    """
    from perflens_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path") or ".perflens.db")


def _build_scoring_client(config: dict):
    """Instantiate the PSI client, or raise a UsageError when no API key is configured."""
    from perflens_core.scoring.psi import PSI_ENDPOINT, PsiClient

    api_key = config.get("psi_api_key")
    if not api_key:
        raise click.UsageError(
            "No PageSpeed Insights API key found. Set PSI_API_KEY or add psi_api_key to .perflens.yml.\n"
            "Create a key at https://developers.google.com/speed/docs/insights/v5/get-started"
        )
    return PsiClient(
        api_key=api_key,
        endpoint=config.get("psi_endpoint") or PSI_ENDPOINT,
        strategy=config.get("psi_strategy", "mobile"),
        locale=config.get("psi_locale", "en-US"),
        max_attempts=config.get("psi_max_attempts"),
        timeout=config.get("psi_timeout", 60),
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("perflens"),
    prog_name="perflens",
)
@click.option(
    "--config",
    "config_path",
    default=".perflens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PERFLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Scheduled Lighthouse collection for performance monitoring."""
    from perflens_core.config import load_config

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)

    config = load_config(config_path)
    config["config_path"] = config_path

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(collect_cmd)
main.add_command(project_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
