import os
from pathlib import Path
from typing import Optional

import yaml

from perflens_core.autocollect import Site
from perflens_core.scoring.psi import PSI_ENDPOINT

DEFAULT_CONFIG: dict = {
    "store_path": ".perflens.db",
    "psi_endpoint": PSI_ENDPOINT,
    "psi_strategy": "mobile",  # "mobile" | "desktop"
    "psi_locale": "en-US",
    "psi_max_attempts": 3,
    "psi_timeout": 60,  # seconds per PSI request
    "sites": [],  # list of {build_token, urls, branch, number_of_runs}
}


def load_config(config_path: str = ".perflens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .perflens.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "sites": list(DEFAULT_CONFIG["sites"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The API key may live in the file for local use; the environment wins when set.
    api_key = os.environ.get("PSI_API_KEY")
    if api_key:
        config["psi_api_key"] = api_key
    config.setdefault("psi_api_key", None)

    return config


def _first(entry: dict, *keys):
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def load_sites(config: dict) -> list[Site]:
    """
    Build Site objects from the ``sites`` list in config.

    Accepts both snake_case and the camelCase keys used by LHCI server configs
    (``buildToken``, ``numberOfRuns``).
    """
    sites = []
    for index, entry in enumerate(config.get("sites") or []):
        if not isinstance(entry, dict):
            raise ValueError(f"sites[{index}] must be a mapping, got {type(entry).__name__}")

        urls = entry.get("urls") or []
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise ValueError(f"sites[{index}].urls must be a list of strings")

        number_of_runs = _first(entry, "number_of_runs", "numberOfRuns")
        if number_of_runs is not None and (
            isinstance(number_of_runs, bool) or not isinstance(number_of_runs, int) or number_of_runs < 1
        ):
            raise ValueError(f"sites[{index}].number_of_runs must be a positive integer")

        sites.append(
            Site(
                build_token=_first(entry, "build_token", "buildToken"),
                urls=list(urls),
                branch=entry.get("branch"),
                number_of_runs=number_of_runs,
            )
        )
    return sites
