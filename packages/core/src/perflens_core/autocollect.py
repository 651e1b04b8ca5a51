"""Scheduled collection for a single configured site.

autocollect_for_project() is what the scheduler calls on every tick:

    find_project_by_token() → create_build() → for each repeat, for each URL:
        run_until_success(url) → create_run()

Every call is made one at a time so run creation order is deterministic and
the scoring service never sees more than one request per site. Errors are
not caught here; the caller decides whether to report or retry the site on
a later tick. A failure mid-loop leaves the build and any runs already
created in place.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from perflens_core.utils.gravatar import get_gravatar_url
from perflens_store.models import Build, Run

if TYPE_CHECKING:
    from perflens_core.scoring.base import BaseScoringClient
    from perflens_store.base import BaseStore

DEFAULT_NUMBER_OF_RUNS = 3
AUTHOR = "Lighthouse CI Server <no-reply@example.com>"


class AutocollectError(ValueError):
    """Base class for site configuration problems detected before collection."""


class InvalidBuildTokenError(AutocollectError):
    def __init__(self, token):
        super().__init__(f'Invalid build token "{token}"')
        self.token = token


class NoUrlsConfiguredError(AutocollectError):
    def __init__(self):
        super().__init__("No URLs set")


@dataclass
class Site:
    """A site to collect, as configured under ``sites`` in .perflens.yml."""

    build_token: str | None = None
    urls: list[str] = field(default_factory=list)
    branch: str | None = None
    number_of_runs: int | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_build_hash(now: datetime) -> str:
    """Return a git-commit-shaped hex digest unique to this collection."""
    seed = f"{now.isoformat()}-{uuid.uuid4()}"
    return hashlib.sha1(seed.encode("utf-8")).hexdigest()


def build_for_project(
    project,
    site: Site,
    now: datetime,
    hash_factory: Callable[[datetime], str] = generate_build_hash,
) -> Build:
    """Synthesize the build record for an autocollected batch.

    There is no real commit behind a scheduled collection, so the commit
    fields are filled with a fixed author and a timestamped message.
    """
    timestamp = now.isoformat()
    return Build(
        project_id=project.id,
        lifecycle="unsealed",
        branch=site.branch or project.base_branch,
        hash=hash_factory(now),
        author=AUTHOR,
        avatar_url=get_gravatar_url(AUTHOR),
        commit_message=f"Autocollected at {now:%Y-%m-%d %H:%M:%S %Z}".rstrip(),
        committed_at=timestamp,
        run_at=timestamp,
        external_build_url=site.urls[0],
    )


def autocollect_for_project(
    storage: BaseStore,
    scoring_client: BaseScoringClient,
    site: Site,
    *,
    clock: Callable[[], datetime] = _utcnow,
    hash_factory: Callable[[datetime], str] = generate_build_hash,
) -> None:
    """Collect ``number_of_runs`` reports for every URL of ``site`` into a new build.

    Raises InvalidBuildTokenError when the token resolves to no project and
    NoUrlsConfiguredError when the site has no URLs. Scoring and storage
    errors propagate unchanged.
    """
    project = storage.find_project_by_token(site.build_token)
    if not project:
        raise InvalidBuildTokenError(site.build_token)

    urls = site.urls
    if not urls:
        raise NoUrlsConfiguredError()

    build = storage.create_build(build_for_project(project, site, clock(), hash_factory))

    number_of_runs = site.number_of_runs or DEFAULT_NUMBER_OF_RUNS
    # Repeat index is the outer loop: each pass measures every URL once.
    for _ in range(number_of_runs):
        for url in urls:
            lhr = scoring_client.run_until_success(url)
            storage.create_run(Run(project_id=project.id, build_id=build.id, url=url, lhr=lhr))
