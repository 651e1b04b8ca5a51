"""Project, build and run data models.

Decoupled from perflens_core so the store layer can be used independently
and perflens_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Project:
    """A monitored application, resolved by its build token."""

    id: int
    name: str
    base_branch: str
    token: str
    created_at: str = ""  # ISO-8601 UTC timestamp


@dataclass
class Build:
    """One batch of measurements for a project and branch.

    The store assigns ``id`` on create_build(); callers leave it as None.
    """

    project_id: int
    branch: str
    hash: str
    author: str
    avatar_url: str
    commit_message: str
    committed_at: str  # ISO-8601 UTC timestamp
    run_at: str  # ISO-8601 UTC timestamp
    external_build_url: str
    lifecycle: str = "unsealed"
    id: int | None = None


@dataclass
class Run:
    """A single scoring result for one URL within a build."""

    project_id: int
    build_id: int
    url: str
    lhr: str  # serialized Lighthouse report, opaque to the store
    id: int | None = None
