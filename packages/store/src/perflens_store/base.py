"""Abstract store interface.

Any storage backend (SQLite, Postgres, the LHCI server API) implements this
interface. The collector and CLI depend on BaseStore, never on a concrete
backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perflens_store.models import Build, Project, Run


class BaseStore(ABC):
    """Pluggable persistence layer for projects, builds and runs.

    Implementations must be safe to call from scheduled jobs where no
    interactive credentials are available. All configuration happens via
    constructor arguments resolved at init time.
    """

    @abstractmethod
    def create_project(self, name: str, base_branch: str = "main") -> Project:
        """Register a project and return it with a freshly generated build token."""

    @abstractmethod
    def find_project_by_token(self, token: str | None) -> Project | None:
        """Return the project owning ``token``, or None.

        Must accept arbitrary input (including None) and never raise on a miss.
        """

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """Return all registered projects, oldest first."""

    @abstractmethod
    def create_build(self, build: Build) -> Build:
        """Persist a build and return a copy carrying its assigned id."""

    @abstractmethod
    def get_build(self, build_id: int) -> Build | None:
        """Return a single build, or None if it does not exist."""

    @abstractmethod
    def list_builds(self, project_id: int) -> list[Build]:
        """Return a project's builds ordered by run_at, oldest first."""

    @abstractmethod
    def create_run(self, run: Run) -> Run:
        """Persist a run and return a copy carrying its assigned id."""

    @abstractmethod
    def list_runs(self, build_id: int) -> list[Run]:
        """Return a build's runs in creation order."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Subclasses that need cleanup override this; the default is a no-op.
        """
