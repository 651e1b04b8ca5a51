"""Tests for perflens-store implementations."""

from __future__ import annotations

import re

import pytest

from perflens_store.base import BaseStore
from perflens_store.models import Build, Run
from perflens_store.sqlite import SQLiteStore


def _make_build(project_id=1, branch="main", run_at="2026-10-16T12:00:00+00:00"):
    return Build(
        project_id=project_id,
        branch=branch,
        hash="a" * 40,
        author="Lighthouse CI Server <no-reply@example.com>",
        avatar_url="https://www.gravatar.com/avatar/f52a99e6bec57a971cbe232b7c5cc49f.jpg?d=identicon",
        commit_message="Autocollected at 2026-10-16 12:00:00 UTC",
        committed_at=run_at,
        run_at=run_at,
        external_build_url="https://example.com",
    )


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(db_path=str(tmp_path / "test.db"))
    yield s
    s.close()


# ---------------------------------------------------------------------------
# BaseStore
# ---------------------------------------------------------------------------


def test_sqlite_store_is_a_base_store(store):
    assert isinstance(store, BaseStore)


def test_base_store_close_is_optional():
    class _Minimal(BaseStore):
        create_project = find_project_by_token = list_projects = None
        create_build = get_build = list_builds = None
        create_run = list_runs = None

    _Minimal().close()  # must not raise


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class TestProjects:
    def test_create_project_generates_token(self, store):
        project = store.create_project("Marketing site", base_branch="trunk")
        assert project.id is not None
        assert project.name == "Marketing site"
        assert project.base_branch == "trunk"
        assert re.fullmatch(r"[0-9a-f-]{36}", project.token)
        assert project.created_at

    def test_tokens_are_unique(self, store):
        a = store.create_project("a")
        b = store.create_project("b")
        assert a.token != b.token

    def test_find_project_by_token(self, store):
        project = store.create_project("site")
        assert store.find_project_by_token(project.token) == project

    @pytest.mark.parametrize("token", ["garbage", "", None, "'; DROP TABLE projects; --"])
    def test_find_project_by_unknown_token_returns_none(self, store, token):
        store.create_project("site")
        assert store.find_project_by_token(token) is None

    def test_list_projects(self, store):
        assert store.list_projects() == []
        store.create_project("a")
        store.create_project("b")
        assert [p.name for p in store.list_projects()] == ["a", "b"]


# ---------------------------------------------------------------------------
# Builds and runs
# ---------------------------------------------------------------------------


class TestBuilds:
    def test_create_build_assigns_id(self, store):
        project = store.create_project("site")
        build = store.create_build(_make_build(project_id=project.id))
        assert build.id is not None
        assert build.lifecycle == "unsealed"

    def test_create_build_does_not_mutate_input(self, store):
        project = store.create_project("site")
        record = _make_build(project_id=project.id)
        store.create_build(record)
        assert record.id is None

    def test_get_build_roundtrip(self, store):
        project = store.create_project("site")
        build = store.create_build(_make_build(project_id=project.id, branch="dev"))
        assert store.get_build(build.id) == build

    def test_get_missing_build_returns_none(self, store):
        assert store.get_build(999) is None

    def test_list_builds_ordered_and_isolated(self, store):
        a = store.create_project("a")
        b = store.create_project("b")
        later = store.create_build(_make_build(project_id=a.id, run_at="2026-10-16T13:00:00+00:00"))
        earlier = store.create_build(_make_build(project_id=a.id, run_at="2026-10-16T12:00:00+00:00"))
        store.create_build(_make_build(project_id=b.id))

        assert [x.id for x in store.list_builds(a.id)] == [earlier.id, later.id]
        assert len(store.list_builds(b.id)) == 1


class TestRuns:
    def test_create_and_list_runs_in_creation_order(self, store):
        project = store.create_project("site")
        build = store.create_build(_make_build(project_id=project.id))
        for url in ["https://example.com/1", "https://example.com/2", "https://example.com/1"]:
            store.create_run(Run(project_id=project.id, build_id=build.id, url=url, lhr='{"lhr": true}'))

        runs = store.list_runs(build.id)
        assert [r.url for r in runs] == ["https://example.com/1", "https://example.com/2", "https://example.com/1"]
        assert all(r.build_id == build.id and r.project_id == project.id for r in runs)
        assert runs[0].lhr == '{"lhr": true}'

    def test_create_run_assigns_id(self, store):
        project = store.create_project("site")
        build = store.create_build(_make_build(project_id=project.id))
        run = store.create_run(Run(project_id=project.id, build_id=build.id, url="https://a.test", lhr="{}"))
        assert run.id is not None

    def test_runs_isolated_by_build(self, store):
        project = store.create_project("site")
        first = store.create_build(_make_build(project_id=project.id))
        second = store.create_build(_make_build(project_id=project.id))
        store.create_run(Run(project_id=project.id, build_id=first.id, url="https://a.test", lhr="{}"))

        assert len(store.list_runs(first.id)) == 1
        assert store.list_runs(second.id) == []


def test_persists_across_connections(tmp_path):
    """Data written by one SQLiteStore instance must be readable by another."""
    db_path = str(tmp_path / "test.db")
    store_a = SQLiteStore(db_path=db_path)
    project = store_a.create_project("site")
    build = store_a.create_build(_make_build(project_id=project.id))
    store_a.create_run(Run(project_id=project.id, build_id=build.id, url="https://a.test", lhr="{}"))
    store_a.close()

    store_b = SQLiteStore(db_path=db_path)
    assert store_b.find_project_by_token(project.token) == project
    assert len(store_b.list_runs(build.id)) == 1
    store_b.close()
