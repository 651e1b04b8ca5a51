"""SQLiteStore — local file-based store for scheduled collection.

Schema:
  projects — one row per monitored application, keyed by its build token.
  builds   — one row per collection invocation.
  runs     — one row per (URL, repeat); `lhr` holds the raw report JSON.
"""

from __future__ import annotations

import dataclasses
import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from perflens_store.base import BaseStore
from perflens_store.models import Build, Project, Run

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    base_branch  TEXT NOT NULL DEFAULT 'main',
    token        TEXT NOT NULL UNIQUE,
    created_at   TEXT
);
CREATE TABLE IF NOT EXISTS builds (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id          INTEGER NOT NULL REFERENCES projects (id),
    lifecycle           TEXT NOT NULL,
    branch              TEXT,
    hash                TEXT,
    author              TEXT,
    avatar_url          TEXT,
    commit_message      TEXT,
    committed_at        TEXT,
    run_at              TEXT,
    external_build_url  TEXT
);
CREATE TABLE IF NOT EXISTS runs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id  INTEGER NOT NULL REFERENCES projects (id),
    build_id    INTEGER NOT NULL REFERENCES builds (id),
    url         TEXT NOT NULL,
    lhr         TEXT
);
CREATE INDEX IF NOT EXISTS idx_projects_token ON projects (token);
CREATE INDEX IF NOT EXISTS idx_builds_project ON builds (project_id);
CREATE INDEX IF NOT EXISTS idx_runs_build     ON runs (build_id);
"""


class SQLiteStore(BaseStore):
    """Stores projects, builds and runs in a local SQLite database file.

    The database file path defaults to `.perflens.db` in the current working
    directory. Configure via .perflens.yml: `store_path: /path/to/perflens.db`.
    """

    def __init__(self, db_path: str = ".perflens.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def create_project(self, name: str, base_branch: str = "main") -> Project:
        token = str(uuid.uuid4())
        created_at = datetime.now(timezone.utc).isoformat()
        cursor = self._conn.execute(
            "INSERT INTO projects (name, base_branch, token, created_at) VALUES (?, ?, ?, ?)",
            (name, base_branch, token, created_at),
        )
        self._conn.commit()
        logger.debug("Created project %r (id=%d)", name, cursor.lastrowid)
        return Project(id=cursor.lastrowid, name=name, base_branch=base_branch, token=token, created_at=created_at)

    def find_project_by_token(self, token: str | None) -> Project | None:
        if not token:
            return None
        row = self._conn.execute("SELECT * FROM projects WHERE token=?", (str(token),)).fetchone()
        return self._row_to_project(row) if row else None

    def list_projects(self) -> list[Project]:
        rows = self._conn.execute("SELECT * FROM projects ORDER BY id").fetchall()
        return [self._row_to_project(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Builds                                                               #
    # ------------------------------------------------------------------ #

    def create_build(self, build: Build) -> Build:
        cursor = self._conn.execute(
            """
            INSERT INTO builds
              (project_id, lifecycle, branch, hash, author, avatar_url,
               commit_message, committed_at, run_at, external_build_url)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                build.project_id,
                build.lifecycle,
                build.branch,
                build.hash,
                build.author,
                build.avatar_url,
                build.commit_message,
                build.committed_at,
                build.run_at,
                build.external_build_url,
            ),
        )
        self._conn.commit()
        return dataclasses.replace(build, id=cursor.lastrowid)

    def get_build(self, build_id: int) -> Build | None:
        row = self._conn.execute("SELECT * FROM builds WHERE id=?", (build_id,)).fetchone()
        return self._row_to_build(row) if row else None

    def list_builds(self, project_id: int) -> list[Build]:
        rows = self._conn.execute(
            "SELECT * FROM builds WHERE project_id=? ORDER BY run_at, id",
            (project_id,),
        ).fetchall()
        return [self._row_to_build(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Runs                                                                 #
    # ------------------------------------------------------------------ #

    def create_run(self, run: Run) -> Run:
        cursor = self._conn.execute(
            "INSERT INTO runs (project_id, build_id, url, lhr) VALUES (?, ?, ?, ?)",
            (run.project_id, run.build_id, run.url, run.lhr),
        )
        self._conn.commit()
        return dataclasses.replace(run, id=cursor.lastrowid)

    def list_runs(self, build_id: int) -> list[Run]:
        rows = self._conn.execute("SELECT * FROM runs WHERE build_id=? ORDER BY id", (build_id,)).fetchall()
        return [
            Run(id=r["id"], project_id=r["project_id"], build_id=r["build_id"], url=r["url"], lhr=r["lhr"] or "")
            for r in rows
        ]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            base_branch=row["base_branch"],
            token=row["token"],
            created_at=row["created_at"] or "",
        )

    @staticmethod
    def _row_to_build(row: sqlite3.Row) -> Build:
        return Build(
            id=row["id"],
            project_id=row["project_id"],
            lifecycle=row["lifecycle"],
            branch=row["branch"] or "",
            hash=row["hash"] or "",
            author=row["author"] or "",
            avatar_url=row["avatar_url"] or "",
            commit_message=row["commit_message"] or "",
            committed_at=row["committed_at"] or "",
            run_at=row["run_at"] or "",
            external_build_url=row["external_build_url"] or "",
        )
