"""
tracker/store.py -- SQLAlchemy-backed persistence layer for projects and tasks.

Uses SQLAlchemy Core (not ORM) so the dataclasses in tracker/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. TrackerStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Route
handlers never touch SQL directly.

Every operation is keyed by the entity's integer ID. Reads return None for a
missing row; updates and deletes return False. Storage errors propagate as
SQLAlchemyError and become 500s in the API layer.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TrackerStore("sqlite:///taskboard.db")
    project_id = store.create_project(Project(name="Launch"))
    task_id = store.create_task(Task(name="Write docs", project_id=project_id, assigned_to_id=1))
    store.update_task(task_id, Task(name="Write docs", project_id=project_id, assigned_to_id=1, status="DONE"))
    store.close()
"""

import logging
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from core.db import make_engine, now_iso
from tracker.models import Project, Task

logger = logging.getLogger("taskboard.tracker")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_projects = Table(
    "projects",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_tasks = Table(
    "tasks",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("status", String(20), nullable=False, server_default="TODO"),
    # Not enforced by SQLite unless PRAGMA foreign_keys=ON; documents intent.
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("assigned_to_id", Integer, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TrackerStore:
    """Repository for Project and Task entities."""

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(self, project: Project) -> int:
        """Insert a project and return its new ID."""
        with self.engine.connect() as conn:
            result = conn.execute(_projects.insert().values(name=project.name, created_at=now_iso()))
            conn.commit()
            project_id = result.inserted_primary_key[0]
        logger.info("Created project id=%d", project_id)
        return project_id

    def get_project(self, project_id: int) -> Optional[Project]:
        with self.engine.connect() as conn:
            row = conn.execute(_projects.select().where(_projects.c.id == project_id)).fetchone()
        return _row_to_project(row) if row is not None else None

    def update_project(self, project_id: int, project: Project) -> bool:
        """Rename a project. Returns False if project_id does not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(_projects.update().where(_projects.c.id == project_id).values(name=project.name))
            conn.commit()
        return result.rowcount > 0

    def delete_project(self, project_id: int) -> bool:
        """Delete a project. Returns False if project_id does not exist.

        Tasks that reference the project are left in place.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_projects.delete().where(_projects.c.id == project_id))
            conn.commit()
        if result.rowcount == 0:
            logger.info("delete_project: project id=%d not found", project_id)
            return False
        logger.info("delete_project: project id=%d deleted", project_id)
        return True

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, task: Task) -> int:
        """Insert a task and return its new ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    name=task.name,
                    status=task.status,
                    project_id=task.project_id,
                    assigned_to_id=task.assigned_to_id,
                    created_at=now_iso(),
                )
            )
            conn.commit()
            task_id = result.inserted_primary_key[0]
        logger.info("Created task id=%d in project id=%d", task_id, task.project_id)
        return task_id

    def get_task(self, task_id: int) -> Optional[Task]:
        with self.engine.connect() as conn:
            row = conn.execute(_tasks.select().where(_tasks.c.id == task_id)).fetchone()
        return _row_to_task(row) if row is not None else None

    def update_task(self, task_id: int, task: Task) -> bool:
        """Overwrite every mutable field of a task. Returns False if task_id does not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.update()
                .where(_tasks.c.id == task_id)
                .values(
                    name=task.name,
                    status=task.status,
                    project_id=task.project_id,
                    assigned_to_id=task.assigned_to_id,
                )
            )
            conn.commit()
        return result.rowcount > 0

    def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns False if task_id does not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.delete().where(_tasks.c.id == task_id))
            conn.commit()
        if result.rowcount == 0:
            logger.info("delete_task: task id=%d not found", task_id)
            return False
        logger.info("delete_task: task id=%d deleted", task_id)
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_project(row) -> Project:
    return Project(id=row.id, name=row.name, created_at=row.created_at)


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        name=row.name,
        status=row.status,
        project_id=row.project_id,
        assigned_to_id=row.assigned_to_id,
        created_at=row.created_at,
    )
