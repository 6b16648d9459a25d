"""
tracker/models.py -- Domain dataclasses for projects and tasks.

These are pure data containers with zero logic. Persistence lives in
tracker/store.py; request validation lives in the api/ routes.

id is None before the record is written to the database.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Project:
    name: str
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Task:
    """A unit of work inside a project, assigned to one user.

    project_id and assigned_to_id are plain integers; the store does not
    enforce that they reference existing rows.
    """

    name: str
    project_id: int
    assigned_to_id: int
    status: str = "TODO"
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
