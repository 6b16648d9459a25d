"""
API request and response models for Taskboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tracker/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names: JSON keys keep the camelCase names clients already send
(firstName, projectID, assignedTo, createdAt). Python code uses snake_case;
aliases bridge the two. FastAPI serializes responses by alias.

Required-field checks are done in the route handlers, not here, so a missing
field produces the specific 400 message ("email is required") rather than a
generic validation error. Fields therefore default to empty values.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tracker.models import Project, Task

# SQLite INTEGER is signed 64-bit; larger ids cannot be bound.
_MAX_ROW_ID = 2**63 - 1

# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Envelope for every error response: a single human-readable string."""

    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/users/register."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(default="", max_length=255)
    first_name: str = Field(default="", alias="firstName", max_length=255)
    last_name: str = Field(default="", alias="lastName", max_length=255)
    # bcrypt only considers the first 72 bytes; longer input is refused by
    # the hasher and reported as a server error, so cap it here instead.
    password: str = Field(default="", max_length=72)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/users/login."""

    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


class TokenResponse(BaseModel):
    """Returned by register and login. The same token is also set as a cookie."""

    token: str


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ProjectRequest(BaseModel):
    """Request body for POST /projects and PUT /projects/{id}."""

    name: str = Field(default="", max_length=255)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    name: str
    created_at: str = Field(default="", alias="createdAt")

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        return cls(id=project.id, name=project.name, created_at=project.created_at)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskRequest(BaseModel):
    """Request body for POST /tasks and PUT /tasks/{id}.

    project_id and assigned_to_id default to 0, which the handler treats as
    "missing" -- real IDs start at 1.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", max_length=255)
    status: Optional[str] = Field(default=None, max_length=20)
    project_id: int = Field(default=0, alias="projectID", ge=0, le=_MAX_ROW_ID)
    assigned_to_id: int = Field(default=0, alias="assignedTo", ge=0, le=_MAX_ROW_ID)


class TaskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    name: str
    status: str
    project_id: int = Field(alias="projectID")
    assigned_to_id: int = Field(alias="assignedTo")
    created_at: str = Field(default="", alias="createdAt")

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        """Build a TaskResponse from a tracker Task dataclass."""
        return cls(
            id=task.id,
            name=task.name,
            status=task.status,
            project_id=task.project_id,
            assigned_to_id=task.assigned_to_id,
            created_at=task.created_at,
        )
