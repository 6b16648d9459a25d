"""
api/routes/v1/tasks.py -- Task CRUD routes for the Taskboard REST API.

Routes:
  POST   /tasks        -- create task (201)
  GET    /tasks/{id}   -- fetch task
  PUT    /tasks/{id}   -- replace task fields
  DELETE /tasks/{id}   -- delete task

Validation (400, first failure wins):
  name is required -> project id is required -> user id is required
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request

from api.models import TaskRequest, TaskResponse
from auth.dependencies import IdentityGatedRoute
from tracker.models import Task
from tracker.store import TrackerStore

logger = logging.getLogger("taskboard.api")

# Every route below sits behind the auth gate, which runs before the body is read.
router = APIRouter(route_class=IdentityGatedRoute)

# Row ids are SQLite INTEGER (signed 64-bit).
TaskId = Annotated[int, Path(ge=1, le=2**63 - 1)]


@router.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(request: Request, body: TaskRequest) -> TaskResponse:
    _validate_task(body)
    tracker: TrackerStore = request.app.state.tracker
    task = Task(
        name=body.name,
        project_id=body.project_id,
        assigned_to_id=body.assigned_to_id,
        status=body.status or "TODO",
    )
    task_id = tracker.create_task(task)
    return TaskResponse.from_task(_get_or_404(tracker, task_id))


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(request: Request, task_id: TaskId) -> TaskResponse:
    tracker: TrackerStore = request.app.state.tracker
    return TaskResponse.from_task(_get_or_404(tracker, task_id))


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(request: Request, task_id: TaskId, body: TaskRequest) -> TaskResponse:
    """Replace a task's name, project and assignee.

    status is optional on update; when omitted the current status is kept.
    """
    _validate_task(body)
    tracker: TrackerStore = request.app.state.tracker
    existing = _get_or_404(tracker, task_id)
    updated = Task(
        name=body.name,
        project_id=body.project_id,
        assigned_to_id=body.assigned_to_id,
        status=body.status or existing.status,
    )
    if not tracker.update_task(task_id, updated):
        raise HTTPException(status_code=404, detail="task not found")
    return TaskResponse.from_task(_get_or_404(tracker, task_id))


@router.delete("/tasks/{task_id}")
def delete_task(request: Request, task_id: TaskId) -> str:
    tracker: TrackerStore = request.app.state.tracker
    if not tracker.delete_task(task_id):
        raise HTTPException(status_code=404, detail="task not found")
    return f"Deleted task {task_id}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_task(body: TaskRequest) -> None:
    if not body.name:
        raise HTTPException(status_code=400, detail="name is required")
    if body.project_id == 0:
        raise HTTPException(status_code=400, detail="project id is required")
    if body.assigned_to_id == 0:
        raise HTTPException(status_code=400, detail="user id is required")


def _get_or_404(tracker: TrackerStore, task_id: int) -> Task:
    task = tracker.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="task not found")
    return task
