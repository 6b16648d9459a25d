"""
api/routes/v1/projects.py -- Project CRUD routes for the Taskboard REST API.

Routes:
  POST   /projects        -- create project (201)
  GET    /projects/{id}   -- fetch project
  PUT    /projects/{id}   -- rename project
  DELETE /projects/{id}   -- delete project

All routes require a valid token (IdentityGatedRoute).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request

from api.models import ProjectRequest, ProjectResponse
from auth.dependencies import IdentityGatedRoute
from tracker.models import Project
from tracker.store import TrackerStore

logger = logging.getLogger("taskboard.api")

router = APIRouter(route_class=IdentityGatedRoute)

# Row ids are SQLite INTEGER (signed 64-bit).
ProjectId = Annotated[int, Path(ge=1, le=2**63 - 1)]


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(request: Request, body: ProjectRequest) -> ProjectResponse:
    if not body.name:
        raise HTTPException(status_code=400, detail="missing name")
    tracker: TrackerStore = request.app.state.tracker
    project_id = tracker.create_project(Project(name=body.name))
    return ProjectResponse.from_project(_get_or_404(tracker, project_id))


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(request: Request, project_id: ProjectId) -> ProjectResponse:
    tracker: TrackerStore = request.app.state.tracker
    return ProjectResponse.from_project(_get_or_404(tracker, project_id))


@router.put("/projects/{project_id}", response_model=ProjectResponse)
def update_project(request: Request, project_id: ProjectId, body: ProjectRequest) -> ProjectResponse:
    if not body.name:
        raise HTTPException(status_code=400, detail="missing name")
    tracker: TrackerStore = request.app.state.tracker
    if not tracker.update_project(project_id, Project(name=body.name)):
        raise HTTPException(status_code=404, detail="project not found")
    return ProjectResponse.from_project(_get_or_404(tracker, project_id))


@router.delete("/projects/{project_id}")
def delete_project(request: Request, project_id: ProjectId) -> str:
    """Delete a project. Its tasks are not cascaded."""
    tracker: TrackerStore = request.app.state.tracker
    logger.info("delete_project: attempting to delete project id=%d", project_id)
    if not tracker.delete_project(project_id):
        raise HTTPException(status_code=404, detail="project not found")
    return f"Deleted project {project_id}"


def _get_or_404(tracker: TrackerStore, project_id: int) -> Project:
    project = tracker.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="project not found")
    return project
