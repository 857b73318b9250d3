"""
Project Endpoints Module

This module provides the admin dashboard's project endpoints and the public
start-project intake. Listing, reviewing and deleting require an
administrator; the intake form is open to anonymous visitors.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from pymongo.database import Database

from app.api import deps
from app.core.exceptions import NotFound, ValidationFailed, error_details, persistence_errors
from app.db.session import PROJECTS, get_db
from app.models.project import ADMIN_REVIEW_STATUSES
from app.schemas.auth import Identity
from app.schemas.project import ProjectSubmission
from app.services import project_service
from app.utils.mongo import as_document_id, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_project_id(payload: Dict[str, Any]) -> str:
    project_id = payload.get("_id")
    if not (project_id and isinstance(project_id, str)):
        raise ValidationFailed("Missing or invalid _id")
    return project_id


@router.post("/start-project")
def submit_start_project_form(payload: Dict[str, Any] = Body(...), db: Database = Depends(get_db)):
    """
    Receive a start-project form submission.

    Returns:
        dict: success flag, message and the id of the stored project

    Raises:
        ValidationFailed 400: The form does not validate
    """
    try:
        submission = ProjectSubmission.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(errors=error_details(exc.errors())) from exc

    project_id = project_service.submit_project(db, submission)
    return {
        "success": True,
        "message": "Form submitted and saved to database",
        "insertedId": str(project_id),
    }


@router.get("")
def list_projects(
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """Retrieve every project, newest first."""
    return {"success": True, "projects": project_service.list_all_projects(db)}


@router.patch("")
def review_project(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Set a project's review status.

    Only the admin review vocabulary (pending, reviewed, approved, rejected)
    is accepted here; the full update surface lives on /client-projects.
    """
    project_id = _require_project_id(payload)
    status = payload.get("status")
    if status not in ADMIN_REVIEW_STATUSES:
        raise ValidationFailed("Invalid status value")

    with persistence_errors("Failed to update status"):
        result = db[PROJECTS].update_one(
            {"_id": as_document_id(project_id)},
            {"$set": {"status": status, "updatedAt": utcnow()}},
        )
    if result.matched_count == 0:
        raise NotFound("Project not found")
    logger.info("Project %s set to %s by %s", project_id, status, identity.email)
    return {
        "success": True,
        "message": "Project status updated",
        "modifiedCount": result.modified_count,
    }


@router.delete("")
def delete_project(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """Delete any project; its owner's project counter is decremented."""
    project_id = _require_project_id(payload)
    with persistence_errors("Failed to delete project"):
        project = project_service.find_accessible_project(db, None, project_id)
    project_service.delete_project(db, project)
    return {"success": True, "message": "Project deleted"}
