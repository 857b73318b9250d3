"""
Client Project Endpoints Module

This module provides the endpoints behind the client dashboard. Listing,
creating and deleting are limited to active client accounts acting on their
own projects; updates are also open to administrators, who may update any
project.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from pymongo.database import Database

from app.api import deps
from app.core.exceptions import ValidationFailed, error_details, persistence_errors
from app.db.session import get_db
from app.schemas.auth import Identity
from app.schemas.project import ClientProjectCreate
from app.services import project_service
from app.services.project_reconciler import reconcile_project

router = APIRouter()


@router.get("")
def list_client_projects(
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_identity),
):
    """
    Retrieve the caller's projects, newest first, in dashboard shape.

    Raises:
        AuthenticationRequired 401: No identity presented
        Unauthorized 403: Caller is not an active client account
    """
    with persistence_errors("Failed to fetch projects"):
        account = project_service.get_active_client(db, identity)
    projects = project_service.list_client_projects(db, account)
    return {"success": True, "projects": projects}


@router.post("")
def create_client_project(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_identity),
):
    """
    Create a new project owned by the calling client.

    The project starts as ``pending`` with progress 0; contact details are
    snapshotted from the client's account.
    """
    with persistence_errors("Failed to create project"):
        account = project_service.get_active_client(db, identity)
    try:
        data = ClientProjectCreate.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(errors=error_details(exc.errors())) from exc

    project_id = project_service.create_client_project(db, account, data)
    return {
        "success": True,
        "message": "Project created successfully",
        "projectId": str(project_id),
    }


@router.patch("")
def update_client_project(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_identity),
):
    """
    Apply a partial update to one project.

    The body names the project (``projectId``) and any of: ``status``,
    ``progress``, ``updates``/``files``/``payments`` entries to append, and a
    ``milestones`` object that either patches an existing milestone (with
    ``id``) or adds a new one (without).

    Returns:
        dict: success flag, message and the combined modified count
    """
    result = reconcile_project(db, identity, payload)
    return {
        "success": True,
        "message": "Project updated successfully",
        "modifiedCount": result.modified_count,
    }


@router.delete("")
def delete_client_project(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_identity),
):
    """
    Delete one of the caller's projects and release it from the owner's counter.

    Raises:
        ValidationFailed 400: projectId missing
        NotFound 404: Project missing or owned by someone else
    """
    with persistence_errors("Failed to delete project"):
        account = project_service.get_active_client(db, identity)
        project_id = payload.get("projectId")
        if not project_id:
            raise ValidationFailed("Project ID is required")
        project = project_service.find_accessible_project(db, account, project_id)

    deleted = project_service.delete_project(db, project)
    return {
        "success": True,
        "message": "Project deleted successfully",
        "deletedCount": deleted,
    }
