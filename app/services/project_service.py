"""
Project service layer.

Access rules and the create / list / delete paths for project documents.
Mutations of an existing project go through ``project_reconciler``.

Access rules
------------
- Admin callers may address any project.
- Client callers must have an active ``users`` record with role ``client``
  and may only address projects whose ``clientId`` is that record's ``_id``.
  A project owned by someone else is reported as not found.
- Any other role is refused.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from app.core.exceptions import NotFound, Unauthorized, persistence_errors
from app.db.session import PROJECTS, USERS
from app.models.project import canonical_status
from app.models.user import UserRole
from app.schemas.auth import Identity
from app.schemas.project import ClientProjectCreate, ProjectSubmission
from app.utils.mongo import as_document_id, new_id, serialize_document, utcnow

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


def get_active_client(db: Database, identity: Identity) -> Dict[str, Any]:
    """Return the caller's active client account or raise Unauthorized."""
    if not identity.is_client:
        raise Unauthorized()
    account = db[USERS].find_one(
        {"email": identity.email, "role": UserRole.CLIENT.value, "isActive": True}
    )
    if account is None:
        raise Unauthorized()
    return account


def resolve_caller_account(db: Database, identity: Identity) -> Optional[Dict[str, Any]]:
    """Admins act without an account scope (None); clients get their account."""
    if identity.is_admin:
        return None
    return get_active_client(db, identity)


def find_accessible_project(
    db: Database, account: Optional[Dict[str, Any]], project_id: Any
) -> Dict[str, Any]:
    query: Dict[str, Any] = {"_id": as_document_id(project_id)}
    if account is not None:
        query["clientId"] = account["_id"]
    project = db[PROJECTS].find_one(query)
    if project is None:
        raise NotFound("Project not found")
    return project


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def seed_milestones(pricing: Dict[str, Any], now: datetime) -> List[Dict[str, Any]]:
    """Turn milestones proposed with milestone pricing into project milestones."""
    milestones = []
    for index, proposed in enumerate(pricing.get("milestones") or []):
        oid = new_id()
        milestone = {key: value for key, value in proposed.items() if value is not None}
        milestone["_id"] = oid
        milestone["id"] = proposed.get("id") or str(oid)
        milestone["status"] = "pending"
        milestone["order"] = proposed.get("order") if proposed.get("order") is not None else index
        milestone["createdAt"] = now
        milestone["updatedAt"] = now
        milestones.append(milestone)
    return milestones


def new_project_document(
    *,
    details: Dict[str, Any],
    pricing: Dict[str, Any],
    priority: Optional[str],
    user_info: Dict[str, Any],
    owner_id: Any = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    document: Dict[str, Any] = {
        "userInfo": user_info,
        "projectDetails": details,
        "pricing": pricing,
        "status": "pending",
        "priority": priority or "medium",
        "progress": 0,
        "milestones": seed_milestones(pricing, now),
        "updates": [],
        "files": [],
        "payments": [],
        "createdAt": now,
        "updatedAt": now,
    }
    if owner_id is not None:
        document["clientId"] = owner_id
        document["createdBy"] = owner_id
    return document


def _adjust_project_count(db: Database, owner_id: Any, delta: int) -> None:
    query: Dict[str, Any] = {"_id": owner_id}
    if delta < 0:
        # never drive the counter below zero for accounts seeded without one
        query["projectsCount"] = {"$gt": 0}
    db[USERS].update_one(query, {"$inc": {"projectsCount": delta}})


def create_client_project(db: Database, account: Dict[str, Any], data: ClientProjectCreate) -> Any:
    user_info = {
        "firstName": account.get("firstName") or "",
        "lastName": account.get("lastName") or "",
        "email": account["email"],
        "company": account.get("company"),
    }
    document = new_project_document(
        details=data.projectDetails.model_dump(),
        pricing=data.pricing.model_dump(exclude_none=True),
        priority=data.priority,
        user_info=user_info,
        owner_id=account["_id"],
    )
    with persistence_errors("Failed to create project"):
        result = db[PROJECTS].insert_one(document)
        _adjust_project_count(db, account["_id"], 1)
    logger.info("Project %s created by %s", result.inserted_id, account["email"])
    return result.inserted_id


def submit_project(db: Database, submission: ProjectSubmission) -> Any:
    """Store a start-project form submission.

    The submission is linked to an existing active client account with the
    same email, otherwise it stays unowned until an admin picks it up.
    """
    details = submission.projectDetails.model_dump()
    user_info = submission.userInfo.model_dump(exclude_none=True)
    user_info["email"] = user_info["email"].strip().lower()
    with persistence_errors("Failed to submit form"):
        owner = db[USERS].find_one(
            {"email": user_info["email"], "role": UserRole.CLIENT.value, "isActive": True}
        )
        document = new_project_document(
            details=details,
            pricing=submission.pricing.model_dump(exclude_none=True),
            priority=details.get("priority"),
            user_info=user_info,
            owner_id=owner["_id"] if owner else None,
        )
        result = db[PROJECTS].insert_one(document)
        if owner:
            _adjust_project_count(db, owner["_id"], 1)
    logger.info("Project submission %s stored for %s", result.inserted_id, user_info["email"])
    return result.inserted_id


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def to_dashboard_project(project: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a stored project into the shape the client dashboard renders."""
    details = project.get("projectDetails") or {}
    pricing = project.get("pricing") or {}
    status = project.get("status") or "pending"
    canonical = canonical_status(status)
    return serialize_document({
        "id": str(project["_id"]),
        "title": details.get("title"),
        "description": details.get("description"),
        "category": details.get("category"),
        "timeline": details.get("timeline"),
        "priority": details.get("priority") or project.get("priority") or "low",
        "techStack": details.get("techStack") or [],
        "requirements": details.get("requirements"),
        "status": status,
        "canonicalStatus": canonical.value if canonical else None,
        "progress": project.get("progress") or 0,
        "startDate": project.get("startDate"),
        "endDate": project.get("endDate"),
        "estimatedCompletionDate": project.get("estimatedCompletionDate"),
        "actualCompletionDate": project.get("actualCompletionDate"),
        "createdAt": project.get("createdAt"),
        "updatedAt": project.get("updatedAt"),
        "pricing": {
            "type": pricing.get("type") or "fixed",
            "currency": pricing.get("currency") or "USD",
            "fixedBudget": pricing.get("fixedBudget"),
            "hourlyRate": pricing.get("hourlyRate"),
            "estimatedHours": pricing.get("estimatedHours"),
            "totalPaid": pricing.get("totalPaid"),
        },
        "milestones": project.get("milestones") or [],
        "updates": project.get("updates") or [],
        "files": project.get("files") or [],
        "payments": project.get("payments") or [],
    })


def list_client_projects(db: Database, account: Dict[str, Any]) -> List[Dict[str, Any]]:
    with persistence_errors("Failed to fetch projects"):
        projects = list(
            db[PROJECTS].find({"clientId": account["_id"]}).sort("createdAt", DESCENDING)
        )
    return [to_dashboard_project(project) for project in projects]


def list_all_projects(db: Database) -> List[Dict[str, Any]]:
    with persistence_errors("Failed to fetch projects"):
        projects = list(db[PROJECTS].find({}).sort("createdAt", DESCENDING))
    return [serialize_document(project) for project in projects]


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def delete_project(db: Database, project: Dict[str, Any]) -> int:
    """Delete a project already resolved by the caller and release its owner's counter."""
    with persistence_errors("Failed to delete project"):
        result = db[PROJECTS].delete_one({"_id": project["_id"]})
        if result.deleted_count and project.get("clientId") is not None:
            _adjust_project_count(db, project["clientId"], -1)
    logger.info("Project %s deleted", project["_id"])
    return result.deleted_count
