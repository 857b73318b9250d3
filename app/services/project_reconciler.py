"""
Project update reconciliation.

Merges a partial client/admin edit into a stored project document. One
request may carry three shapes of change at once:

1. **Scalar overwrite** - ``status`` and ``progress`` are ``$set``.
2. **Append** - ``updates``, ``files`` and ``payments`` entries are
   ``$push``-ed in the order supplied; existing entries are never touched.
3. **Milestone patch or insert** - a milestone payload carrying ``id``
   overwrites only the supplied fields of that one milestone through the
   positional operator; without ``id`` it is appended as a new milestone.

``build_update_plan`` turns a ``ProjectPatch`` into at most two update
documents: the primary update (scalars, appends, new milestone, and always a
fresh ``updatedAt``) and the positional milestone patch. They are issued in
that order against the same project and the caller sees the sum of both
modified counts. With ``MONGODB_USE_TRANSACTIONS`` enabled both run inside a
single transaction; otherwise each write is atomic on its own and a failure
of the second leaves the first applied.

Concurrent patches of different milestones of one project do not interfere.
Concurrent patches of the same milestone are last-write-wins.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.database import Database

from app.core.config import settings
from app.core.exceptions import ValidationFailed, error_details, persistence_errors
from app.db.session import PROJECTS
from app.models.project import MilestoneStatus, is_known_status
from app.schemas.auth import Identity
from app.schemas.project import (
    MilestoneInsert,
    MilestoneUpdate,
    ProjectPatch,
    ProjectPatchRequest,
)
from app.services.project_service import find_accessible_project, resolve_caller_account
from app.utils.mongo import is_object_id, new_id, utcnow

logger = logging.getLogger(__name__)

PATCH_FIELDS_REQUIRED = "Project ID and at least one update field are required"


@dataclass
class UpdatePlan:
    primary: Dict[str, Any]
    milestone_filter: Optional[Dict[str, Any]] = None
    milestone_update: Optional[Dict[str, Any]] = None


@dataclass
class ReconcileResult:
    project_id: Any
    modified_count: int


# ---------------------------------------------------------------------------
# Plan construction
# ---------------------------------------------------------------------------


def _log_entry(entry: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """Update and file entries are stored as sent; only a missing id or timestamp is filled."""
    document = dict(entry)
    if not document.get("id"):
        oid = new_id()
        document["_id"] = oid
        document["id"] = str(oid)
    document.setdefault("createdAt", now)
    return document


def _payment_entry(payment: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    oid = new_id()
    document = dict(payment)
    document["_id"] = oid
    document["id"] = str(oid)
    document["date"] = payment.get("date") or now
    document["createdAt"] = now
    document["updatedAt"] = now
    return document


def _milestone_entry(fields: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    oid = new_id()
    document = {
        "title": "",
        "description": "",
        "budget": "0",
        "timeline": "",
        "order": 0,
    }
    document.update({key: value for key, value in fields.items() if value is not None})
    document["_id"] = oid
    document["id"] = str(oid)
    document["status"] = fields.get("status") or MilestoneStatus.PENDING.value
    document["createdAt"] = now
    document["updatedAt"] = now
    return document


def milestone_selector(milestone_id: str) -> Dict[str, Any]:
    """Array filter picking the milestone a patch targets.

    Generated milestones are matched on their ObjectId ``_id``; milestones
    keyed by a caller-chosen string are matched on ``id``.
    """
    if is_object_id(milestone_id):
        return {"milestones._id": ObjectId(milestone_id)}
    return {"milestones.id": milestone_id}


def build_update_plan(patch: ProjectPatch, now: datetime) -> UpdatePlan:
    set_fields: Dict[str, Any] = {"updatedAt": now}
    push_fields: Dict[str, Any] = {}

    if patch.scalars is not None:
        if patch.scalars.status is not None:
            set_fields["status"] = patch.scalars.status
        if patch.scalars.progress is not None:
            set_fields["progress"] = patch.scalars.progress

    if patch.appends is not None:
        if patch.appends.updates:
            push_fields["updates"] = {"$each": [_log_entry(e, now) for e in patch.appends.updates]}
        if patch.appends.files:
            push_fields["files"] = {"$each": [_log_entry(e, now) for e in patch.appends.files]}
        if patch.appends.payments:
            push_fields["payments"] = {"$each": [_payment_entry(p, now) for p in patch.appends.payments]}

    plan = UpdatePlan(primary={"$set": set_fields})

    if isinstance(patch.milestone, MilestoneInsert):
        push_fields["milestones"] = {"$each": [_milestone_entry(patch.milestone.fields, now)]}
    elif isinstance(patch.milestone, MilestoneUpdate):
        milestone_set = {
            f"milestones.$.{name}": value for name, value in patch.milestone.fields.items()
        }
        milestone_set["milestones.$.updatedAt"] = now
        plan.milestone_filter = milestone_selector(patch.milestone.milestone_id)
        plan.milestone_update = {"$set": milestone_set}

    if push_fields:
        plan.primary["$push"] = push_fields
    return plan


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def apply_update_plan(projects: Collection, project_id: Any, plan: UpdatePlan, session=None) -> int:
    """Issue the primary update, then the milestone patch; return the summed modified count."""
    options = {"session": session} if session is not None else {}
    result = projects.update_one({"_id": project_id}, plan.primary, **options)
    modified = result.modified_count
    if plan.milestone_update is not None:
        query = {"_id": project_id}
        query.update(plan.milestone_filter)
        result = projects.update_one(query, plan.milestone_update, **options)
        modified += result.modified_count
    return modified


def _execute(db: Database, project_id: Any, plan: UpdatePlan) -> int:
    projects = db[PROJECTS]
    if not settings.MONGODB_USE_TRANSACTIONS:
        return apply_update_plan(projects, project_id, plan)
    with db.client.start_session() as session:
        return session.with_transaction(
            lambda txn: apply_update_plan(projects, project_id, plan, session=txn)
        )


def parse_project_patch(payload: Dict[str, Any]) -> ProjectPatchRequest:
    try:
        return ProjectPatchRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(errors=error_details(exc.errors())) from exc


def reconcile_project(db: Database, identity: Identity, payload: Dict[str, Any]) -> ReconcileResult:
    """Apply a partial project update on behalf of *identity*.

    Checks run in this order: caller account (Unauthorized), payload shape
    and presence of at least one recognised field (ValidationFailed), project
    existence and ownership (NotFound). Store errors surface as
    PersistenceFailure with the driver's message.
    """
    with persistence_errors("Failed to update project"):
        account = resolve_caller_account(db, identity)

        request = parse_project_patch(payload)
        patch = request.to_patch()
        if not request.projectId or patch.is_empty:
            raise ValidationFailed(PATCH_FIELDS_REQUIRED)
        if patch.scalars is not None and patch.scalars.status is not None:
            if not is_known_status(patch.scalars.status):
                raise ValidationFailed("Invalid status value")

        project = find_accessible_project(db, account, request.projectId)
        plan = build_update_plan(patch, utcnow())
        modified = _execute(db, project["_id"], plan)

    logger.info(
        "Project %s updated by %s (%s): %d modified",
        project["_id"], identity.email, identity.role, modified,
    )
    return ReconcileResult(project_id=project["_id"], modified_count=modified)
