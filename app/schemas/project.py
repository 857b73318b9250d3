from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.project import (
    MilestoneStatus,
    Pricing,
    Priority,
    ProjectDetails,
    UserInfo,
    normalize_milestone_status,
    stringify_amount,
)


# ---------------------------------------------------------------------------
# Project creation
# ---------------------------------------------------------------------------

class ProjectSubmission(BaseModel):
    """Public start-project form."""
    userInfo: UserInfo
    projectDetails: ProjectDetails
    pricing: Pricing = Field(default_factory=Pricing)


class ClientProjectCreate(BaseModel):
    """Project submitted from the client dashboard; contact data comes from the account."""
    projectDetails: ProjectDetails
    pricing: Pricing = Field(default_factory=Pricing)
    priority: Optional[Priority] = None

    model_config = ConfigDict(use_enum_values=True)


# ---------------------------------------------------------------------------
# Entries accepted by the project PATCH
# ---------------------------------------------------------------------------

class UpdateEntryIn(BaseModel):
    id: Optional[str] = None
    title: str
    description: str = ""
    type: str = "update"
    createdAt: Optional[datetime] = None

    # author, isAdminResponse, parentUpdateId, ... are kept as sent
    model_config = ConfigDict(extra="allow")


class FileEntryIn(BaseModel):
    id: Optional[str] = None
    fileName: str
    fileUrl: str
    fileSize: Optional[int] = None
    fileType: Optional[str] = None
    createdAt: Optional[datetime] = None

    model_config = ConfigDict(extra="allow")


class PaymentIn(BaseModel):
    amount: float
    method: str
    notes: Optional[str] = None
    date: Optional[datetime] = None

    # currency, status, invoiceUrl, ... are kept as sent
    model_config = ConfigDict(extra="allow")


class MilestoneIn(BaseModel):
    """Milestone payload: carries ``id`` to patch an existing milestone, omits it to add one."""
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    status: Optional[MilestoneStatus] = None
    dueDate: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    order: Optional[int] = None
    deliverables: Optional[List[str]] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("budget", mode="before")
    @classmethod
    def coerce_budget(cls, value):
        return stringify_amount(value)

    @field_validator("status", mode="before")
    @classmethod
    def accept_hyphenated_status(cls, value):
        return normalize_milestone_status(value)


# Milestone fields a patch may overwrite in place
MILESTONE_PATCH_FIELDS = (
    "title", "description", "budget", "timeline", "status", "dueDate", "completedAt",
)


# ---------------------------------------------------------------------------
# Explicit patch representation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScalarPatch:
    status: Optional[str] = None
    progress: Optional[int] = None


@dataclass(frozen=True)
class AppendPatch:
    updates: Tuple[Dict[str, Any], ...] = ()
    files: Tuple[Dict[str, Any], ...] = ()
    payments: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class MilestoneUpdate:
    """Overwrite ``fields`` of the existing milestone keyed by ``milestone_id``."""
    milestone_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MilestoneInsert:
    """Append a new milestone built from ``fields``."""
    fields: Dict[str, Any] = field(default_factory=dict)


MilestoneOp = Union[MilestoneUpdate, MilestoneInsert]


@dataclass(frozen=True)
class ProjectPatch:
    scalars: Optional[ScalarPatch] = None
    appends: Optional[AppendPatch] = None
    milestone: Optional[MilestoneOp] = None

    @property
    def is_empty(self) -> bool:
        return self.scalars is None and self.appends is None and self.milestone is None


class ProjectPatchRequest(BaseModel):
    """
    Raw body of the project PATCH.

    The dashboards send the target id and the changed fields side by side:
    ``{"projectId": "...", "status": "...", "milestones": {...}, ...}``.
    Unknown keys are ignored.
    """
    projectId: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    updates: Optional[List[UpdateEntryIn]] = None
    files: Optional[List[FileEntryIn]] = None
    payments: Optional[List[PaymentIn]] = None
    milestones: Optional[MilestoneIn] = None

    model_config = ConfigDict(extra="ignore")

    def to_patch(self) -> ProjectPatch:
        scalars = None
        if self.status is not None or self.progress is not None:
            scalars = ScalarPatch(status=self.status, progress=self.progress)

        updates = tuple(entry.model_dump(exclude_none=True) for entry in self.updates or ())
        files = tuple(entry.model_dump(exclude_none=True) for entry in self.files or ())
        payments = tuple(entry.model_dump(exclude_none=True) for entry in self.payments or ())
        appends = None
        if updates or files or payments:
            appends = AppendPatch(updates=updates, files=files, payments=payments)

        milestone: Optional[MilestoneOp] = None
        if self.milestones is not None:
            # an explicit null never clears a stored field
            fields = self.milestones.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
            if self.milestones.id:
                patchable = {key: value for key, value in fields.items() if key in MILESTONE_PATCH_FIELDS}
                milestone = MilestoneUpdate(milestone_id=self.milestones.id, fields=patchable)
            else:
                milestone = MilestoneInsert(fields=fields)

        return ProjectPatch(scalars=scalars, appends=appends, milestone=milestone)
