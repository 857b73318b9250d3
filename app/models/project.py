"""
Project Model Module

This module defines the vocabularies and embedded structures of project
documents kept in the ``projects`` collection.

A stored project looks like::

    {
        "_id": ObjectId | str,
        "clientId": <users._id>,        # owner; absent for anonymous intake
        "createdBy": <users._id>,
        "userInfo": {...},              # snapshot of the owner at creation time
        "projectDetails": {...},        # ProjectDetails
        "pricing": {...},               # Pricing
        "status": "pending",
        "priority": "medium",
        "progress": 0,
        "milestones": [...],            # patchable in place and appendable
        "updates": [...],               # append-only
        "files": [...],                 # append-only
        "payments": [...],              # append-only
        "createdAt": datetime,
        "updatedAt": datetime,          # refreshed on every mutation
    }

Two status vocabularies are in use for the same field: the admin review
flow writes pending/reviewed/approved/rejected while the client dashboard
writes pending/in_progress/completed/cancelled/on_hold. Stored values are
kept as written; ``canonical_status`` maps either onto ProjectStatus.
"""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class ProjectStatus(str, Enum):
    """Canonical project status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


# Admin review vocabulary and alternate spellings, mapped onto ProjectStatus
LEGACY_STATUS_ALIASES = {
    "reviewed": ProjectStatus.IN_PROGRESS,
    "approved": ProjectStatus.COMPLETED,
    "rejected": ProjectStatus.CANCELLED,
    "in-progress": ProjectStatus.IN_PROGRESS,
    "on-hold": ProjectStatus.ON_HOLD,
}

# Values accepted by the admin review endpoint
ADMIN_REVIEW_STATUSES = ("pending", "reviewed", "approved", "rejected")


def canonical_status(value: Optional[str]) -> Optional[ProjectStatus]:
    """Map a stored status from either vocabulary onto ProjectStatus.

    Returns None for values outside both vocabularies.
    """
    if value is None:
        return None
    if value in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[value]
    try:
        return ProjectStatus(value)
    except ValueError:
        return None


def is_known_status(value: Any) -> bool:
    return isinstance(value, str) and canonical_status(value) is not None


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PricingType(str, Enum):
    FIXED = "fixed"
    HOURLY = "hourly"
    MILESTONE = "milestone"


class Currency(str, Enum):
    USD = "USD"
    KES = "KES"


class Priority(str, Enum):
    # "urgent" comes from the intake form, "critical" from the dashboards
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    URGENT = "urgent"


def stringify_amount(value: Any) -> Any:
    """Budgets are decimals kept as strings; accept plain numbers too."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def normalize_milestone_status(value: Any) -> Any:
    if value == "in-progress":
        return MilestoneStatus.IN_PROGRESS.value
    return value


class UserInfo(BaseModel):
    """Contact snapshot captured with a project for display without a join."""
    firstName: str
    lastName: str = ""
    email: EmailStr
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None


class ProjectDetails(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    category: Optional[str] = None
    timeline: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    techStack: List[str] = []
    requirements: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class PricingMilestone(BaseModel):
    """Milestone proposed with milestone-based pricing."""
    id: Optional[str] = None
    title: str = Field(min_length=1)
    description: str = ""
    budget: str = "0"
    timeline: str = ""
    deliverables: Optional[List[str]] = None
    order: Optional[int] = None

    @field_validator("budget", mode="before")
    @classmethod
    def coerce_budget(cls, value):
        return stringify_amount(value)


class Pricing(BaseModel):
    type: PricingType = PricingType.FIXED
    currency: Currency = Currency.USD
    fixedBudget: Optional[str] = None
    hourlyRate: Optional[str] = None
    estimatedHours: Optional[str] = None
    totalPaid: Optional[str] = None
    milestones: List[PricingMilestone] = []

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("fixedBudget", "hourlyRate", "estimatedHours", "totalPaid", mode="before")
    @classmethod
    def coerce_amounts(cls, value):
        return stringify_amount(value)
