from .user import UserRole, derive_names
from .project import (
    ProjectStatus, MilestoneStatus, PricingType, Currency, Priority,
    UserInfo, ProjectDetails, PricingMilestone, Pricing,
    canonical_status, is_known_status,
)

__all__ = [
    "UserRole", "derive_names",
    "ProjectStatus", "MilestoneStatus", "PricingType", "Currency", "Priority",
    "UserInfo", "ProjectDetails", "PricingMilestone", "Pricing",
    "canonical_status", "is_known_status",
]
