from collections import Counter
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pymongo.database import Database

from app.api import deps
from app.core.exceptions import persistence_errors
from app.db.session import PROJECTS, USERS, get_db
from app.models.project import canonical_status
from app.schemas.auth import Identity

router = APIRouter()


def _group_counts(collection, field: str) -> Dict[str, int]:
    pipeline = [{"$group": {"_id": f"${field}", "count": {"$sum": 1}}}]
    return {
        (row["_id"] if row["_id"] is not None else "unknown"): row["count"]
        for row in collection.aggregate(pipeline)
    }


@router.get("", response_model=Dict[str, Any])
def read_analytics(
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Dashboard totals aggregated from the store.

    ``projectsByStatus`` counts stored values as written,
    ``projectsByCanonicalStatus`` folds both status vocabularies together.
    """
    with persistence_errors("Failed to load analytics"):
        projects_by_status = _group_counts(db[PROJECTS], "status")
        users_by_role = _group_counts(db[USERS], "role")
        revenue_rows = list(db[PROJECTS].aggregate([
            {"$unwind": "$payments"},
            {"$group": {"_id": None, "total": {"$sum": "$payments.amount"}}},
        ]))

    by_canonical: Counter = Counter()
    for value, count in projects_by_status.items():
        canonical = canonical_status(value)
        by_canonical[canonical.value if canonical else "unknown"] += count

    return {
        "success": True,
        "totalUsers": sum(users_by_role.values()),
        "totalProjects": sum(projects_by_status.values()),
        "totalRevenue": revenue_rows[0]["total"] if revenue_rows else 0,
        "projectsByStatus": projects_by_status,
        "projectsByCanonicalStatus": dict(by_canonical),
        "usersByRole": users_by_role,
    }
