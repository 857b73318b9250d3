from fastapi import APIRouter
from typing import Any

router = APIRouter()

@router.get("", response_model=dict[str, Any])
def health_check() -> Any:
    """
    Liveness probe; does not touch the document store.
    """
    return {"status": "ok"}
