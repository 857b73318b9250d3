"""
Authentication Endpoints Module

Token issuance happens at login, outside this service. The endpoint here lets
a browser confirm that the token it holds still maps to an active account,
and re-sets the HTTP-only auth cookie so it persists.
"""
from fastapi import APIRouter, Depends, Request, Response
from pymongo.database import Database

from app.api import deps
from app.core.config import settings
from app.core.exceptions import AuthenticationRequired, persistence_errors
from app.db.session import USERS, get_db
from app.schemas.auth import Identity

router = APIRouter()

COOKIE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days


@router.get("/verify")
def verify(
    request: Request,
    response: Response,
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_token_identity),
):
    """
    Verify the caller's token and return the account it belongs to.

    Only signed tokens are accepted here, never the identity headers.

    Returns:
        dict: success flag and the account's id, email, name, role, status and permissions

    Raises:
        AuthenticationRequired 401: Missing/invalid token, or no active account
    """
    with persistence_errors("Failed to verify token"):
        user = db[USERS].find_one({"email": identity.email})
    if not user or not user.get("isActive"):
        raise AuthenticationRequired("Invalid or inactive user")

    # httponly=True keeps the token away from page scripts
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=deps.token_from_request(request, None),
        httponly=True,
        max_age=COOKIE_MAX_AGE,
        samesite="lax",
        path="/",
    )
    return {
        "success": True,
        "data": {
            "id": str(user["_id"]),
            "email": user["email"],
            "name": user.get("name"),
            "role": user.get("role"),
            "isActive": user.get("isActive", False),
            "permissions": user.get("permissions", []),
        },
    }
