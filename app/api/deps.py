"""
API Dependencies Module

This module provides FastAPI dependency functions for caller identity and
authorization. Identity is taken from, in order:

1. A signed bearer token in the Authorization header (API clients)
2. The same token in the auth cookie (browser clients)
3. The ``user-email`` / ``user-role`` header pair set by the dashboards,
   when TRUST_IDENTITY_HEADERS is enabled

Role checks only look at the resolved identity; account-level checks (active
client record, ownership) are done per request by the services.
"""
import logging
from typing import List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.exceptions import AuthenticationRequired, Unauthorized
from app.core.security import decode_access_token
from app.models.user import UserRole
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)

# auto_error=False allows us to check cookies and headers as a fallback
bearer_scheme = HTTPBearer(auto_error=False)


def token_from_request(request: Request, bearer: Optional[str]) -> Optional[str]:
    if bearer:
        return bearer
    header = request.headers.get("authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    cookie = request.cookies.get(settings.AUTH_COOKIE_NAME)
    # Cookie may be stored as "Bearer <token>"
    if cookie and cookie.startswith("Bearer "):
        cookie = cookie[len("Bearer "):]
    return cookie or None


def identity_from_token(token: str) -> Identity:
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise AuthenticationRequired()

    email = payload.get("email") or payload.get("sub")
    role = payload.get("role")
    if not email or not role:
        logger.debug("Token is missing the email or role claim")
        raise AuthenticationRequired()
    return Identity(email=str(email).strip().lower(), role=str(role).strip().lower())


def resolve_identity(request: Request, bearer: Optional[str] = None) -> Identity:
    """
    Resolve the caller identity from the raw request.

    Args:
        request: Incoming request (headers and cookies are read)
        bearer: Token already extracted by the bearer scheme, if any

    Returns:
        Identity: email and lower-cased role of the caller

    Raises:
        AuthenticationRequired: No usable token or identity headers, or the
            token failed verification
    """
    token = token_from_request(request, bearer)
    if token:
        return identity_from_token(token)

    if settings.TRUST_IDENTITY_HEADERS:
        email = (request.headers.get("user-email") or "").strip()
        role = (request.headers.get("user-role") or "").strip()
        if email and role:
            return Identity(email=email.lower(), role=role.lower())

    raise AuthenticationRequired()


def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    return resolve_identity(request, credentials.credentials if credentials else None)


def get_token_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Like get_identity, but only a signed token is accepted."""
    token = token_from_request(request, credentials.credentials if credentials else None)
    if not token:
        raise AuthenticationRequired("No authentication token found")
    return identity_from_token(token)


class RoleChecker:
    """
    Dependency factory for checking caller roles.

    Usage: Depends(RoleChecker([UserRole.ADMIN]))
    """
    def __init__(self, allowed_roles: List[UserRole]):
        self.allowed_roles = [role.value for role in allowed_roles]

    def __call__(self, identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role not in self.allowed_roles:
            raise Unauthorized()
        return identity


require_admin = RoleChecker([UserRole.ADMIN])
