"""
User Management Endpoints Module

This module provides the admin dashboard's account management endpoints.
Every endpoint requires an administrator. Password hashes are never returned.
"""
import logging
import secrets
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.database import Database

from app.api import deps
from app.core.exceptions import (
    Conflict,
    NotFound,
    ValidationFailed,
    error_details,
    persistence_errors,
)
from app.core.security import get_password_hash
from app.db.session import USERS, get_db
from app.models.user import derive_names
from app.schemas.auth import Identity
from app.schemas.user import (
    MIN_PASSWORD_LENGTH,
    TRIMMED_FIELDS,
    UserCreate,
    UserUpdate,
    is_valid_email,
    is_valid_role,
)
from app.utils.mongo import is_object_id, serialize_document, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    user = {key: value for key, value in user.items() if key != "password"}
    return serialize_document(derive_names(user))


def _parse_user_id(value: Optional[str], missing: str, invalid: str):
    if not value:
        raise ValidationFailed(missing)
    if not is_object_id(value):
        raise ValidationFailed(invalid)
    return ObjectId(value)


@router.get("")
def read_users(
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Retrieve every account, newest first.

    Returns:
        dict: success flag, users (passwords excluded) and their count
    """
    with persistence_errors("Failed to fetch users"):
        users = list(db[USERS].find({}, {"password": 0}).sort("createdAt", DESCENDING))
    users = [_public_user(user) for user in users]
    return {"success": True, "users": users, "count": len(users)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Create a new account.

    A random password is generated when none is supplied.

    Raises:
        ValidationFailed 400: Missing/invalid email, short password, missing/invalid role
        Conflict 409: An account with this email already exists
    """
    errors = user_in.validation_errors()
    if errors:
        raise ValidationFailed(errors=errors)

    email = user_in.email.strip().lower()
    password = user_in.password or secrets.token_urlsafe(8)[:10]
    now = utcnow()
    user_doc: Dict[str, Any] = {
        "email": email,
        "password": get_password_hash(password),
        "role": user_in.role.strip(),
        "isActive": True,
        "projectsCount": 0,
        "createdAt": now,
        "updatedAt": now,
    }
    for field in ("name", "firstName", "lastName", "company"):
        value = getattr(user_in, field)
        if value:
            user_doc[field] = value.strip()

    with persistence_errors("Failed to create user"):
        if db[USERS].find_one({"email": email}):
            raise Conflict("Email already exists")
        result = db[USERS].insert_one(user_doc)

    user_doc["_id"] = result.inserted_id
    logger.info("User %s created by %s", email, identity.email)
    return {"success": True, "user": _public_user(user_doc), "message": "User created successfully"}


@router.patch("")
def update_user(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Update an account named by ``_id`` in the body.

    Only supplied fields change. Email is re-validated and must stay unique;
    a new password is hashed before storage.

    Raises:
        ValidationFailed 400: Missing/invalid _id, invalid email, role or password
        NotFound 404: No such account
        Conflict 409: Email taken by another account
    """
    object_id = _parse_user_id(payload.get("_id"), "Missing _id field", "Invalid _id format")
    try:
        user_in = UserUpdate.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(errors=error_details(exc.errors())) from exc
    updates = user_in.model_dump(exclude_unset=True)

    with persistence_errors("Failed to update user"):
        if db[USERS].find_one({"_id": object_id}) is None:
            raise NotFound("User not found")

        if updates.get("email"):
            email = updates["email"].strip().lower()
            if not is_valid_email(email):
                raise ValidationFailed("Invalid email format")
            if db[USERS].find_one({"email": email, "_id": {"$ne": object_id}}):
                raise Conflict("Email already exists")
            updates["email"] = email

        if updates.get("password"):
            if len(updates["password"]) < MIN_PASSWORD_LENGTH:
                raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
            updates["password"] = get_password_hash(updates["password"])
        else:
            updates.pop("password", None)

        for field in TRIMMED_FIELDS:
            if isinstance(updates.get(field), str):
                updates[field] = updates[field].strip()
        if "role" in updates and not is_valid_role(updates["role"]):
            raise ValidationFailed("Invalid role")

        updates["updatedAt"] = utcnow()
        result = db[USERS].update_one({"_id": object_id}, {"$set": updates})

    if result.matched_count == 0:
        raise NotFound("User not found")
    return {
        "success": True,
        "message": "User updated successfully",
        "modifiedCount": result.modified_count,
    }


@router.delete("")
def delete_user(
    id: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.require_admin),
):
    """
    Delete an account.

    Raises:
        ValidationFailed 400: Missing/invalid id, or an admin deleting themselves
        NotFound 404: No such account
    """
    object_id = _parse_user_id(id, "Missing id parameter", "Invalid id format")

    with persistence_errors("Failed to delete user"):
        user = db[USERS].find_one({"_id": object_id})
        if user is None:
            raise NotFound("User not found")
        if user.get("email") == identity.email:
            raise ValidationFailed("Users cannot delete themselves")
        db[USERS].delete_one({"_id": object_id})

    logger.info("User %s deleted by %s", user.get("email"), identity.email)
    return {"success": True, "message": "User deleted successfully"}
