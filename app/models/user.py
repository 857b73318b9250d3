"""
User Model Module

This module defines the UserRole enumeration used for authorization
throughout the application, plus helpers for account documents.

Account documents in the ``users`` collection look like::

    {
        "_id": ObjectId | str,
        "email": "jane@acme.io",      # trimmed, lower-cased, unique
        "password": "<bcrypt hash>",  # never returned by the API
        "name": "Jane Doe",
        "firstName": "Jane", "lastName": "Doe",
        "role": "client",
        "isActive": true,
        "projectsCount": 2,           # maintained on project create/delete
        "createdAt": datetime, "updatedAt": datetime,
    }
"""
from enum import Enum


class UserRole(str, Enum):
    """
    Enumeration of account roles.

    - ADMIN: Operates the admin dashboard, can see and modify every project
    - CLIENT: Submits projects and follows them from the client dashboard
    - DEVELOPER: Member of the talent pool; has no access to project records here
    """
    ADMIN = "admin"
    CLIENT = "client"
    DEVELOPER = "developer"


def derive_names(user: dict) -> dict:
    """Fill firstName/lastName from ``name`` when either is missing."""
    if user.get("firstName") and user.get("lastName"):
        return user
    first, _, last = (user.get("name") or "").partition(" ")
    return {**user, "firstName": first, "lastName": last}
