"""Shared fixtures: an in-memory document store behind the app, seeded accounts and callers."""
from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import settings
from app.db.session import PROJECTS, USERS, get_db
from app.main import app

ADMIN_ID = ObjectId("65f000000000000000000001")
ADMIN_EMAIL = "admin@example.com"
CLIENT_EMAIL = "client@example.com"
OTHER_CLIENT_EMAIL = "other@example.com"

SEEDED_AT = datetime(2026, 1, 5, 9, 30)


def identity_headers(email: str, role: str) -> dict:
    return {"user-email": email, "user-role": role}


@pytest.fixture
def admin_headers():
    return identity_headers(ADMIN_EMAIL, "admin")


@pytest.fixture
def client_headers():
    return identity_headers(CLIENT_EMAIL, "client")


@pytest.fixture
def other_client_headers():
    return identity_headers(OTHER_CLIENT_EMAIL, "client")


@pytest.fixture
def make_token():
    """Factory for signed identity tokens."""
    def _make(email: str, role: str, **claims) -> str:
        payload = {"email": email, "role": role, **claims}
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return _make


@pytest.fixture
def db():
    """A fresh in-memory database with one admin and two client accounts."""
    database = mongomock.MongoClient()[settings.MONGODB_DB]
    database[USERS].insert_many([
        {
            "_id": ADMIN_ID,
            "email": ADMIN_EMAIL,
            "name": "Ada Admin",
            "role": "admin",
            "isActive": True,
            "permissions": ["projects:write"],
            "createdAt": SEEDED_AT,
        },
        {
            "_id": "u1",
            "email": CLIENT_EMAIL,
            "firstName": "Cleo",
            "lastName": "Client",
            "role": "client",
            "isActive": True,
            "projectsCount": 1,
            "createdAt": SEEDED_AT,
        },
        {
            "_id": "u2",
            "email": OTHER_CLIENT_EMAIL,
            "name": "Otto Other",
            "role": "client",
            "isActive": True,
            "projectsCount": 0,
            "createdAt": SEEDED_AT,
        },
    ])
    return database


@pytest.fixture
def seed_project(db):
    """Insert a project owned by client u1; keyword arguments override fields."""
    def _seed(**overrides) -> dict:
        document = {
            "_id": "p1",
            "clientId": "u1",
            "userInfo": {"firstName": "Cleo", "lastName": "Client", "email": CLIENT_EMAIL},
            "projectDetails": {"title": "Storefront redesign", "priority": "high"},
            "pricing": {"type": "fixed", "currency": "USD", "fixedBudget": "1200"},
            "status": "pending",
            "progress": 0,
            "milestones": [],
            "updates": [],
            "files": [],
            "payments": [],
            "createdAt": SEEDED_AT,
            "updatedAt": SEEDED_AT,
        }
        document.update(overrides)
        db[PROJECTS].insert_one(document)
        return db[PROJECTS].find_one({"_id": document["_id"]})
    return _seed


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOADS_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def client(db):
    """TestClient with the database dependency pointed at the in-memory store."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
