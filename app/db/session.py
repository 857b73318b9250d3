from typing import Generator

from pymongo import MongoClient
from pymongo.database import Database

from app.core.config import settings

# Global client instance
_client = None


def get_client() -> MongoClient:
    global _client

    if _client is None:
        # The driver connects lazily and pools connections per client
        _client = MongoClient(settings.MONGODB_URI)
    return _client


def get_db() -> Generator[Database, None, None]:
    yield get_client()[settings.MONGODB_DB]


# Collection names
USERS = "users"
PROJECTS = "projects"
