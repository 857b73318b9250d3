"""
Document helpers shared by the endpoints and services.

Project and user identifiers arrive as strings. Generated identifiers are
ObjectIds, but seeded and client-chosen identifiers (``"p1"``, ``"m1"``) are
plain strings, so lookups must accept both.
"""
from datetime import date, datetime, timezone
from typing import Any, Union

from bson import ObjectId


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the driver hands back from the store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_object_id(value: Any) -> bool:
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and ObjectId.is_valid(value)


def as_document_id(value: Any) -> Union[ObjectId, Any]:
    """Return an ObjectId when *value* looks like one, otherwise *value* unchanged."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def new_id() -> ObjectId:
    return ObjectId()


def serialize_document(value: Any) -> Any:
    """Recursively convert a stored document into JSON-safe values."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value
