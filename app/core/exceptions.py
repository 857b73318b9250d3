"""
Error Taxonomy Module

Every failure a request can end in is raised as one of the exceptions below
and converted to the JSON error envelope by the handlers registered in
``app.main``:

    {"success": false, "message": "...", "error": "...", "errors": [...]}

``error`` carries the raw diagnostic text of a store failure, ``errors``
carries structured validation details. Both are omitted when empty.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MarketplaceException(HTTPException):
    """Base class for errors that end a request with an error envelope."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.error = error
        self.errors = errors
        super().__init__(status_code=status_code or self.default_status, detail=self.message)


class AuthenticationRequired(MarketplaceException):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Unauthorized(MarketplaceException):
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized access"


class NotFound(MarketplaceException):
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailed(MarketplaceException):
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class Conflict(MarketplaceException):
    default_status = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class PersistenceFailure(MarketplaceException):
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Persistence failure"


def error_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce pydantic error dicts to their JSON-safe parts."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]


def error_envelope(exc: MarketplaceException) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": exc.message}
    if exc.error is not None:
        body["error"] = exc.error
    if exc.errors:
        body["errors"] = exc.errors
    return body


async def marketplace_exception_handler(request: Request, exc: MarketplaceException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": error_details(exc.errors()),
        },
    )


async def python_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


@contextmanager
def persistence_errors(message: str) -> Iterator[None]:
    """Turn store errors raised inside the block into PersistenceFailure(message)."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception(message)
        raise PersistenceFailure(message, error=str(exc)) from exc
