import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pymongo.database import Database

from app.api import deps
from app.core.config import settings
from app.core.exceptions import MarketplaceException, NotFound, ValidationFailed, persistence_errors
from app.db.session import PROJECTS, get_db
from app.schemas.auth import Identity
from app.services import project_service
from app.services.file_storage import public_url, save_upload
from app.utils.mongo import new_id, serialize_document, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
def upload_project_file(
    file: Optional[UploadFile] = File(None),
    projectId: Optional[str] = Form(None),
    db: Database = Depends(get_db),
    identity: Identity = Depends(deps.get_identity),
):
    """
    Store an uploaded file and attach it to a project's file list.

    Admins may attach to any project, clients only to their own.
    """
    if file is None or not projectId:
        raise ValidationFailed("File and projectId are required")

    with persistence_errors("Failed to upload file"):
        account = project_service.resolve_caller_account(db, identity)
        project = project_service.find_accessible_project(db, account, projectId)

    raw = file.file.read()
    saved = save_upload(raw, file.filename or "upload", settings.UPLOADS_DIR)

    now = utcnow()
    oid = new_id()
    entry = {
        "_id": oid,
        "id": str(oid),
        "fileName": file.filename,
        "fileUrl": public_url(saved, settings.UPLOADS_DIR, settings.UPLOADS_URL_PREFIX),
        "fileSize": len(raw),
        "fileType": file.content_type,
        "uploadedBy": identity.email,
        "createdAt": now,
    }

    try:
        with persistence_errors("Failed to upload file"):
            result = db[PROJECTS].update_one(
                {"_id": project["_id"]},
                {"$push": {"files": entry}, "$set": {"updatedAt": now}},
            )
        if result.matched_count == 0:
            # deleted between lookup and write
            raise NotFound("Project not found or not updated")
    except MarketplaceException:
        # no record points at the file
        saved.unlink(missing_ok=True)
        raise

    logger.info("File %s attached to project %s", entry["fileUrl"], project["_id"])
    return {"success": True, "file": serialize_document(entry)}
