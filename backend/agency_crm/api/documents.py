"""Documents API: metadata rows for files kept in object storage."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from agency_crm.api.deps import (
    ok, clamp_limit, is_ascending, sort_column, ordered, paginate,
    get_owned_or_404, require_uuid,
)
from agency_crm.api.serializers import document_to_dict
from agency_crm.core.config import settings
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.client import Client
from agency_crm.models.document import Document
from agency_crm.models.policy import Policy
from agency_crm.schemas.document import DocumentCreate, UploadUrlRequest
from agency_crm.services.storage import (
    DocumentStorage, StorageError, StoragePathError, build_upload_path, get_storage,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/documents", tags=["documents"])

SORTABLE = {
    "uploaded_at": Document.uploaded_at,
    "file_name": Document.file_name,
    "file_size": Document.file_size,
}


@router.get("")
def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    client_id: Optional[str] = None,
    policy_id: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    limit = clamp_limit(limit)
    query = db.query(Document).filter(Document.agency_id == current_user.agency_id)
    if client_id:
        client_id = require_uuid(client_id, "client")
        query = query.filter(Document.client_id == client_id)
    if policy_id:
        policy_id = require_uuid(policy_id, "policy")
        query = query.filter(Document.policy_id == policy_id)

    column = sort_column(sort_by, SORTABLE, "uploaded_at")
    query = query.order_by(ordered(column, is_ascending(sort_order)), Document.id)
    return ok(paginate(query, page, limit, document_to_dict))


@router.post("/upload-url")
def create_upload_url(
    payload: UploadUrlRequest,
    current_user: User = Depends(get_current_user),
    storage: DocumentStorage = Depends(get_storage),
):
    """Reserve an object path and hand back a signed URL to PUT the file to."""
    if not payload.fileName or not payload.fileName.strip():
        raise HTTPException(status_code=400, detail="fileName is required")

    path = build_upload_path(payload.fileName, payload.clientId, payload.policyId)
    url = storage.scoped(current_user.agency_id).create_signed_upload_url(path)
    logger.info(f"Upload URL issued for {path} ({payload.contentType or 'unknown type'})")
    return ok({"url": url, "path": path})


@router.get("/{document_id}")
def get_document(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    doc = get_owned_or_404(db, Document, document_id, current_user.agency_id, "Document")
    return ok(document_to_dict(doc))


@router.get("/{document_id}/url")
def get_download_url(
    document_id: str,
    expires_in: int = Query(
        settings.SIGNED_URL_EXPIRES_IN, alias="expiresIn", ge=1, le=settings.MAX_SIGNED_URL_EXPIRES_IN,
    ),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    """Signed, time-limited download link for a document."""
    doc = get_owned_or_404(db, Document, document_id, current_user.agency_id, "Document")
    try:
        url = storage.scoped(current_user.agency_id).create_signed_url(doc.file_path, expires_in)
    except StoragePathError as e:
        logger.error(f"Document {doc.id} has an unusable path: {e}")
        raise HTTPException(status_code=500, detail="Document path is invalid")
    return ok({"url": url})


@router.post("", status_code=status.HTTP_201_CREATED)
def create_document(
    payload: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    """Record a document after its file has been uploaded."""
    data = payload.model_dump()
    agency_id = current_user.agency_id

    if data.get("client_id") and not db.query(Client.id).filter(
        Client.id == data["client_id"], Client.agency_id == agency_id
    ).first():
        raise HTTPException(status_code=404, detail="Client not found")
    if data.get("policy_id") and not db.query(Policy.id).filter(
        Policy.id == data["policy_id"], Policy.agency_id == agency_id
    ).first():
        raise HTTPException(status_code=404, detail="Policy not found")

    try:
        storage.scoped(agency_id).resolve(data["file_path"])
    except StoragePathError:
        raise HTTPException(status_code=400, detail="Invalid file path")

    doc = Document(agency_id=agency_id, **data)
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return ok(document_to_dict(doc), "Document created successfully")


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    """Remove the stored file (best effort), then the metadata row."""
    doc = get_owned_or_404(db, Document, document_id, current_user.agency_id, "Document")

    if doc.file_path:
        try:
            storage.scoped(current_user.agency_id).remove([doc.file_path])
        except StorageError as e:
            logger.error(f"Failed to delete file from storage for document {doc.id}: {e}")

    db.delete(doc)
    db.commit()
    return ok(message="Document deleted successfully")
