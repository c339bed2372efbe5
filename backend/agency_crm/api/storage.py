"""Signed storage links. No bearer token: the signed token in the URL is the credential."""
import logging
import mimetypes
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse

from agency_crm.api.deps import ok
from agency_crm.core.config import settings
from agency_crm.services.storage import (
    DOWNLOAD, UPLOAD, DocumentStorage, InvalidStorageToken, ObjectNotFound,
    StoragePathError, get_storage,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/storage", tags=["storage"])


def _open(storage: DocumentStorage, token: str, action: str):
    try:
        return storage.open_token(token, action)
    except InvalidStorageToken as e:
        logger.info(f"Rejected storage token ({action}): {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired signed URL")


@router.put("/upload/{token}")
async def upload_object(
    token: str,
    request: Request,
    storage: DocumentStorage = Depends(get_storage),
):
    scoped, path = _open(storage, token, UPLOAD)

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="File too large")

    # Chunked bodies carry no length; count as we read
    received = 0
    chunks = []
    async for chunk in request.stream():
        received += len(chunk)
        if received > settings.MAX_UPLOAD_SIZE:
            logger.info(f"Rejected upload to {path}: over {settings.MAX_UPLOAD_SIZE} bytes")
            raise HTTPException(status_code=413, detail="File too large")
        chunks.append(chunk)
    body = b"".join(chunks)

    try:
        size = scoped.save(path, body)
    except StoragePathError:
        raise HTTPException(status_code=400, detail="Invalid file path")
    return ok({"path": path, "size": size}, "File uploaded successfully")


@router.get("/object/{token}")
def download_object(
    token: str,
    storage: DocumentStorage = Depends(get_storage),
):
    scoped, path = _open(storage, token, DOWNLOAD)
    try:
        location = scoped.locate(path)
    except StoragePathError:
        raise HTTPException(status_code=400, detail="Invalid file path")
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="File not found")

    media_type = mimetypes.guess_type(location.name)[0] or "application/octet-stream"
    return FileResponse(location, media_type=media_type, filename=location.name)
