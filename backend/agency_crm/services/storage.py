"""Document object storage on the local filesystem, accessed through signed links.

Files live under ``UPLOAD_DIR/<bucket>/<agency id>/<path>``. Clients never get a bearer
token for a file. They get a short-lived JWT that names one path and one
action (``upload`` or ``download``), and the storage routes honour it without
further authentication.
"""
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from jose import JWTError, jwt

from agency_crm.core.config import settings

logger = logging.getLogger(__name__)

UPLOAD = "upload"
DOWNLOAD = "download"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class StorageError(Exception):
    """Base class for storage failures."""


class InvalidStorageToken(StorageError):
    pass


class StoragePathError(StorageError):
    pass


class ObjectNotFound(StorageError):
    pass


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_CHARS.sub("_", file_name)


def build_upload_path(
    file_name: str,
    client_id: Optional[str] = None,
    policy_id: Optional[str] = None,
    timestamp_ms: Optional[int] = None,
) -> str:
    """Object path for a new upload, grouped by owner: client first, then policy."""
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    name = f"{ts}-{sanitize_file_name(file_name)}"
    if client_id:
        return f"clients/{client_id}/{name}"
    if policy_id:
        return f"policies/{policy_id}/{name}"
    return f"general/{name}"


class DocumentStorage:
    """Bucket on disk; ``namespace`` (the agency id) scopes every object path."""

    def __init__(
        self,
        root: str,
        bucket: str,
        secret_key: str,
        algorithm: str,
        base_url: str,
        namespace: Optional[str] = None,
    ):
        self.base_root = Path(root) / bucket
        self.root = self.base_root / namespace if namespace else self.base_root
        self.bucket = bucket
        self.namespace = namespace
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.base_url = base_url.rstrip("/")

    def scoped(self, namespace: str) -> "DocumentStorage":
        return DocumentStorage(
            root=str(self.base_root.parent),
            bucket=self.bucket,
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            base_url=self.base_url,
            namespace=namespace,
        )

    # ── Paths ──────────────────────────────────────────────────────

    def resolve(self, path: str) -> Path:
        """Absolute filesystem location for an object path, confined to the namespace."""
        if not path or path.startswith("/") or "\\" in path:
            raise StoragePathError(f"Invalid object path: {path!r}")
        root = self.root.resolve()
        target = (root / path).resolve()
        if target == root or root not in target.parents:
            raise StoragePathError(f"Object path escapes storage root: {path!r}")
        return target

    # ── Signed links ───────────────────────────────────────────────

    def _sign(self, path: str, action: str, expires_in: int) -> str:
        self.resolve(path)
        payload = {
            "bucket": self.bucket,
            "ns": self.namespace,
            "path": path,
            "action": action,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_signed_url(self, path: str, expires_in: int) -> str:
        token = self._sign(path, DOWNLOAD, expires_in)
        return f"{self.base_url}/api/storage/object/{token}"

    def create_signed_upload_url(self, path: str, expires_in: Optional[int] = None) -> str:
        token = self._sign(path, UPLOAD, expires_in or settings.SIGNED_UPLOAD_EXPIRES_IN)
        return f"{self.base_url}/api/storage/upload/{token}"

    def open_token(self, token: str, action: str) -> Tuple["DocumentStorage", str]:
        """Check a signed token; returns the storage scoped to it and its object path."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidStorageToken(str(e))
        if payload.get("action") != action or payload.get("bucket") != self.bucket:
            raise InvalidStorageToken("Token not valid for this operation")
        path = payload.get("path")
        if not path:
            raise InvalidStorageToken("Token carries no path")
        namespace = payload.get("ns")
        storage = self.scoped(namespace) if namespace else self
        return storage, path

    # ── Objects ────────────────────────────────────────────────────

    def save(self, path: str, data: bytes) -> int:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"Stored {len(data)} bytes at {self.bucket}/{path}")
        return len(data)

    def locate(self, path: str) -> Path:
        target = self.resolve(path)
        if not target.is_file():
            raise ObjectNotFound(path)
        return target

    def remove(self, paths: Iterable[str]) -> List[str]:
        """Delete objects; returns the paths that were actually removed."""
        removed = []
        for path in paths:
            target = self.resolve(path)
            try:
                target.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Failed to delete {path}: {e}")
            removed.append(path)
        return removed


def get_storage() -> DocumentStorage:
    return DocumentStorage(
        root=settings.UPLOAD_DIR,
        bucket=settings.STORAGE_BUCKET,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        base_url=settings.API_URL,
    )
