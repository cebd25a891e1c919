
import base64
from functools import lru_cache
from fastapi import Depends, HTTPException, Request, UploadFile
from ..core.config import settings
from ..models import User
from ..services.app_settings import AppSettingsService
from ..services.auth import AuthService
from ..services.storage import (
    DocumentStore,
    HttpDocumentStore,
    InMemoryKeyValueStore,
    KeyValueStoreBase,
    LocalDocumentStore,
    SQLiteKeyValueStore,
)
from ..services.workflow import CaptureSession

# Single-user application: one key-value store, one document store and one
# capture session per process. Tests swap them via app.dependency_overrides.


@lru_cache
def get_kv_store() -> KeyValueStoreBase:
    if settings.storage_backend == "sqlite":
        return SQLiteKeyValueStore(settings.storage_db_path)
    return InMemoryKeyValueStore()


@lru_cache
def _build_document_store() -> DocumentStore:
    if settings.storage_backend == "http":
        if not settings.backend_url:
            raise RuntimeError("STORAGE_BACKEND=http requires BACKEND_URL")
        return HttpDocumentStore(settings.backend_url, timeout=settings.backend_timeout)
    return LocalDocumentStore(get_kv_store(), latency_scale=settings.mock_latency_scale)


def get_document_store() -> DocumentStore:
    return _build_document_store()


_capture_session: CaptureSession | None = None


def get_capture_session(store: DocumentStore = Depends(get_document_store)) -> CaptureSession:
    global _capture_session
    if _capture_session is None:
        _capture_session = CaptureSession(store)
    return _capture_session


def get_auth_service(kv: KeyValueStoreBase = Depends(get_kv_store)) -> AuthService:
    return AuthService(kv, latency_scale=settings.mock_latency_scale)


def get_app_settings_service(kv: KeyValueStoreBase = Depends(get_kv_store)) -> AppSettingsService:
    return AppSettingsService(kv)


def get_current_user(auth: AuthService = Depends(get_auth_service)) -> User:
    user = auth.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator account required")
    return user


async def read_document(request: Request, file: UploadFile | None) -> tuple[str, str]:
    """
    Read an uploaded document as (base64 data, MIME type).

    Accepts either:
    - multipart/form-data (file upload via form or camera capture)
    - a raw binary body with its Content-Type (e.g. image/jpeg, application/pdf)
    """
    if file:
        content = await file.read()
        mime_type = file.content_type or "application/octet-stream"
    else:
        content = await request.body()
        mime_type = request.headers.get("content-type", "application/octet-stream")

    if not content:
        raise HTTPException(status_code=422, detail="No file provided (either multipart or raw body)")
    return base64.b64encode(content).decode("ascii"), mime_type
