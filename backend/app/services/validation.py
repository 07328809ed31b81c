"""
Upload checks: non-empty file, allowed extension, size cap. Raises UnsupportedMediaError
(413 for oversize, 400 otherwise) before anything touches the database.
"""
import mimetypes
from pathlib import PurePath

from app.config import settings
from app.errors import UnsupportedMediaError


def file_extension(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lower().lstrip(".")


def check_upload(file_name: str | None, contents: bytes, mime_type: str | None = None) -> str:
    """Validate an uploaded file; return the mime type to store."""
    if not file_name or not file_name.strip():
        raise UnsupportedMediaError("File is required")
    if not contents:
        raise UnsupportedMediaError("Uploaded file is empty")
    ext = file_extension(file_name)
    allowed = settings.upload_extensions
    if ext not in allowed:
        raise UnsupportedMediaError(
            f"File type '.{ext or '?'}' is not allowed. Allowed: {', '.join(sorted(allowed))}"
        )
    max_bytes = settings.max_upload_bytes
    if len(contents) > max_bytes:
        raise UnsupportedMediaError(
            f"File exceeds the maximum size of {max_bytes // (1024 * 1024)} MB", status_code=413
        )
    mime = (mime_type or "").strip()
    if not mime or mime == "application/octet-stream":
        mime = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    return mime
