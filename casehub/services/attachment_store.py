"""Attachment store — image files on disk, keyed by UUID.

Files are written as ``<uuid>.png`` or ``<uuid>.jpg`` under
``UPLOAD_FOLDER`` and served from ``/api/v1/uploads/<file>``.

The store knows nothing about test cases or runs: step rows keep the
attachment references (JSON) and callers decide when a file is copied
or deleted.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid

from flask import current_app

from casehub.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/api/v1/uploads"

_EXTENSIONS = (".png", ".jpg")
_MIME_BY_EXTENSION = {".png": "image/png", ".jpg": "image/jpeg"}


def _upload_dir() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    return folder


def _allowed_types() -> dict[str, str]:
    return current_app.config["ALLOWED_ATTACHMENT_TYPES"]


def _check_id(attachment_id: str) -> str:
    """Reject ids that could escape the upload folder."""
    if (
        not attachment_id
        or "/" in attachment_id
        or "\\" in attachment_id
        or ".." in attachment_id
    ):
        raise ValidationError("Invalid attachment id")
    return attachment_id


def find_path(attachment_id: str) -> str | None:
    """Return the on-disk path for an attachment id, or None if absent."""
    _check_id(attachment_id)
    folder = _upload_dir()
    for ext in _EXTENSIONS:
        path = os.path.join(folder, f"{attachment_id}{ext}")
        if os.path.isfile(path):
            return path
    return None


def save_upload(file_storage) -> dict:
    """Validate and store an uploaded image.

    Args:
        file_storage: werkzeug FileStorage from ``request.files``.

    Returns:
        {"id", "url", "filename", "mimeType"}

    Raises:
        ValidationError: missing file, unsupported MIME type, file too large.
    """
    if file_storage is None or not file_storage.filename:
        raise ValidationError("No file uploaded")

    mime_type = file_storage.mimetype
    allowed = _allowed_types()
    if mime_type not in allowed:
        raise ValidationError(
            f"Unsupported file type: {mime_type}. Only PNG and JPEG are allowed."
        )

    data = file_storage.read()
    max_bytes = current_app.config["MAX_ATTACHMENT_BYTES"]
    if len(data) > max_bytes:
        raise ValidationError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB."
        )

    attachment_id = str(uuid.uuid4())
    stored_name = f"{attachment_id}{allowed[mime_type]}"
    with open(os.path.join(_upload_dir(), stored_name), "wb") as fh:
        fh.write(data)

    logger.info("Stored attachment %s (%s, %d bytes)", stored_name, mime_type, len(data))
    return {
        "id": attachment_id,
        "url": f"{UPLOADS_URL_PREFIX}/{stored_name}",
        "filename": file_storage.filename,
        "mimeType": mime_type,
    }


def copy_attachment(attachment: dict) -> dict | None:
    """Copy an attachment's file to a fresh id.

    Returns the new attachment reference, or None when the source has no id
    or its backing file is missing (stale reference).
    """
    source_id = attachment.get("id")
    if not source_id:
        return None
    try:
        _check_id(source_id)
    except ValidationError:
        logger.warning("Skipping attachment with unsafe id %r", source_id)
        return None

    # the stored file decides the type
    src = find_path(source_id)
    if src is None:
        logger.info("Attachment %s missing on disk, skipped", source_id)
        return None

    ext = os.path.splitext(src)[1]
    new_id = str(uuid.uuid4())
    shutil.copyfile(src, os.path.join(_upload_dir(), f"{new_id}{ext}"))
    return {
        "id": new_id,
        "filename": attachment.get("filename") or "",
        "mimeType": _MIME_BY_EXTENSION[ext],
        "url": f"{UPLOADS_URL_PREFIX}/{new_id}{ext}",
    }


def delete_attachment(attachment_id: str) -> None:
    """Delete a stored file.

    Raises:
        ValidationError: unsafe id.
        NotFoundError: no file for this id.
    """
    path = find_path(attachment_id)
    if path is None:
        raise NotFoundError(resource="Attachment", resource_id=attachment_id)
    os.remove(path)
    logger.info("Deleted attachment %s", os.path.basename(path))


def discard_files(attachment_ids) -> int:
    """Best-effort removal of files whose owner rows are gone.

    Missing files are ignored; OS errors are logged, never raised.
    Returns the number of files removed.
    """
    removed = 0
    for attachment_id in attachment_ids:
        try:
            delete_attachment(attachment_id)
            removed += 1
        except (NotFoundError, ValidationError):
            continue
        except OSError:
            logger.warning("Could not delete attachment file %s", attachment_id, exc_info=True)
    return removed
