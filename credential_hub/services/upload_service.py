"""Storing uploaded profile images and documents under the uploads directory."""

from __future__ import annotations

import base64
import binascii
import os
import re
import secrets
import time
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from credential_hub.filestore import get_uploads_dir

ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|gif|pdf|doc|docx|msword")
DATA_URL_PATTERN = re.compile(r"^data:image/(\w+);base64,(.+)$", re.DOTALL)
INVALID_TYPE_MESSAGE = "Invalid file type. Only images and documents are allowed."
MAX_DOCUMENTS = 10


def is_allowed_file(filename: Optional[str], mimetype: Optional[str]) -> bool:
    """Both the extension and the mime type must look like an image or document."""
    _, ext = os.path.splitext((filename or "").lower())
    return bool(ALLOWED_TYPES.search(ext)) and bool(ALLOWED_TYPES.search((mimetype or "").lower()))


def unique_filename(fieldname: str, original: Optional[str]) -> str:
    _, ext = os.path.splitext(secure_filename(original or ""))
    return f"{fieldname}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext.lower()}"


def save_file(storage: FileStorage, fieldname: str) -> str:
    """Write an uploaded file and return its ``/uploads/...`` path."""
    if not is_allowed_file(storage.filename, storage.mimetype):
        raise ValueError(INVALID_TYPE_MESSAGE)

    filename = unique_filename(fieldname, storage.filename)
    storage.save(str(get_uploads_dir() / filename))
    return f"/uploads/{filename}"


def save_data_url_image(data_url: Optional[str]) -> Optional[str]:
    """Decode a ``data:image/...;base64,`` URL into a PNG upload; ``None`` if it is not one."""
    match = DATA_URL_PATTERN.match(data_url or "")
    if not match:
        return None

    try:
        raw = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Profile image could not be decoded") from exc

    filename = f"profile-{int(time.time() * 1000)}.png"
    (get_uploads_dir() / filename).write_bytes(raw)
    return f"/uploads/{filename}"
