from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.riel.errors import InvalidInput
from app.riel.storage import Storage

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


@dataclass(frozen=True)
class StoredUpload:
    key: str
    url: str

    @property
    def public_id(self) -> str:
        # key without the file extension, same shape as hosted-media ids
        return self.key.rsplit(".", 1)[0]


def upload_key(folder: str, filename: str, *, now: datetime | None = None) -> str:
    now = now or datetime.utcnow()
    safe = secure_filename(filename or "") or "upload"
    return f"{folder.strip('/')}/{now:%Y-%m-%d}/{secrets.token_hex(8)}-{safe}"


def read_upload(f: FileStorage | None) -> bytes:
    """Size and type checks; returns the file body."""
    if f is None or not (f.filename or "").strip():
        raise InvalidInput("No file uploaded.")
    if (f.mimetype or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise InvalidInput("Invalid file type. Only JPG, PNG, GIF, WEBP allowed.")
    data = f.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise InvalidInput("File size exceeds 5MB limit.")
    return data


def store_upload(storage: Storage, folder: str, f: FileStorage | None) -> StoredUpload:
    data = read_upload(f)
    key = upload_key(folder, f.filename or "")  # type: ignore[union-attr]
    storage.put_bytes(key, data, content_type=f.mimetype)  # type: ignore[union-attr]
    return StoredUpload(key=key, url=storage.public_url(key))
