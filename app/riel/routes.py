import mimetypes

from flask import Blueprint, current_app, send_file

from app.riel.errors import NotFound
from app.riel.storage import LocalStorage, StorageError, storage_from_config

bp = Blueprint("routes", __name__)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for k8s/DO probes. No DB access, minimal overhead.
    """
    return "ok", 200


@bp.get("/media/<path:key>")
def media(key: str):
    """Serve uploads for the local storage backend (S3 serves its own URLs)."""
    storage = storage_from_config(current_app.config)
    if not isinstance(storage, LocalStorage) or not storage.exists(key):
        raise NotFound("File not found")
    try:
        fh = storage.open(key)
    except (OSError, StorageError) as e:
        raise NotFound("File not found") from e
    mimetype = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return send_file(fh, mimetype=mimetype, max_age=3600)
