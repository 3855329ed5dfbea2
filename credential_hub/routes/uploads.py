"""Serving files saved by the profile update route."""

from __future__ import annotations

from flask import Blueprint, send_from_directory

from credential_hub.filestore import get_uploads_dir

bp = Blueprint("uploads", __name__, url_prefix="/uploads")


@bp.get("/<path:filename>")
def serve_upload(filename: str):
    return send_from_directory(get_uploads_dir(), filename)
