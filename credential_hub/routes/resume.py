"""/api/resume routes turning an uploaded resume into profile fields."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from credential_hub.services import resume_service
from credential_hub.utils.auth import require_tab
from credential_hub.utils.text import UnsupportedFileType

bp = Blueprint("resume", __name__, url_prefix="/api/resume")


@bp.post("/parse")
def parse_resume():
    """Parse a PDF or DOCX resume, optionally pre-filling the tab's user session."""
    apply_to_session = (request.form.get("apply") or "").lower() == "true"
    tab = None
    if apply_to_session:
        tab, error_response = require_tab()
        if error_response is not None:
            return error_response

    storage = request.files.get("file")
    if storage is None or not storage.filename:
        return jsonify(error="No resume file uploaded."), 400

    raw_bytes = storage.read()
    try:
        parsed = resume_service.parse_resume_file(raw_bytes, storage.filename, storage.mimetype or "")
    except UnsupportedFileType as exc:
        return jsonify(error=str(exc)), 400
    except resume_service.EmptyResumeError as exc:
        return jsonify(error="resume_text_empty", message=str(exc)), 422
    except ValueError:
        current_app.logger.exception("Failed to read resume %s", storage.filename)
        return jsonify(error="Could not read the resume file."), 400

    response = {"parsed": parsed}
    if tab is not None:
        user_data = resume_service.resume_to_user_data(parsed)
        tab.session.set_user_data(user_data)
        response["applied"] = sorted(user_data)
        response["user"] = tab.session.user.to_public_dict()

    return jsonify(response), 200
