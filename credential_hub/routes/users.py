"""/api/users routes for wallet profiles and their education/employment credentials."""

from __future__ import annotations

from typing import List

from flask import Blueprint, current_app, jsonify, request

from credential_hub.filestore import CorruptRecordError
from credential_hub.services import profile_service, upload_service
from credential_hub.utils.request_body import json_object

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("/<wallet_address>")
def get_profile(wallet_address: str):
    try:
        profile = profile_service.read_profile(wallet_address)
    except ValueError as exc:
        return jsonify(message=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Error fetching profile")
        return jsonify(message="Internal server error"), 500

    if profile is None:
        return jsonify(message="Profile not found"), 404
    return jsonify(profile), 200


@bp.post("/update")
def update_profile():
    """Create or update a profile from multipart form fields and files."""
    wallet_address = (request.form.get("walletAddress") or "").strip()
    if not wallet_address:
        return jsonify(message="Wallet address is required"), 400
    if not profile_service.is_valid_wallet_address(wallet_address):
        return jsonify(message="Invalid wallet address"), 400

    document_files = [item for item in request.files.getlist("documents") if item.filename]
    if len(document_files) > upload_service.MAX_DOCUMENTS:
        return jsonify(message=f"At most {upload_service.MAX_DOCUMENTS} documents may be uploaded"), 400

    try:
        profile_image = None
        image_file = request.files.get("profileImage")
        if image_file is not None and image_file.filename:
            profile_image = upload_service.save_file(image_file, "profileImage")
        else:
            profile_image = upload_service.save_data_url_image(request.form.get("profileImage"))

        documents: List[str] = [upload_service.save_file(item, "documents") for item in document_files]

        profile = profile_service.update_profile(
            wallet_address,
            request.form,
            profile_image=profile_image,
            documents=documents,
        )
    except ValueError as exc:
        return jsonify(message=str(exc)), 400
    except (OSError, CorruptRecordError) as exc:
        current_app.logger.exception("Error updating profile")
        return jsonify(message=str(exc) or "Internal server error"), 500

    return jsonify(profile_service.public_profile(profile)), 200


@bp.get("/<wallet_address>/credentials")
def get_credentials(wallet_address: str):
    try:
        credentials = profile_service.get_credentials(wallet_address)
    except profile_service.ProfileNotFoundError as exc:
        return jsonify(message=str(exc)), 404
    except ValueError as exc:
        return jsonify(message=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Error fetching credentials")
        return jsonify(message="Internal server error"), 500
    return jsonify(credentials), 200


def _save_credential(wallet_address: str, kind: str):
    payload, error_response = json_object("message")
    if error_response is not None:
        return error_response
    saver = profile_service.save_education if kind == "education" else profile_service.save_employment
    try:
        credential = saver(wallet_address, payload)
    except LookupError as exc:
        return jsonify(message=str(exc)), 404
    except ValueError as exc:
        return jsonify(message=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Error saving %s credential", kind)
        return jsonify(message="Internal server error"), 500
    return jsonify(credential), 200


@bp.post("/<wallet_address>/credentials/education")
def save_education(wallet_address: str):
    """Add or update (when ``id`` is present) an education credential."""
    return _save_credential(wallet_address, "education")


@bp.post("/<wallet_address>/credentials/employment")
def save_employment(wallet_address: str):
    """Add or update (when ``id`` is present) an employment credential."""
    return _save_credential(wallet_address, "employment")


@bp.delete("/<wallet_address>/credentials/<kind>/<credential_id>")
def delete_credential(wallet_address: str, kind: str, credential_id: str):
    if kind not in profile_service.CREDENTIAL_KINDS:
        return jsonify(message="Not found"), 404

    try:
        profile_service.delete_credential(wallet_address, kind, credential_id)
    except LookupError as exc:
        return jsonify(message=str(exc)), 404
    except ValueError as exc:
        return jsonify(message=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Error deleting %s credential", kind)
        return jsonify(message="Internal server error"), 500
    return jsonify(success=True), 200
