"""Verification requests that let organizations vouch for a credential."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from credential_hub.filestore import CorruptRecordError
from credential_hub.services import verification_service
from credential_hub.utils.request_body import json_object

bp = Blueprint("verifications", __name__)


@bp.post("/api/verifications")
def create_verification():
    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    try:
        record = verification_service.create_request(payload)
    except LookupError as exc:
        return jsonify(error=str(exc)), 404
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Failed to open verification request")
        return jsonify(error="Internal server error"), 500
    return jsonify(record), 201


@bp.get("/api/verifications")
def list_verifications():
    """List requests, optionally filtered by organization, status or wallet."""
    try:
        records = verification_service.list_requests(
            organization=request.args.get("organization"),
            status=request.args.get("status"),
            wallet_address=request.args.get("walletAddress"),
        )
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    return jsonify(requests=records), 200


def _decide(request_id: str, approve: bool):
    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    try:
        record = verification_service.decide_request(request_id, approve, payload.get("note"))
    except verification_service.VerificationConflictError as exc:
        return jsonify(error=str(exc)), 409
    except LookupError as exc:
        return jsonify(error=str(exc)), 404
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Failed to record decision for %s", request_id)
        return jsonify(error="Internal server error"), 500
    return jsonify(record), 200


@bp.post("/api/verifications/<request_id>/approve")
def approve_verification(request_id: str):
    return _decide(request_id, approve=True)


@bp.post("/api/verifications/<request_id>/reject")
def reject_verification(request_id: str):
    return _decide(request_id, approve=False)


@bp.get("/api/organizations/lookup/<wallet_address>")
def lookup_wallet(wallet_address: str):
    """Return the verified credentials an organization can rely on for a wallet."""
    try:
        summary = verification_service.verified_credentials(wallet_address)
    except LookupError as exc:
        return jsonify(error=str(exc)), 404
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    except (OSError, CorruptRecordError):
        current_app.logger.exception("Failed to look up %s", wallet_address)
        return jsonify(error="Internal server error"), 500
    return jsonify(summary), 200
