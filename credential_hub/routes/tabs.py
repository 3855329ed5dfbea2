"""/api/tabs routes opening and closing server-held browser tabs."""

from __future__ import annotations

from flask import Blueprint, jsonify

from credential_hub.services import tab_service
from credential_hub.utils.auth import is_valid_client_id, require_tab
from credential_hub.utils.request_body import json_object

bp = Blueprint("tabs", __name__, url_prefix="/api/tabs")


@bp.post("")
def open_tab():
    """Open a tab for a browser profile, starting at the locator it loaded with."""
    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    client_id = payload.get("clientId")
    locator = payload.get("locator") or ""

    if client_id is not None and not is_valid_client_id(client_id):
        return jsonify(error="clientId must be 8-64 letters, digits, '-' or '_'."), 400
    if not isinstance(locator, str):
        return jsonify(error="locator must be a string."), 400

    tab = tab_service.open_tab(client_id, locator)
    return jsonify(tab.to_dict()), 201


@bp.get("")
def get_tab():
    """Return the current tab's token, client id and navigation state."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response
    return jsonify(tab.to_dict()), 200


@bp.delete("")
def close_tab():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    tab_service.close_tab(tab)
    return jsonify(success=True), 200
