"""/api/navigation routes driving a tab's navigation controller."""

from __future__ import annotations

from flask import Blueprint, jsonify

from credential_hub.navigation import page_from_name
from credential_hub.utils.auth import require_tab
from credential_hub.utils.request_body import json_object

bp = Blueprint("navigation", __name__, url_prefix="/api/navigation")


@bp.get("")
def get_navigation():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response
    return jsonify(tab.navigator.snapshot()), 200


@bp.post("/navigate")
def navigate():
    """Programmatic navigation requested by a page."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    page = page_from_name(payload.get("page"))
    if page is None:
        return jsonify(error=f"Unknown page: {payload.get('page')!r}"), 400

    tab.navigator.navigate_to(page)
    return jsonify(tab.navigator.snapshot()), 200


@bp.post("/back")
def go_back():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    tab.navigator.go_back()
    return jsonify(tab.navigator.snapshot()), 200


@bp.post("/forward")
def go_forward():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    tab.navigator.go_forward()
    return jsonify(tab.navigator.snapshot()), 200


@bp.post("/external")
def external_change():
    """Report a locator change made with the browser's own controls.

    ``action`` is ``back``, ``forward`` or ``visit`` (the default, for an
    edited fragment). A ``visit`` flagged ``fromHistory`` jumps to an existing
    entry for the locator, like choosing it from the history menu.
    """
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    action = payload.get("action") or "visit"
    locator = payload.get("locator")

    if action == "back":
        tab.locator.back()
    elif action == "forward":
        tab.locator.forward()
    elif action == "visit":
        if not isinstance(locator, str) or not locator:
            return jsonify(error="locator is required."), 400
        jumped = bool(payload.get("fromHistory")) and tab.locator.go_to(locator)
        if not jumped:
            tab.locator.visit(locator)
    else:
        return jsonify(error="action must be 'back', 'forward' or 'visit'."), 400

    return jsonify(tab.navigator.snapshot()), 200
