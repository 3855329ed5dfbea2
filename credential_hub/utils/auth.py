"""Helpers for issuing tab tokens and resolving them on incoming requests."""

from __future__ import annotations

import os
import re
import secrets
import time
from typing import Any, Optional, Tuple

from flask import Flask, jsonify, request

from credential_hub.storage import tabs

# Idle lifetime of a tab (seconds).
TAB_TTL_SECONDS = int(os.getenv("TAB_TTL_SECONDS", str(24 * 60 * 60)))

CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def generate_token(prefix: str = "tab") -> str:
    """Return a random token with the given prefix suitable for in-memory keys."""
    return f"{prefix}_{secrets.token_urlsafe(12)}"


def is_valid_client_id(client_id: Optional[str]) -> bool:
    return isinstance(client_id, str) and bool(CLIENT_ID_PATTERN.match(client_id))


def prune_expired() -> None:
    """Close tabs that have been idle past their expiry."""
    current = now_seconds()
    for token, tab in list(tabs.items()):
        if tab.expires_at <= current:
            tabs.pop(token, None)
            tab.close()


def require_tab() -> Tuple[Optional[Any], Optional[Any]]:
    """Validate the Bearer token from the request and return the associated tab."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None, (jsonify(error="Missing tab token."), 401)

    token = auth_header[7:].strip()
    tab = tabs.get(token)
    if not tab:
        return None, (jsonify(error="Invalid or expired tab."), 401)

    if tab.expires_at <= now_seconds():
        tabs.pop(token, None)
        tab.close()
        return None, (jsonify(error="Tab expired."), 401)

    tab.expires_at = now_seconds() + TAB_TTL_SECONDS
    return tab, None


def register_tab_cleanup(app: Flask) -> None:
    """Attach a before-request handler that keeps tab state tidy."""

    @app.before_request  # pragma: no cover - trivial wiring
    def _cleanup_state() -> None:
        prune_expired()
