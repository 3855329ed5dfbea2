"""Health checks for the API process and its blockchain RPC node."""

from __future__ import annotations

from flask import Blueprint, jsonify

from credential_hub.services import profile_service, solana_service

bp = Blueprint("health", __name__)


@bp.get("/api/health")
def api_health():
    return jsonify(status="ok", message="Server is running"), 200


@bp.get("/health")
def node_health():
    """Report whether the configured RPC node answers."""
    status = solana_service.verify_connection()
    solana = {
        "connected": status["connected"],
        "network": solana_service.get_network_info()["network"],
    }
    if status.get("error"):
        solana["error"] = status["error"]

    code = 200 if status["connected"] else 503
    return (
        jsonify(
            status="ok" if status["connected"] else "error",
            timestamp=profile_service.now_iso(),
            solana=solana,
        ),
        code,
    )
