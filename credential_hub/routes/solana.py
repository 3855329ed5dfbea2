"""/solana routes exposing read-only account lookups."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from credential_hub.services import solana_service

bp = Blueprint("solana", __name__, url_prefix="/solana")


@bp.get("/account/<address>")
def get_account(address: str):
    if not solana_service.is_valid_address(address):
        return jsonify(error="Invalid Solana address format", address=address), 400

    try:
        account = solana_service.get_account_info(address)
    except solana_service.SolanaRPCError as exc:
        current_app.logger.warning("Account lookup for %s failed: %s", address, exc)
        return jsonify(error="Failed to fetch account information", message=str(exc)), 500

    if account is None:
        return jsonify(error="Account not found", address=address), 404
    return jsonify(account), 200
