"""Thin JSON-RPC client for the public Solana node used for wallet lookups."""

from __future__ import annotations

import base64
import itertools
import logging
import os
from typing import Any, Dict, List, Optional

import base58
import requests

_LOGGER = logging.getLogger(__name__)

RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.devnet.solana.com")
NETWORK = os.getenv("SOLANA_NETWORK", "devnet")
COMMITMENT = "confirmed"
RPC_TIMEOUT_SECONDS = 10
PUBLIC_KEY_LENGTH = 32

_request_ids = itertools.count(1)


class SolanaRPCError(RuntimeError):
    """The node could not be reached or answered with an error."""


def get_network_info() -> Dict[str, str]:
    return {"rpcUrl": RPC_URL, "network": NETWORK}


def is_valid_address(address: Optional[str]) -> bool:
    """Return whether ``address`` is a base58-encoded 32-byte public key."""
    if not address:
        return False
    try:
        decoded = base58.b58decode(address)
    except ValueError:
        return False
    return len(decoded) == PUBLIC_KEY_LENGTH


def rpc_call(method: str, params: Optional[List[Any]] = None) -> Any:
    """POST a JSON-RPC request and return its ``result`` member."""
    payload = {"jsonrpc": "2.0", "id": next(_request_ids), "method": method, "params": params or []}
    try:
        resp = requests.post(RPC_URL, json=payload, timeout=RPC_TIMEOUT_SECONDS)
        resp.raise_for_status()
        body = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise SolanaRPCError(f"{method} request failed: {exc}") from exc

    if body.get("error"):
        error = body["error"]
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise SolanaRPCError(f"{method} returned an error: {message}")
    return body.get("result")


def verify_connection() -> Dict[str, Any]:
    """Check that the node answers ``getVersion`` and ``getSlot``."""
    try:
        rpc_call("getVersion")
        rpc_call("getSlot", [{"commitment": COMMITMENT}])
    except SolanaRPCError as exc:
        _LOGGER.warning("Solana RPC health check failed: %s", exc)
        return {"connected": False, "error": str(exc) or "Failed to connect to Solana RPC"}
    return {"connected": True, "network": NETWORK}


def get_account_info(address: str) -> Optional[Dict[str, Any]]:
    """Return account details for ``address``, or ``None`` if the account does not exist."""
    result = rpc_call("getAccountInfo", [address, {"encoding": "base64", "commitment": COMMITMENT}])
    account = (result or {}).get("value")
    if not account:
        return None

    data_field = account.get("data") or ["", "base64"]
    encoded = data_field[0] if isinstance(data_field, list) and data_field else ""
    space = account.get("space")
    if isinstance(space, int):
        length = space
    else:
        try:
            length = len(base64.b64decode(encoded, validate=True))
        except (TypeError, ValueError) as exc:
            raise SolanaRPCError(f"getAccountInfo returned undecodable data for {address}") from exc

    return {
        "address": address,
        "lamports": account.get("lamports"),
        "owner": account.get("owner"),
        "executable": bool(account.get("executable")),
        "rentEpoch": account.get("rentEpoch"),
        "data": {"length": length, "base64": encoded} if length > 0 else None,
    }
