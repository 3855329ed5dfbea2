"""Tests for the Solana JSON-RPC wrapper and its HTTP routes."""

from __future__ import annotations

import base64
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from credential_hub.services import solana_service  # noqa: E402

SYSTEM_PROGRAM = "11111111111111111111111111111111"
ADDRESS = "Vote111111111111111111111111111111111111111"


class FakeResponse:
    def __init__(self, body, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self._body


@pytest.fixture
def rpc(monkeypatch):
    """Route RPC calls to per-method canned results."""
    results = {}
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append(json)
        outcome = results.get(json["method"])
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "result": outcome})

    monkeypatch.setattr(solana_service.requests, "post", fake_post)
    return SimpleNamespace(results=results, calls=calls)


def test_address_validation():
    assert solana_service.is_valid_address(SYSTEM_PROGRAM)
    assert solana_service.is_valid_address(ADDRESS)
    assert not solana_service.is_valid_address("")
    assert not solana_service.is_valid_address("not-base58-0OIl")
    assert not solana_service.is_valid_address("1111")


def test_rpc_error_member_raises(rpc):
    rpc.results["getSlot"] = FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})
    with pytest.raises(solana_service.SolanaRPCError, match="nope"):
        solana_service.rpc_call("getSlot")


def test_get_account_info_shapes_account(rpc):
    payload = base64.b64encode(b"abcd").decode("ascii")
    rpc.results["getAccountInfo"] = {
        "context": {"slot": 1},
        "value": {
            "lamports": 1_000_000,
            "owner": SYSTEM_PROGRAM,
            "executable": False,
            "rentEpoch": 361,
            "data": [payload, "base64"],
        },
    }
    account = solana_service.get_account_info(ADDRESS)

    assert account == {
        "address": ADDRESS,
        "lamports": 1_000_000,
        "owner": SYSTEM_PROGRAM,
        "executable": False,
        "rentEpoch": 361,
        "data": {"length": 4, "base64": payload},
    }
    params = rpc.calls[0]["params"]
    assert params[1] == {"encoding": "base64", "commitment": "confirmed"}


def test_get_account_info_missing_account(rpc):
    rpc.results["getAccountInfo"] = {"context": {"slot": 1}, "value": None}
    assert solana_service.get_account_info(ADDRESS) is None


def test_get_account_info_undecodable_data(client, rpc):
    rpc.results["getAccountInfo"] = {
        "context": {"slot": 1},
        "value": {"lamports": 1, "owner": SYSTEM_PROGRAM, "data": ["%%%not-base64", "base64"]},
    }
    with pytest.raises(solana_service.SolanaRPCError, match="undecodable"):
        solana_service.get_account_info(ADDRESS)

    response = client.get(f"/solana/account/{ADDRESS}")
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to fetch account information"


def test_health_route_reports_connection(client, rpc):
    rpc.results["getVersion"] = {"solana-core": "1.18.0"}
    rpc.results["getSlot"] = 123

    response = client.get("/health")
    body = response.get_json()
    assert response.status_code == 200
    assert body["status"] == "ok"
    assert body["solana"] == {"connected": True, "network": solana_service.NETWORK}


def test_health_route_reports_outage(client, rpc):
    rpc.results["getVersion"] = requests.ConnectionError("connection refused")

    response = client.get("/health")
    body = response.get_json()
    assert response.status_code == 503
    assert body["status"] == "error"
    assert body["solana"]["connected"] is False
    assert "connection refused" in body["solana"]["error"]


def test_account_route_status_codes(client, rpc):
    assert client.get("/solana/account/bad-address").status_code == 400

    rpc.results["getAccountInfo"] = {"context": {"slot": 1}, "value": None}
    response = client.get(f"/solana/account/{ADDRESS}")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Account not found"

    rpc.results["getAccountInfo"] = FakeResponse({}, status_code=502)
    response = client.get(f"/solana/account/{ADDRESS}")
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to fetch account information"


def test_index_lists_endpoints(client):
    body = client.get("/").get_json()
    assert body["message"] == "Blockchain Credential Hub API"
    assert body["endpoints"]["solana"]["account"] == "/solana/account/:address"
