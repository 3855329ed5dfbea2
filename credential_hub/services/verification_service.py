"""Credential verification requests addressed to employers and institutions."""

from __future__ import annotations

import json
import logging
import re
import secrets
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from credential_hub.filestore import CorruptRecordError, get_verifications_dir, load_record
from credential_hub.services import profile_service

_LOGGER = logging.getLogger(__name__)

ORGANIZATION_TYPES = ("employer", "institution")
STATUSES = ("pending", "approved", "rejected")
REQUEST_ID_PATTERN = re.compile(r"^ver_[0-9a-f]{16}$")


class VerificationNotFoundError(LookupError):
    """No verification request exists with the given id."""


class VerificationConflictError(Exception):
    """The request has already been approved or rejected."""


def _request_path(request_id: str) -> Path:
    if not REQUEST_ID_PATTERN.match(request_id or ""):
        raise VerificationNotFoundError("Verification request not found")
    return get_verifications_dir() / f"{request_id}.json"


def _write(record: Mapping[str, Any]) -> None:
    _request_path(record["id"]).write_text(json.dumps(record, indent=2), encoding="utf-8")


def get_request(request_id: str) -> Dict[str, Any]:
    path = _request_path(request_id)
    try:
        return load_record(path)
    except FileNotFoundError:
        raise VerificationNotFoundError("Verification request not found") from None


def create_request(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Open a pending request for an organization to vouch for one credential."""
    wallet_address = str(payload.get("walletAddress") or "").strip()
    credential_type = str(payload.get("credentialType") or "").strip()
    credential_id = str(payload.get("credentialId") or "").strip()
    organization = str(payload.get("organization") or "").strip()
    organization_type = str(payload.get("organizationType") or "employer").strip()

    if not wallet_address or not credential_id or not organization:
        raise ValueError("walletAddress, credentialId and organization are required")
    if credential_type not in profile_service.CREDENTIAL_KINDS:
        raise ValueError("credentialType must be 'education' or 'employment'")
    if organization_type not in ORGANIZATION_TYPES:
        raise ValueError("organizationType must be 'employer' or 'institution'")

    profile = profile_service.require_profile(wallet_address)
    credential = profile_service.find_credential(profile, credential_type, credential_id)
    if credential is None:
        raise profile_service.CredentialNotFoundError("Credential not found")

    record = {
        "id": f"ver_{secrets.token_hex(8)}",
        "walletAddress": wallet_address,
        "studentName": " ".join(filter(None, [profile.get("firstName"), profile.get("lastName")])),
        "credentialType": credential_type,
        "credentialId": credential_id,
        "credential": credential.get("position") or credential.get("degree") or credential.get("school") or "",
        "organization": organization,
        "organizationType": organization_type,
        "status": "pending",
        "note": str(payload.get("note") or ""),
        "createdAt": profile_service.now_iso(),
        "decidedAt": None,
    }
    _write(record)
    _LOGGER.info("Verification request %s opened for %s", record["id"], organization)
    return record


def list_requests(
    organization: Optional[str] = None,
    status: Optional[str] = None,
    wallet_address: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Return matching requests, newest first."""
    if status and status not in STATUSES:
        raise ValueError(f"status must be one of {', '.join(STATUSES)}")

    wanted_org = (organization or "").strip().lower()
    records: List[Dict[str, Any]] = []
    for path in get_verifications_dir().glob("ver_*.json"):
        try:
            record = load_record(path)
        except CorruptRecordError:
            continue

        if wanted_org and record.get("organization", "").lower() != wanted_org:
            continue
        if status and record.get("status") != status:
            continue
        if wallet_address and record.get("walletAddress") != wallet_address:
            continue
        records.append(record)

    records.sort(key=lambda item: item.get("createdAt") or "", reverse=True)
    return records


def decide_request(request_id: str, approve: bool, note: Optional[str] = None) -> Dict[str, Any]:
    """Approve or reject a pending request; approval marks the credential verified."""
    record = get_request(request_id)
    if record.get("status") != "pending":
        raise VerificationConflictError(f"Verification request already {record.get('status')}")

    if approve:
        profile_service.mark_credential_verified(
            record["walletAddress"], record["credentialType"], record["credentialId"]
        )

    record["status"] = "approved" if approve else "rejected"
    record["decidedAt"] = profile_service.now_iso()
    if note:
        record["note"] = str(note)
    _write(record)
    _LOGGER.info("Verification request %s %s", request_id, record["status"])
    return record


def verified_credentials(wallet_address: str) -> Dict[str, Any]:
    """Summarize the verified credentials an organization may see for a wallet."""
    profile = profile_service.require_profile(wallet_address)
    return {
        "walletAddress": wallet_address,
        "firstName": profile.get("firstName"),
        "lastName": profile.get("lastName"),
        "education": [item for item in profile.get("education") or [] if item.get("verified")],
        "employment": [item for item in profile.get("employment") or [] if item.get("verified")],
    }
