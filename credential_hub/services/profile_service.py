"""Per-wallet profile documents stored as individual JSON files."""

from __future__ import annotations

import json
import re
import secrets
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from credential_hub.filestore import get_profiles_dir, load_record, public_base_url

WALLET_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

CREDENTIAL_KINDS = ("education", "employment")
PROFILE_FIELDS = ("firstName", "lastName", "gender", "age", "lastFourSSN")


class ProfileNotFoundError(LookupError):
    """No profile file exists for the wallet address."""


class CredentialNotFoundError(LookupError):
    """The profile has no credential with the requested id."""


def now_iso() -> str:
    """Return the current UTC time formatted like ``Date.prototype.toISOString``."""
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def is_valid_wallet_address(wallet_address: Optional[str]) -> bool:
    return bool(wallet_address) and bool(WALLET_PATTERN.match(wallet_address))


def _profile_path(wallet_address: str) -> Path:
    if not is_valid_wallet_address(wallet_address):
        raise ValueError("Invalid wallet address")
    return get_profiles_dir() / f"{wallet_address}.json"


def read_profile(wallet_address: str) -> Optional[Dict[str, Any]]:
    """Return the stored profile, or ``None`` when the wallet has none."""
    path = _profile_path(wallet_address)
    try:
        return load_record(path)
    except FileNotFoundError:
        return None


def write_profile(wallet_address: str, profile: Mapping[str, Any]) -> None:
    path = _profile_path(wallet_address)
    path.write_text(json.dumps(profile, indent=2), encoding="utf-8")


def require_profile(wallet_address: str) -> Dict[str, Any]:
    profile = read_profile(wallet_address)
    if profile is None:
        raise ProfileNotFoundError("Profile not found")
    return profile


def public_url(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{public_base_url()}{path}"


def public_profile(profile: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``profile`` with upload paths expanded to absolute URLs."""
    response = dict(profile)
    response["profileImage"] = public_url(profile.get("profileImage"))
    response["documents"] = [public_url(doc) for doc in profile.get("documents") or []]
    return response


def update_profile(
    wallet_address: str,
    fields: Mapping[str, Any],
    *,
    profile_image: Optional[str] = None,
    documents: Iterable[str] = (),
) -> Dict[str, Any]:
    """Create or update a profile, overlaying only the non-empty ``fields``."""
    profile = read_profile(wallet_address) or {
        "walletAddress": wallet_address,
        "createdAt": now_iso(),
    }

    for name in PROFILE_FIELDS:
        value = fields.get(name)
        if value:
            profile[name] = value

    if profile_image:
        profile["profileImage"] = profile_image

    new_documents = list(documents)
    if new_documents:
        profile.setdefault("documents", []).extend(new_documents)

    profile["updatedAt"] = now_iso()
    write_profile(wallet_address, profile)
    return profile


# ----------------------------------------------------------------------
# Credentials
def get_credentials(wallet_address: str) -> Dict[str, Any]:
    profile = require_profile(wallet_address)
    return {kind: profile.get(kind) or [] for kind in CREDENTIAL_KINDS}


def _new_credential_id(prefix: str, existing: Iterable[Mapping[str, Any]]) -> str:
    taken = {item.get("id") for item in existing}
    candidate = f"{prefix}-{int(time.time() * 1000)}"
    while candidate in taken:
        candidate = f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(2)}"
    return candidate


def _upsert_credential(
    wallet_address: str,
    kind: str,
    prefix: str,
    credential_id: Optional[str],
    values: Dict[str, Any],
) -> Dict[str, Any]:
    profile = require_profile(wallet_address)
    items = profile.setdefault(kind, [])
    timestamp = now_iso()

    if credential_id:
        index = next((i for i, item in enumerate(items) if item.get("id") == credential_id), -1)
        if index == -1:
            label = "Education" if kind == "education" else "Employment"
            raise CredentialNotFoundError(f"{label} credential not found")
        existing = items[index]
        record = {
            **existing,
            **values,
            "id": credential_id,
            "verified": bool(existing.get("verified", False)),
            "createdAt": existing.get("createdAt"),
            "updatedAt": timestamp,
        }
        items[index] = record
    else:
        record = {
            "id": _new_credential_id(prefix, items),
            **values,
            "verified": False,
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        items.append(record)

    profile["updatedAt"] = timestamp
    write_profile(wallet_address, profile)
    return record


def save_education(wallet_address: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Add a new education credential, or update the one named by ``payload["id"]``."""
    school = str(payload.get("school") or "").strip()
    graduation_year = payload.get("graduationYear")
    if not school or graduation_year in (None, ""):
        raise ValueError("School and graduation year are required")

    values = {
        "school": school,
        "degree": str(payload.get("degree") or "").strip(),
        "fieldOfStudy": str(payload.get("fieldOfStudy") or "").strip(),
        "graduationYear": str(graduation_year),
    }
    return _upsert_credential(wallet_address, "education", "edu", payload.get("id"), values)


def save_employment(wallet_address: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Add a new employment credential, or update the one named by ``payload["id"]``."""
    company = str(payload.get("company") or "").strip()
    position = str(payload.get("position") or "").strip()
    if not company or not position:
        raise ValueError("Company and position are required")

    values = {
        "company": company,
        "position": position,
        "startDate": payload.get("startDate") or "",
        "endDate": payload.get("endDate") or "",
        "isCurrent": bool(payload.get("isCurrent", False)),
    }
    return _upsert_credential(wallet_address, "employment", "emp", payload.get("id"), values)


def delete_credential(wallet_address: str, kind: str, credential_id: str) -> None:
    profile = require_profile(wallet_address)
    label = "Education" if kind == "education" else "Employment"
    items = profile.get(kind)
    if not items or not any(item.get("id") == credential_id for item in items):
        raise CredentialNotFoundError(f"{label} credential not found")

    profile[kind] = [item for item in items if item.get("id") != credential_id]
    profile["updatedAt"] = now_iso()
    write_profile(wallet_address, profile)


def find_credential(profile: Mapping[str, Any], kind: str, credential_id: str) -> Optional[Dict[str, Any]]:
    for item in profile.get(kind) or []:
        if item.get("id") == credential_id:
            return item
    return None


def mark_credential_verified(wallet_address: str, kind: str, credential_id: str) -> Dict[str, Any]:
    """Flag a credential as verified by an organization."""
    profile = require_profile(wallet_address)
    credential = find_credential(profile, kind, credential_id)
    if credential is None:
        raise CredentialNotFoundError("Credential not found")

    timestamp = now_iso()
    credential["verified"] = True
    credential["updatedAt"] = timestamp
    profile["updatedAt"] = timestamp
    write_profile(wallet_address, profile)
    return credential
