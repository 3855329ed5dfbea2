"""Tests for the wallet profile and credential endpoints."""

from __future__ import annotations

import base64
import io
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

WALLET = "wallet_ABC-123"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def create_profile(client, **fields):
    data = {"walletAddress": WALLET, "firstName": "Ada", "lastName": "Lovelace"}
    data.update(fields)
    return client.post("/api/users/update", data=data, content_type="multipart/form-data")


def test_missing_profile_returns_404(client):
    response = client.get(f"/api/users/{WALLET}")
    assert response.status_code == 404
    assert response.get_json() == {"message": "Profile not found"}


def test_update_requires_wallet_address(client):
    response = client.post("/api/users/update", data={"firstName": "Ada"}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Wallet address is required"


def test_update_creates_then_overlays_non_empty_fields(client, data_dir):
    response = create_profile(client, gender="female")
    assert response.status_code == 200
    created = response.get_json()
    assert created["walletAddress"] == WALLET
    assert created["profileImage"] is None
    assert created["documents"] == []
    assert created["createdAt"].endswith("Z")

    response = create_profile(client, firstName="", lastName="Byron", age="36")
    updated = response.get_json()
    assert updated["firstName"] == "Ada"
    assert updated["lastName"] == "Byron"
    assert updated["gender"] == "female"
    assert updated["createdAt"] == created["createdAt"]

    stored = json.loads((data_dir / "profiles" / f"{WALLET}.json").read_text())
    assert stored["age"] == "36"


def test_update_stores_files_and_returns_public_urls(client, data_dir):
    response = client.post(
        "/api/users/update",
        data={
            "walletAddress": WALLET,
            "profileImage": (io.BytesIO(PNG_BYTES), "me.png", "image/png"),
            "documents": [
                (io.BytesIO(b"%PDF-1.4"), "degree.pdf", "application/pdf"),
                (io.BytesIO(b"%PDF-1.4"), "reference.pdf", "application/pdf"),
            ],
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["profileImage"].startswith("http://testserver:3001/uploads/profileImage-")
    assert len(body["documents"]) == 2
    assert all(url.endswith(".pdf") for url in body["documents"])

    stored = json.loads((data_dir / "profiles" / f"{WALLET}.json").read_text())
    assert stored["profileImage"].startswith("/uploads/")

    served = client.get(stored["profileImage"])
    assert served.status_code == 200
    assert served.data == PNG_BYTES


def test_update_accepts_data_url_image(client, data_dir):
    data_url = "data:image/jpeg;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
    response = create_profile(client, profileImage=data_url)

    image_url = response.get_json()["profileImage"]
    assert image_url.endswith(".png")
    filename = image_url.rsplit("/", 1)[-1]
    assert (data_dir / "uploads" / filename).read_bytes() == PNG_BYTES


def test_update_rejects_disallowed_file_type(client):
    response = client.post(
        "/api/users/update",
        data={
            "walletAddress": WALLET,
            "documents": [(io.BytesIO(b"#!/bin/sh"), "script.sh", "text/x-shellscript")],
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert "Invalid file type" in response.get_json()["message"]


def test_invalid_wallet_address_is_rejected(client):
    response = create_profile(client, walletAddress="../etc/passwd")
    assert response.status_code == 400


def test_education_credential_lifecycle(client):
    create_profile(client)

    response = client.post(
        f"/api/users/{WALLET}/credentials/education",
        json={"school": "  Cambridge ", "degree": "BA", "graduationYear": 1835},
    )
    assert response.status_code == 200
    credential = response.get_json()
    assert credential["id"].startswith("edu-")
    assert credential["school"] == "Cambridge"
    assert credential["graduationYear"] == "1835"
    assert credential["verified"] is False

    response = client.post(
        f"/api/users/{WALLET}/credentials/education",
        json={"id": credential["id"], "school": "Cambridge", "graduationYear": "1836", "verified": True},
    )
    updated = response.get_json()
    assert updated["graduationYear"] == "1836"
    assert updated["verified"] is False
    assert updated["createdAt"] == credential["createdAt"]

    listed = client.get(f"/api/users/{WALLET}/credentials").get_json()
    assert [item["id"] for item in listed["education"]] == [credential["id"]]
    assert listed["employment"] == []

    response = client.delete(f"/api/users/{WALLET}/credentials/education/{credential['id']}")
    assert response.status_code == 200
    assert client.get(f"/api/users/{WALLET}/credentials").get_json()["education"] == []


def test_credential_validation_and_missing_records(client):
    response = client.post(f"/api/users/{WALLET}/credentials/employment", json={"company": "Acme", "position": "Dev"})
    assert response.status_code == 404

    create_profile(client)
    response = client.post(f"/api/users/{WALLET}/credentials/employment", json={"company": "Acme"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Company and position are required"

    response = client.post(
        f"/api/users/{WALLET}/credentials/employment",
        json={"id": "emp-missing", "company": "Acme", "position": "Dev"},
    )
    assert response.status_code == 404
    assert response.get_json()["message"] == "Employment credential not found"

    response = client.delete(f"/api/users/{WALLET}/credentials/employment/emp-missing")
    assert response.status_code == 404


def test_employment_credential_defaults(client):
    create_profile(client)
    response = client.post(
        f"/api/users/{WALLET}/credentials/employment",
        json={"company": "Acme", "position": "Engineer", "isCurrent": True},
    )
    credential = response.get_json()
    assert credential["id"].startswith("emp-")
    assert credential["startDate"] == ""
    assert credential["isCurrent"] is True


def test_api_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "message": "Server is running"}


def test_corrupt_profile_file_is_a_server_error(client, data_dir, caplog):
    profiles = data_dir / "profiles"
    profiles.mkdir(parents=True, exist_ok=True)
    (profiles / f"{WALLET}.json").write_text("{oops", encoding="utf-8")

    response = client.get(f"/api/users/{WALLET}")
    assert response.status_code == 500
    assert response.get_json() == {"message": "Internal server error"}
    assert "Malformed record" in caplog.text

    response = client.post(
        f"/api/users/{WALLET}/credentials/education", json={"school": "MIT", "graduationYear": 2020}
    )
    assert response.status_code == 500
    assert client.get(f"/api/users/{WALLET}/credentials").status_code == 500


def test_credential_body_must_be_an_object(client):
    create_profile(client)
    response = client.post(f"/api/users/{WALLET}/credentials/education", json=["MIT"])
    assert response.status_code == 400
    assert response.get_json() == {"message": "Request body must be a JSON object"}
