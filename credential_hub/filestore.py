"""On-disk locations for profiles, uploads and verification requests."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

_LOGGER = logging.getLogger(__name__)


class CorruptRecordError(RuntimeError):
    """A stored JSON record could not be decoded into an object."""


def get_data_dir() -> Path:
    """Return the data root, creating it on first use."""
    root = Path(os.getenv("CREDENTIAL_HUB_DATA_DIR", "data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _subdir(name: str) -> Path:
    path = get_data_dir() / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    return _subdir("profiles")


def get_uploads_dir() -> Path:
    return _subdir("uploads")


def get_verifications_dir() -> Path:
    return _subdir("verifications")


def public_base_url() -> str:
    return os.getenv("PUBLIC_BASE_URL", "http://localhost:3001").rstrip("/")


def load_record(path: Path) -> Dict[str, Any]:
    """Read the JSON object stored at ``path``.

    ``FileNotFoundError`` propagates; a file that is not a JSON object is
    logged and raised as ``CorruptRecordError``.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        record = json.loads(raw)
    except ValueError as exc:
        _LOGGER.warning("Malformed record file %s: %s", path.name, exc)
        raise CorruptRecordError(f"Malformed record {path.name}") from exc
    if not isinstance(record, dict):
        _LOGGER.warning("Record file %s does not hold a JSON object", path.name)
        raise CorruptRecordError(f"Malformed record {path.name}")
    return record
