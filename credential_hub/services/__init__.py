"""Service layer modules for the credential hub API."""

from . import (
    email_service,
    kv_store,
    openai_service,
    profile_service,
    resume_service,
    session_service,
    solana_service,
    tab_service,
    upload_service,
    verification_service,
)

__all__ = [
    "email_service",
    "kv_store",
    "openai_service",
    "profile_service",
    "resume_service",
    "session_service",
    "solana_service",
    "tab_service",
    "upload_service",
    "verification_service",
]
