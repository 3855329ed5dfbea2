"""Outbound email for confirmation and password-reset links.

Messages go out over SMTP when ``SMTP_HOST`` is configured. Otherwise, or
when delivery fails, they are appended to the ``credentialHub_sentEmails``
log in the caller's key/value store so the flow that triggered them can
carry on.
"""

from __future__ import annotations

import logging
import os
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Dict, List, Optional

from credential_hub.services.kv_store import SENT_EMAILS_KEY, KeyValueStore, read_json, write_json

_LOGGER = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15

_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background: linear-gradient(135deg, #14b8a6 0%, #06b6d4 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
.content { background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px; }
.button { display: inline-block; padding: 12px 30px; background: #14b8a6; color: white; text-decoration: none; border-radius: 5px; margin: 20px 0; }
.footer { text-align: center; margin-top: 20px; color: #666; font-size: 12px; }
"""


def _smtp_settings() -> Optional[Dict[str, Any]]:
    host = os.getenv("SMTP_HOST")
    if not host:
        return None
    return {
        "host": host,
        "port": int(os.getenv("SMTP_PORT", "587")),
        "username": os.getenv("SMTP_USERNAME", ""),
        "password": os.getenv("SMTP_PASSWORD", ""),
        "use_tls": os.getenv("SMTP_USE_TLS", "true").lower() == "true",
        "from_email": os.getenv("EMAIL_FROM", "noreply@credentialhub.com"),
        "from_name": os.getenv("EMAIL_FROM_NAME", "CredentialHub Team"),
    }


def _render_html(title: str, paragraphs: List[str], link: str, button_label: str, notice: str = "") -> str:
    year = datetime.now().year
    body = "".join(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    extra = f"<p><strong>{notice}</strong></p>" if notice else ""
    return (
        "<!DOCTYPE html><html><head><meta charset=\"UTF-8\">"
        f"<style>{_STYLE}</style></head><body><div class=\"container\">"
        f"<div class=\"header\"><h1>{title}</h1></div>"
        f"<div class=\"content\">{body}"
        f"<a href=\"{link}\" class=\"button\">{button_label}</a>"
        "<p>Or copy and paste this link into your browser:</p>"
        f"<p style=\"word-break: break-all; color: #14b8a6;\">{link}</p>{extra}</div>"
        f"<div class=\"footer\"><p>&copy; {year} CredentialHub. All rights reserved.</p></div>"
        "</div></body></html>"
    )


def build_confirmation_email(email: str, link: str) -> Dict[str, str]:
    year = datetime.now().year
    text = (
        "Welcome to CredentialHub!\n\n"
        "Thank you for signing up! Please confirm your email address to complete your registration.\n\n"
        f"Click this link to confirm your email:\n{link}\n\n"
        "If you didn't create an account with CredentialHub, you can safely ignore this email.\n\n"
        f"© {year} CredentialHub. All rights reserved."
    )
    html = _render_html(
        "Welcome to CredentialHub!",
        [
            "Thank you for signing up! Please confirm your email address to complete your registration.",
            "Click the button below to confirm your email:",
        ],
        link,
        "Confirm Email Address",
    )
    return {"to": email, "subject": "Confirm Your Email - CredentialHub", "text": text, "html": html}


def build_password_reset_email(email: str, link: str) -> Dict[str, str]:
    year = datetime.now().year
    text = (
        "Password Reset Request\n\n"
        "You requested to reset your password for your CredentialHub account.\n\n"
        f"Click this link to reset your password:\n{link}\n\n"
        "This link will expire in 1 hour.\n\n"
        "If you didn't request a password reset, you can safely ignore this email.\n\n"
        f"© {year} CredentialHub. All rights reserved."
    )
    html = _render_html(
        "Password Reset Request",
        [
            "You requested to reset your password for your CredentialHub account.",
            "Click the button below to reset your password:",
        ],
        link,
        "Reset Password",
        notice="This link will expire in 1 hour.",
    )
    return {"to": email, "subject": "Reset Your Password - CredentialHub", "text": text, "html": html}


def _deliver_smtp(settings: Dict[str, Any], email_data: Dict[str, str]) -> None:
    msg = EmailMessage()
    msg["Subject"] = email_data["subject"]
    msg["From"] = f"{settings['from_name']} <{settings['from_email']}>"
    msg["To"] = email_data["to"]
    msg.set_content(email_data["text"])
    msg.add_alternative(email_data["html"], subtype="html")

    with smtplib.SMTP(settings["host"], settings["port"], timeout=SMTP_TIMEOUT_SECONDS) as server:
        if settings["use_tls"]:
            server.starttls()
        if settings["username"]:
            server.login(settings["username"], settings["password"])
        server.send_message(msg)


def _log_demo_email(store: KeyValueStore, email_data: Dict[str, str], kind: str, error: Optional[str] = None) -> None:
    entries = read_json(store, SENT_EMAILS_KEY, [])
    if not isinstance(entries, list):
        entries = []

    entry: Dict[str, Any] = {
        **email_data,
        "sentAt": datetime.now(timezone.utc).isoformat(),
        "type": kind,
    }
    if error:
        entry["error"] = error
    entries.append(entry)
    write_json(store, SENT_EMAILS_KEY, entries)


def _send(store: KeyValueStore, email_data: Dict[str, str], kind: str, link: str) -> bool:
    settings = _smtp_settings()
    if settings is None:
        _LOGGER.warning("SMTP not configured, storing %s email to %s in demo log", kind, email_data["to"])
        _log_demo_email(store, email_data, kind)
        _LOGGER.info("Demo %s link for %s: %s", kind, email_data["to"], link)
        return True

    try:
        _deliver_smtp(settings, email_data)
    except (smtplib.SMTPException, OSError) as exc:
        _LOGGER.exception("Failed to send %s email to %s", kind, email_data["to"])
        _log_demo_email(store, email_data, kind, error=str(exc))
        return True

    _LOGGER.info("Sent %s email to %s", kind, email_data["to"])
    return True


def send_confirmation_email(store: KeyValueStore, email: str, confirmation_link: str) -> bool:
    """Send the sign-up confirmation email; ``False`` only if it could not be prepared."""
    try:
        email_data = build_confirmation_email(email, confirmation_link)
        return _send(store, email_data, "confirmation", confirmation_link)
    except Exception:
        _LOGGER.exception("Failed to send confirmation email")
        return False


def send_password_reset_email(store: KeyValueStore, email: str, reset_link: str) -> bool:
    """Send the password-reset email; ``False`` only if it could not be prepared."""
    try:
        email_data = build_password_reset_email(email, reset_link)
        return _send(store, email_data, "password-reset", reset_link)
    except Exception:
        _LOGGER.exception("Failed to send password reset email")
        return False
