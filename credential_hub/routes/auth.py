"""/api/session routes: demo login, profile session data and password reset."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from credential_hub.navigation import Page
from credential_hub.utils.auth import require_tab
from credential_hub.utils.request_body import json_object
from credential_hub.utils.validation import (
    is_valid_email,
    is_valid_phone,
    is_valid_ssn_last_four,
    parse_age,
    password_problems,
)

bp = Blueprint("session", __name__, url_prefix="/api/session")

EMPLOYER_ACCOUNT_TYPES = ("employer", "institution")


def _user_payload(tab) -> Dict[str, Any]:
    return {
        "user": tab.session.user.to_public_dict(),
        "employer": tab.session.employer.to_dict(),
        "navigation": tab.navigator.snapshot(),
    }


@bp.post("/login")
def login():
    """Log in with any well-formed email and non-empty password."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    email = str(payload.get("email") or "").strip()
    password = str(payload.get("password") or "")

    if not email or not password:
        return jsonify(error="Please fill in all fields."), 400
    if not is_valid_email(email):
        return jsonify(error="Please enter a valid email address."), 400

    success = tab.session.login(email, password)
    return jsonify(success=success, **_user_payload(tab)), 200


@bp.post("/logout")
def logout():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    tab.session.logout()
    return jsonify(success=True, **_user_payload(tab)), 200


@bp.get("/user")
def get_user():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response
    return jsonify(_user_payload(tab)), 200


@bp.patch("/user")
def update_user():
    """Merge profile fields into the tab's session."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response

    if "email" in payload and payload["email"] and not is_valid_email(payload["email"]):
        return jsonify(error="Please enter a valid email address."), 400
    if "age" in payload and payload["age"] not in (None, ""):
        age = parse_age(payload["age"])
        if age is None:
            return jsonify(error="Please enter a valid age (1-150)."), 400
        payload["age"] = str(age)
    if "lastFourSSN" in payload and payload["lastFourSSN"] and not is_valid_ssn_last_four(payload["lastFourSSN"]):
        return jsonify(error="Last 4 SSN must be exactly 4 digits."), 400
    if "phone" in payload and payload["phone"] and not is_valid_phone(payload["phone"]):
        return jsonify(error="Please enter a valid phone number."), 400
    if "password" in payload and payload["password"]:
        problems = password_problems(payload["password"])
        if problems:
            return jsonify(error=f"Password must have: {', '.join(problems)}.", problems=problems), 400

    tab.session.set_user_data(payload)
    return jsonify(_user_payload(tab)), 200


@bp.patch("/employer")
def update_employer():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    account_type = payload.get("accountType")
    if account_type is not None and account_type not in EMPLOYER_ACCOUNT_TYPES:
        return jsonify(error="accountType must be 'employer' or 'institution'."), 400

    tab.session.set_employer_data(payload)
    return jsonify(_user_payload(tab)), 200


@bp.post("/forgot-password")
def forgot_password():
    """Send a reset link when the email owns the stored session."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    email = str(payload.get("email") or "").strip()
    if not email:
        return jsonify(error="Please enter your email address."), 400
    if not is_valid_email(email):
        return jsonify(error="Please enter a valid email address."), 400

    if not tab.session.send_password_reset_email(email):
        return jsonify(sent=False, error="Email not found. Please check your email address."), 404

    current_app.logger.info("Password reset requested for %s", email.lower())
    return jsonify(sent=True, message="Password reset email sent! Please check your inbox."), 200


@bp.post("/reset-password")
def reset_password():
    """Set a new password using a reset token from the body or the current locator."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    token = payload.get("token") or tab.navigator.current_params().get("token")
    password = str(payload.get("password") or "")
    confirm = str(payload.get("confirmPassword") or "")

    if not password or not confirm:
        return jsonify(error="Please fill in all fields."), 400
    problems = password_problems(password)
    if problems:
        return jsonify(error=f"Password must have: {', '.join(problems)}.", problems=problems), 400
    if password != confirm:
        return jsonify(error="Passwords do not match."), 400
    if not token:
        return jsonify(error="Invalid reset token."), 400

    if not tab.session.reset_password(token, password):
        tab.navigator.navigate_to(Page.FORGOT_PASSWORD)
        return (
            jsonify(
                success=False,
                error="Invalid or expired reset token. Please request a new reset link.",
                navigation=tab.navigator.snapshot(),
            ),
            400,
        )

    tab.navigator.navigate_to(Page.USER_LOGIN)
    return jsonify(success=True, navigation=tab.navigator.snapshot()), 200


@bp.get("/check-email")
def check_email():
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    email = request.args.get("email", "")
    if not is_valid_email(email):
        return jsonify(error="Please enter a valid email address."), 400
    return jsonify(exists=tab.session.check_email_exists(email)), 200


@bp.post("/register")
def register():
    """Record a sign-up email and send the confirmation link."""
    tab, error_response = require_tab()
    if error_response is not None:
        return error_response

    payload, error_response = json_object()
    if error_response is not None:
        return error_response
    email = str(payload.get("email") or "").strip()
    if not is_valid_email(email):
        return jsonify(error="Please enter a valid email address."), 400

    already_registered = tab.session.check_email_exists(email)
    tab.session.register_user(email)
    if not already_registered:
        tab.session.send_confirmation_email(email)
    return jsonify(registered=True, alreadyRegistered=already_registered), 200
