"""Per-tab user session plus the demo login and password-reset flow.

The session record lives in memory for the lifetime of a tab and is
mirrored into the client's key/value store whenever it carries a wallet
address. Every lookup reports failure through its return value; corrupt
stored blobs are logged and treated as absent.
"""

from __future__ import annotations

import logging
import os
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from pymongo.errors import PyMongoError

from credential_hub.navigation import NavigationController, Page
from credential_hub.services import email_service
from credential_hub.services.kv_store import (
    IS_LOGIN_FLAG,
    REGISTERED_USERS_KEY,
    RESET_TOKENS_KEY,
    USER_DATA_KEY,
    KeyValueStore,
    read_json,
    write_json,
)
from credential_hub.utils.validation import normalize_email

_LOGGER = logging.getLogger(__name__)

RESET_TOKEN_TTL_MS = 60 * 60 * 1000
DEFAULT_DISPLAY_NAME = os.getenv("LOGIN_DISPLAY_NAME", "Demo User")
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5173/")

Dispatch = Callable[[Callable[[], Any]], None]


def dispatch_in_background(task: Callable[[], Any]) -> None:
    """Run ``task`` on a daemon thread without waiting for it."""
    threading.Thread(target=task, daemon=True).start()


def generate_reset_token() -> str:
    return f"reset_{secrets.token_urlsafe(32)}"


@dataclass
class UserSession:
    """Profile fields entered by the user in the current tab."""

    wallet_address: Optional[str] = None
    wallet_type: Optional[str] = None
    network: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[str] = None
    last_four_ssn: Optional[str] = None
    profile_image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    education: Optional[List[Dict[str, Any]]] = None
    work_experience: Optional[List[Dict[str, Any]]] = None
    # Uploaded attachments; never persisted.
    documents: List[Any] = field(default_factory=list)

    ALIASES = {
        "walletAddress": "wallet_address",
        "walletType": "wallet_type",
        "network": "network",
        "firstName": "first_name",
        "lastName": "last_name",
        "gender": "gender",
        "age": "age",
        "lastFourSSN": "last_four_ssn",
        "profileImage": "profile_image",
        "email": "email",
        "phone": "phone",
        "password": "password",
        "education": "education",
        "workExperience": "work_experience",
    }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "UserSession":
        session = cls()
        session.update(data or {})
        return session

    def update(self, data: Mapping[str, Any]) -> None:
        """Overlay camelCase ``data`` onto this session, ignoring unknown keys."""
        for key, value in data.items():
            attr = self.ALIASES.get(key)
            if attr is not None:
                setattr(self, attr, value)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form, without attachments and unset fields."""
        return {
            alias: getattr(self, attr)
            for alias, attr in self.ALIASES.items()
            if getattr(self, attr) is not None
        }

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.to_dict()
        data.pop("password", None)
        data["documents"] = [getattr(doc, "filename", str(doc)) for doc in self.documents]
        return data


@dataclass
class EmployerSession:
    """Organization details entered on the employer/institution login page."""

    company_name: Optional[str] = None
    username: Optional[str] = None
    company_logo: Optional[str] = None
    company_about: Optional[str] = None
    account_type: Optional[str] = None

    ALIASES = {
        "companyName": "company_name",
        "username": "username",
        "companyLogo": "company_logo",
        "companyAbout": "company_about",
        "accountType": "account_type",
    }

    def update(self, data: Mapping[str, Any]) -> None:
        for key, value in data.items():
            attr = self.ALIASES.get(key)
            if attr is not None:
                setattr(self, attr, value)

    def to_dict(self) -> Dict[str, Any]:
        return {alias: getattr(self, attr) for alias, attr in self.ALIASES.items() if getattr(self, attr) is not None}


class SessionManager:
    """Owns a tab's :class:`UserSession` and the credential-reset helpers."""

    def __init__(
        self,
        store: KeyValueStore,
        navigator: NavigationController,
        *,
        tab_flags: Optional[Dict[str, str]] = None,
        clock: Callable[[], float] = time.time,
        dispatch: Dispatch = dispatch_in_background,
        app_base_url: str = APP_BASE_URL,
        display_name: str = DEFAULT_DISPLAY_NAME,
    ) -> None:
        self.store = store
        self.navigator = navigator
        self.tab_flags = tab_flags if tab_flags is not None else {}
        self._clock = clock
        self._dispatch = dispatch
        self._app_base_url = app_base_url
        self._display_name = display_name
        self.user = UserSession.from_dict(self._load_persisted())
        self.employer = EmployerSession()

    # ------------------------------------------------------------------
    # Session record
    def set_user_data(self, data: Mapping[str, Any]) -> UserSession:
        """Merge ``data`` into the session and mirror the result to storage."""
        self.user.update(data)
        self._mirror()
        return self.user

    def set_employer_data(self, data: Mapping[str, Any]) -> EmployerSession:
        self.employer.update(data)
        return self.employer

    def logout(self) -> None:
        self.user = UserSession()
        self.employer = EmployerSession()
        self._remove(USER_DATA_KEY)
        self.navigator.navigate_to(Page.LANDING)
        _LOGGER.info("User logged out")

    def login(self, email: str, password: str) -> bool:
        """Start a session for ``email``; the password is not checked."""
        self.tab_flags[IS_LOGIN_FLAG] = "true"

        session = UserSession.from_dict(self._load_persisted())
        first_name, _, last_name = self._display_name.partition(" ")
        session.first_name = first_name
        session.last_name = last_name
        session.email = normalize_email(email)
        self.user = session
        self._mirror()

        _LOGGER.info("User logged in with email %s", session.email)
        self.navigator.navigate_to(Page.DASHBOARD)
        return True

    # ------------------------------------------------------------------
    # Password reset
    def send_password_reset_email(self, email: str) -> bool:
        """Issue a reset token when ``email`` owns the stored session."""
        email_key = normalize_email(email)
        persisted = self._load_persisted()
        if not persisted or normalize_email(persisted.get("email")) != email_key or not email_key:
            return False

        self.purge_expired_reset_tokens()
        token = generate_reset_token()
        tokens = self._load_reset_tokens()
        tokens[email_key] = {"token": token, "expiresAt": self._now_ms() + RESET_TOKEN_TTL_MS}
        write_json(self.store, RESET_TOKENS_KEY, tokens)

        link = self.build_link(Page.RESET_PASSWORD, token=token)
        self._dispatch(lambda: self._deliver_reset_email(email_key, link))
        return True

    def reset_password(self, token: str, new_password: str) -> bool:
        """Apply ``new_password`` for the owner of a live ``token`` and consume it."""
        if not token:
            return False

        tokens = self._load_reset_tokens()
        now = self._now_ms()
        owner = None
        for email, data in tokens.items():
            if not isinstance(data, dict):
                continue
            if data.get("token") == token and data.get("expiresAt", 0) > now:
                owner = email
                break
        if owner is None:
            return False

        persisted = self._load_persisted()
        if not persisted or normalize_email(persisted.get("email")) != owner:
            return False

        persisted.pop("documents", None)
        persisted["password"] = new_password
        write_json(self.store, USER_DATA_KEY, persisted)
        self.user = UserSession.from_dict(persisted)

        del tokens[owner]
        write_json(self.store, RESET_TOKENS_KEY, tokens)
        _LOGGER.info("Password reset successful for %s", owner)
        return True

    def purge_expired_reset_tokens(self) -> int:
        """Drop expired reset tokens; runs whenever a new one is issued."""
        tokens = self._load_reset_tokens()
        now = self._now_ms()
        live = {
            email: data
            for email, data in tokens.items()
            if isinstance(data, dict) and data.get("expiresAt", 0) > now
        }
        removed = len(tokens) - len(live)
        if removed:
            write_json(self.store, RESET_TOKENS_KEY, live)
        return removed

    # ------------------------------------------------------------------
    # Registered emails
    def check_email_exists(self, email: str) -> bool:
        """Advisory duplicate-signup check; not an access control."""
        email_key = normalize_email(email)
        if not email_key:
            return False

        registered = read_json(self.store, REGISTERED_USERS_KEY, [])
        if isinstance(registered, list) and email_key in registered:
            return True

        if normalize_email(self.user.email) == email_key:
            return True

        persisted = self._load_persisted()
        return bool(persisted) and normalize_email(persisted.get("email")) == email_key

    def register_user(self, email: str) -> None:
        email_key = normalize_email(email)
        if not email_key:
            return

        registered = read_json(self.store, REGISTERED_USERS_KEY, [])
        if not isinstance(registered, list):
            registered = []
        if email_key not in registered:
            registered.append(email_key)
            write_json(self.store, REGISTERED_USERS_KEY, registered)
            _LOGGER.info("Registered user email %s", email_key)

    def send_confirmation_email(self, email: str) -> None:
        email_key = normalize_email(email)
        link = self.build_link(Page.USER_LOGIN, email=email_key)
        self._dispatch(lambda: email_service.send_confirmation_email(self.store, email_key, link))

    # ------------------------------------------------------------------
    def build_link(self, page: Page, **params: str) -> str:
        query = f"?{urlencode(params)}" if params else ""
        return f"{self._app_base_url}#{page.value}{query}"

    def _deliver_reset_email(self, email: str, link: str) -> None:
        if email_service.send_password_reset_email(self.store, email, link):
            _LOGGER.info("Password reset email sent to %s", email)
        else:
            _LOGGER.error("Failed to send password reset email to %s", email)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _load_persisted(self) -> Optional[Dict[str, Any]]:
        data = read_json(self.store, USER_DATA_KEY, None)
        if not isinstance(data, dict):
            return None
        data.pop("documents", None)
        return data

    def _load_reset_tokens(self) -> Dict[str, Any]:
        tokens = read_json(self.store, RESET_TOKENS_KEY, {})
        return tokens if isinstance(tokens, dict) else {}

    def _mirror(self) -> None:
        try:
            if self.user.wallet_address:
                write_json(self.store, USER_DATA_KEY, self.user.to_dict())
            else:
                self.store.remove(USER_DATA_KEY)
        except PyMongoError:
            _LOGGER.exception("Failed to save user data")

    def _remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except PyMongoError:
            _LOGGER.exception("Failed to remove %s", key)
