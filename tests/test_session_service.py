"""Tests for the per-tab user session, demo login and password reset flow."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from credential_hub.navigation import MemoryLocator, NavigationController, Page, immediate_scheduler  # noqa: E402
from credential_hub.services.kv_store import (  # noqa: E402
    IS_LOGIN_FLAG,
    REGISTERED_USERS_KEY,
    RESET_TOKENS_KEY,
    SENT_EMAILS_KEY,
    USER_DATA_KEY,
    MemoryStore,
)
from credential_hub.services.session_service import (  # noqa: E402
    RESET_TOKEN_TTL_MS,
    SessionManager,
    UserSession,
)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, millis: int) -> None:
        self.now += millis / 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def navigator():
    controller = NavigationController(MemoryLocator(""), scheduler=immediate_scheduler)
    controller.initialize()
    return controller


@pytest.fixture
def manager(store, navigator, clock):
    return SessionManager(
        store,
        navigator,
        clock=clock,
        dispatch=lambda task: task(),
        app_base_url="http://localhost:5173/",
        display_name="Demo User",
    )


def persist_user(manager, **fields):
    data = {"walletAddress": "wallet-1", "email": "Alice@Example.com", "firstName": "Alice"}
    data.update(fields)
    manager.set_user_data(data)


def test_user_session_round_trips_camel_case_fields():
    session = UserSession.from_dict({"firstName": "Ada", "lastFourSSN": "1234", "unknown": "x"})
    assert session.first_name == "Ada"
    assert session.to_dict() == {"firstName": "Ada", "lastFourSSN": "1234"}

    session.password = "Secret!1"
    session.documents = ["resume.pdf"]
    public = session.to_public_dict()
    assert "password" not in public
    assert public["documents"] == ["resume.pdf"]


def test_set_user_data_mirrors_only_with_wallet(manager, store):
    manager.set_user_data({"firstName": "Alice"})
    assert store.get(USER_DATA_KEY) is None

    manager.set_user_data({"walletAddress": "wallet-1"})
    assert json.loads(store.get(USER_DATA_KEY)) == {"walletAddress": "wallet-1", "firstName": "Alice"}


def test_documents_are_never_persisted(manager, store):
    manager.user.documents = ["cv.pdf"]
    persist_user(manager)
    assert "documents" not in json.loads(store.get(USER_DATA_KEY))


def test_new_manager_rehydrates_persisted_user(manager, store, navigator):
    persist_user(manager)
    restored = SessionManager(store, navigator)
    assert restored.user.wallet_address == "wallet-1"
    assert restored.user.email == "Alice@Example.com"


def test_malformed_persisted_blob_is_treated_as_absent(store, navigator):
    store.set(USER_DATA_KEY, "{not json")
    restored = SessionManager(store, navigator)
    assert restored.user == UserSession()


def test_login_sets_display_name_and_navigates_to_dashboard(manager, navigator):
    persist_user(manager)
    assert manager.login("ALICE@example.com", "anything") is True

    assert manager.tab_flags[IS_LOGIN_FLAG] == "true"
    assert manager.user.first_name == "Demo"
    assert manager.user.last_name == "User"
    assert manager.user.email == "alice@example.com"
    assert manager.user.wallet_address == "wallet-1"
    assert navigator.current_page is Page.DASHBOARD


def test_logout_clears_session_and_returns_to_landing(manager, store, navigator):
    persist_user(manager)
    navigator.navigate_to(Page.DASHBOARD)
    manager.set_employer_data({"companyName": "Acme"})

    manager.logout()

    assert manager.user == UserSession()
    assert manager.employer.to_dict() == {}
    assert store.get(USER_DATA_KEY) is None
    assert navigator.current_page is Page.LANDING


def test_reset_email_requires_matching_persisted_email(manager, store):
    assert manager.send_password_reset_email("alice@example.com") is False

    persist_user(manager)
    assert manager.send_password_reset_email("bob@example.com") is False
    assert store.get(RESET_TOKENS_KEY) is None


def test_reset_email_issues_token_and_logs_demo_email(manager, store, clock):
    persist_user(manager)
    assert manager.send_password_reset_email("  alice@EXAMPLE.com ") is True

    tokens = json.loads(store.get(RESET_TOKENS_KEY))
    entry = tokens["alice@example.com"]
    assert entry["token"].startswith("reset_")
    assert entry["expiresAt"] == int(clock.now * 1000) + RESET_TOKEN_TTL_MS

    sent = json.loads(store.get(SENT_EMAILS_KEY))
    assert sent[-1]["to"] == "alice@example.com"
    assert sent[-1]["type"] == "password-reset"
    assert f"#reset-password?token={entry['token']}" in sent[-1]["text"]


def test_reset_password_consumes_token(manager, store):
    persist_user(manager)
    manager.send_password_reset_email("alice@example.com")
    token = json.loads(store.get(RESET_TOKENS_KEY))["alice@example.com"]["token"]

    assert manager.reset_password(token, "NewPass!") is True
    assert json.loads(store.get(USER_DATA_KEY))["password"] == "NewPass!"
    assert manager.user.password == "NewPass!"
    assert json.loads(store.get(RESET_TOKENS_KEY)) == {}

    assert manager.reset_password(token, "Another!1") is False


def test_reset_password_rejects_expired_token(manager, store, clock):
    persist_user(manager)
    manager.send_password_reset_email("alice@example.com")
    token = json.loads(store.get(RESET_TOKENS_KEY))["alice@example.com"]["token"]

    clock.advance_ms(RESET_TOKEN_TTL_MS + 1)
    assert manager.reset_password(token, "NewPass!") is False
    assert "password" not in json.loads(store.get(USER_DATA_KEY))


def test_reset_password_rejects_unknown_token(manager):
    persist_user(manager)
    assert manager.reset_password("reset_unknown", "NewPass!") is False
    assert manager.reset_password("", "NewPass!") is False


def test_reset_password_fails_when_persisted_email_changed(manager, store):
    persist_user(manager)
    manager.send_password_reset_email("alice@example.com")
    token = json.loads(store.get(RESET_TOKENS_KEY))["alice@example.com"]["token"]

    manager.set_user_data({"email": "carol@example.com"})
    assert manager.reset_password(token, "NewPass!") is False


def test_purge_expired_reset_tokens(manager, store, clock):
    now_ms = int(clock.now * 1000)
    store.set(
        RESET_TOKENS_KEY,
        json.dumps(
            {
                "old@example.com": {"token": "reset_old", "expiresAt": now_ms - 1},
                "new@example.com": {"token": "reset_new", "expiresAt": now_ms + 1000},
            }
        ),
    )
    assert manager.purge_expired_reset_tokens() == 1
    assert list(json.loads(store.get(RESET_TOKENS_KEY))) == ["new@example.com"]


def test_issuing_a_reset_token_drops_expired_ones(manager, store, clock):
    persist_user(manager)
    now_ms = int(clock.now * 1000)
    store.set(RESET_TOKENS_KEY, json.dumps({"old@example.com": {"token": "reset_old", "expiresAt": now_ms - 1}}))

    assert manager.send_password_reset_email("alice@example.com") is True
    assert list(json.loads(store.get(RESET_TOKENS_KEY))) == ["alice@example.com"]


def test_register_and_check_email(manager, store):
    assert manager.check_email_exists("new@example.com") is False

    manager.register_user("New@Example.com")
    manager.register_user("new@example.com")

    assert json.loads(store.get(REGISTERED_USERS_KEY)) == ["new@example.com"]
    assert manager.check_email_exists("NEW@example.com") is True


def test_check_email_matches_current_session(manager):
    manager.set_user_data({"email": "Alice@Example.com"})
    assert manager.check_email_exists("alice@example.com") is True


def test_confirmation_email_links_to_login_page(manager, store):
    manager.send_confirmation_email("New@Example.com")
    sent = json.loads(store.get(SENT_EMAILS_KEY))
    assert sent[-1]["type"] == "confirmation"
    assert "http://localhost:5173/#user-login?email=new%40example.com" in sent[-1]["text"]
