"""The closed set of pages the front-end can show and locator parsing."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qsl


class Page(str, Enum):
    LANDING = "landing"
    WALLET_CONNECT = "wallet-connect"
    PROFILE_SETUP = "profile-setup"
    DASHBOARD = "dashboard"
    EMPLOYER_LOGIN = "employer-login"
    EMPLOYER_DASHBOARD = "employer-dashboard"
    INSTITUTION_DASHBOARD = "institution-dashboard"
    ID_VERIFICATION = "id-verification"
    USER_LOGIN = "user-login"
    FORGOT_PASSWORD = "forgot-password"
    RESET_PASSWORD = "reset-password"


DEFAULT_PAGE = Page.LANDING

_PAGES_BY_NAME: Dict[str, Page] = {page.value: page for page in Page}


def page_from_name(name: Optional[str]) -> Optional[Page]:
    """Return the page called ``name`` or ``None`` when it is not a known page."""
    if isinstance(name, Page):
        return name
    if not isinstance(name, str) or not name:
        return None
    return _PAGES_BY_NAME.get(name)


def split_locator(locator: Optional[str]) -> Tuple[Optional[Page], Dict[str, str]]:
    """Split a fragment locator such as ``#reset-password?token=abc``.

    Returns the named page (``None`` if the fragment does not name one) and
    the query parameters that follow it.
    """
    fragment = (locator or "").strip()
    if fragment.startswith("#"):
        fragment = fragment[1:]

    name, _, query = fragment.partition("?")
    params = dict(parse_qsl(query, keep_blank_values=True)) if query else {}
    return page_from_name(name), params


def page_from_locator(locator: Optional[str]) -> Optional[Page]:
    page, _ = split_locator(locator)
    return page


def locator_for(page: Page) -> str:
    """Encode ``page`` as the fragment written on programmatic navigation."""
    return f"#{page.value}"
