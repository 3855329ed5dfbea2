"""Server-held browser tabs: a locator, its navigation controller and session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from credential_hub.navigation import MemoryLocator, NavigationController, immediate_scheduler
from credential_hub.services.kv_store import store_for_client
from credential_hub.services.session_service import SessionManager
from credential_hub.storage import tabs
from credential_hub.utils.auth import TAB_TTL_SECONDS, generate_token, now_seconds

_LOGGER = logging.getLogger(__name__)


@dataclass
class ClientTab:
    token: str
    client_id: str
    locator: MemoryLocator
    navigator: NavigationController
    session: SessionManager
    flags: Dict[str, str] = field(default_factory=dict)
    expires_at: int = 0

    def close(self) -> None:
        self.navigator.close()

    def to_dict(self) -> Dict[str, object]:
        return {
            "token": self.token,
            "clientId": self.client_id,
            "expiresAt": self.expires_at * 1000,
            "navigation": self.navigator.snapshot(),
        }


def open_tab(client_id: Optional[str] = None, locator: str = "", **session_options) -> ClientTab:
    """Create and register a tab for ``client_id``; a new client id is minted when absent."""
    client_id = client_id or generate_token("client")
    host = MemoryLocator(locator or "")
    # MemoryLocator notifies synchronously, so the guard can drop as soon as the call returns.
    navigator = NavigationController(host, scheduler=immediate_scheduler)
    navigator.initialize()

    flags: Dict[str, str] = {}
    session = SessionManager(store_for_client(client_id), navigator, tab_flags=flags, **session_options)

    tab = ClientTab(
        token=generate_token("tab"),
        client_id=client_id,
        locator=host,
        navigator=navigator,
        session=session,
        flags=flags,
        expires_at=now_seconds() + TAB_TTL_SECONDS,
    )
    tabs[tab.token] = tab
    _LOGGER.debug("Opened tab %s for client %s at %s", tab.token, client_id, navigator.current_page.value)
    return tab


def close_tab(tab: ClientTab) -> None:
    tabs.pop(tab.token, None)
    tab.close()
