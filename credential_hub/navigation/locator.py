"""Locator hosts: the native history facility the controller synchronizes with."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

_LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]


class LocatorHost(Protocol):
    """The subset of a browser's history API the controller relies on."""

    def read(self) -> str:
        """Return the current fragment locator, e.g. ``#dashboard``."""

    def push(self, locator: str, state: Optional[Dict[str, Any]] = None) -> None:
        """Record a new entry without notifying subscribers."""

    def back(self) -> None:
        ...

    def forward(self) -> None:
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register ``listener`` for out-of-band locator changes."""


class MemoryLocator:
    """In-memory stand-in for ``window.history`` plus ``location.hash``.

    ``push`` behaves like ``history.pushState`` (silent). ``back``,
    ``forward``, ``visit`` and ``go_to`` behave like the browser's own
    controls and notify subscribers synchronously.
    """

    def __init__(self, initial: str = "") -> None:
        self._entries: List[str] = [initial]
        self._states: List[Optional[Dict[str, Any]]] = [None]
        self._index = 0
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # LocatorHost
    def read(self) -> str:
        return self._entries[self._index]

    def push(self, locator: str, state: Optional[Dict[str, Any]] = None) -> None:
        self._truncate_forward()
        self._entries.append(locator)
        self._states.append(state)
        self._index = len(self._entries) - 1

    def back(self) -> None:
        if self._index > 0:
            self._index -= 1
            self._notify()

    def forward(self) -> None:
        if self._index < len(self._entries) - 1:
            self._index += 1
            self._notify()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Out-of-band changes made by the user
    def visit(self, locator: str) -> None:
        """Simulate typing a new fragment into the address bar."""
        if locator == self.read():
            return
        self._truncate_forward()
        self._entries.append(locator)
        self._states.append(None)
        self._index = len(self._entries) - 1
        self._notify()

    def go_to(self, locator: str) -> bool:
        """Jump to the nearest entry holding ``locator``, like picking it from the history menu."""
        candidates = [i for i, entry in enumerate(self._entries) if entry == locator]
        if not candidates:
            return False
        self._index = min(candidates, key=lambda i: abs(i - self._index))
        self._notify()
        return True

    # ------------------------------------------------------------------
    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def state(self) -> Optional[Dict[str, Any]]:
        return self._states[self._index]

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _truncate_forward(self) -> None:
        del self._entries[self._index + 1 :]
        del self._states[self._index + 1 :]

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _LOGGER.exception("Locator listener failed for %s", self.read())
