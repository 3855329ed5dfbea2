"""Single source of truth for the current page, kept in step with a locator host."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional

from .history import NavigationHistory
from .locator import LocatorHost, Unsubscribe
from .pages import DEFAULT_PAGE, Page, locator_for, page_from_name, split_locator

_LOGGER = logging.getLogger(__name__)

# Time allowed for the host to deliver notifications caused by our own push/back/forward.
SETTLE_DELAY_SECONDS = int(os.getenv("NAVIGATION_SETTLE_MS", "50")) / 1000

Scheduler = Callable[[float, Callable[[], None]], Any]
PageListener = Callable[[Page], None]


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run ``callback`` once after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def immediate_scheduler(delay: float, callback: Callable[[], None]) -> None:
    """Run ``callback`` at once; for hosts that deliver notifications synchronously."""
    callback()


class NavigationController:
    """Branchable page history synchronized with the host's back/forward stack.

    Self-initiated transitions raise a guard so that notifications the host
    emits for them are not mistaken for user navigation. The guard is lowered
    by ``scheduler`` after ``settle_delay`` seconds whether or not the host
    ever notifies. Each transition gets an increasing id and only the timer
    of the most recent transition may lower the guard.
    """

    def __init__(
        self,
        host: LocatorHost,
        *,
        scheduler: Optional[Scheduler] = None,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self._host = host
        self._schedule = scheduler or timer_scheduler
        self._settle_delay = settle_delay
        self._history: Optional[NavigationHistory] = None
        self._transitioning = False
        self._transition_id = 0
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[PageListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    def initialize(self) -> Page:
        """Resolve the starting page from the host locator and start listening."""
        page, _ = split_locator(self._host.read())
        start = page or DEFAULT_PAGE
        self._history = NavigationHistory.starting_at(start)
        if self._unsubscribe is None:
            self._unsubscribe = self._host.subscribe(self.handle_external_change)
        _LOGGER.debug("Navigation initialized at %s", start.value)
        return start

    def close(self) -> None:
        """Stop listening to the host."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Observable state
    @property
    def history(self) -> NavigationHistory:
        if self._history is None:
            raise RuntimeError("NavigationController.initialize() has not been called")
        return self._history

    @property
    def current_page(self) -> Page:
        return self.history.current

    @property
    def cursor(self) -> int:
        return self.history.cursor

    @property
    def pages(self) -> List[Page]:
        return list(self.history.entries)

    @property
    def can_go_back(self) -> bool:
        return self.history.can_go_back

    @property
    def can_go_forward(self) -> bool:
        return self.history.can_go_forward

    @property
    def is_transitioning(self) -> bool:
        return self._transitioning

    def current_params(self) -> Dict[str, str]:
        """Query parameters carried by the host locator, when it names the current page."""
        page, params = split_locator(self._host.read())
        return params if page == self.current_page else {}

    def snapshot(self) -> Dict[str, Any]:
        state = self.history.snapshot()
        state["params"] = self.current_params()
        return state

    def on_change(self, listener: PageListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Programmatic navigation
    def navigate_to(self, target: Page) -> None:
        target = self._coerce(target)
        if target == self.current_page:
            return

        transition = self._begin_transition()
        try:
            self.history.branch(target)
            self._host.push(locator_for(target), {"page": target.value, "transition": transition})
        finally:
            self._end_transition_later(transition)
        self._emit(target)

    def go_back(self) -> None:
        if not self.history.can_go_back:
            return
        self._traverse(-1, self._host.back)

    def go_forward(self) -> None:
        if not self.history.can_go_forward:
            return
        self._traverse(1, self._host.forward)

    # ------------------------------------------------------------------
    # Host notifications
    def handle_external_change(self) -> None:
        """React to a locator change the controller did not initiate."""
        if self._transitioning or self._history is None:
            return

        page, _ = split_locator(self._host.read())
        if page is None or page == self.current_page:
            return

        self.history.seek(page)
        _LOGGER.debug("External navigation to %s (cursor %d)", page.value, self.history.cursor)
        self._emit(page)

    # ------------------------------------------------------------------
    def _traverse(self, delta: int, primitive: Callable[[], None]) -> None:
        transition = self._begin_transition()
        try:
            self.history.step(delta)
            primitive()
        finally:
            self._end_transition_later(transition)
        self._emit(self.current_page)

    def _begin_transition(self) -> int:
        self._transition_id += 1
        self._transitioning = True
        return self._transition_id

    def _end_transition_later(self, transition: int) -> None:
        def settle() -> None:
            if transition == self._transition_id:
                self._transitioning = False

        self._schedule(self._settle_delay, settle)

    def _emit(self, page: Page) -> None:
        for listener in list(self._listeners):
            listener(page)

    @staticmethod
    def _coerce(target: Any) -> Page:
        page = page_from_name(target)
        if page is None:
            raise ValueError(f"Unknown page: {target!r}")
        return page
