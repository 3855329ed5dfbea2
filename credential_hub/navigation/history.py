"""Branchable visit history with a cursor, mirroring browser semantics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .pages import Page


@dataclass
class NavigationHistory:
    """Visited pages in visitation order plus the index of the current one.

    The sequence is never empty and ``cursor`` always points inside it.
    """

    entries: List[Page] = field(default_factory=list)
    cursor: int = 0

    def __post_init__(self) -> None:
        if not self.entries:
            raise ValueError("NavigationHistory requires at least one page")
        if not 0 <= self.cursor < len(self.entries):
            raise ValueError(f"cursor {self.cursor} outside history of length {len(self.entries)}")

    @classmethod
    def starting_at(cls, page: Page) -> "NavigationHistory":
        return cls(entries=[page], cursor=0)

    # ------------------------------------------------------------------
    # Derived state
    @property
    def current(self) -> Page:
        return self.entries[self.cursor]

    @property
    def can_go_back(self) -> bool:
        return self.cursor > 0

    @property
    def can_go_forward(self) -> bool:
        return self.cursor < len(self.entries) - 1

    def __len__(self) -> int:
        return len(self.entries)

    def index_of(self, page: Page) -> int:
        """Return the first position of ``page`` or -1."""
        try:
            return self.entries.index(page)
        except ValueError:
            return -1

    # ------------------------------------------------------------------
    # Mutations
    def branch(self, page: Page) -> None:
        """Drop forward entries, append ``page`` and move the cursor onto it."""
        del self.entries[self.cursor + 1 :]
        self.entries.append(page)
        self.cursor = len(self.entries) - 1

    def step(self, delta: int) -> bool:
        """Move the cursor by ``delta``; returns ``False`` if that would leave the history."""
        target = self.cursor + delta
        if not 0 <= target < len(self.entries):
            return False
        self.cursor = target
        return True

    def seek(self, page: Page) -> None:
        """Move to an existing slot for ``page``, appending it when it was never visited."""
        existing = self.index_of(page)
        if existing != -1:
            self.cursor = existing
            return
        self.entries.append(page)
        self.cursor = len(self.entries) - 1

    def snapshot(self) -> Dict[str, Any]:
        return {
            "history": [page.value for page in self.entries],
            "cursor": self.cursor,
            "currentPage": self.current.value,
            "canGoBack": self.can_go_back,
            "canGoForward": self.can_go_forward,
        }
