from .controller import NavigationController, immediate_scheduler, timer_scheduler
from .history import NavigationHistory
from .locator import LocatorHost, MemoryLocator
from .pages import DEFAULT_PAGE, Page, locator_for, page_from_locator, page_from_name, split_locator

__all__ = [
    "DEFAULT_PAGE",
    "LocatorHost",
    "MemoryLocator",
    "NavigationController",
    "NavigationHistory",
    "Page",
    "locator_for",
    "page_from_locator",
    "page_from_name",
    "split_locator",
    "immediate_scheduler",
    "timer_scheduler",
]
