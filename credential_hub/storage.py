"""In-memory state held by the running process."""

from typing import Any, Dict

# Open browser tabs keyed by tab token. Each value is a ``ClientTab``.
tabs: Dict[str, Any] = {}
