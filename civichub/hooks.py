"""Post-commit side effects.

Work queued here runs only after the primary state transition has been
written.  A failing hook is logged and skipped; it never propagates to the
caller and never stops the remaining hooks.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class PostCommitHooks:
    """Ordered queue of best-effort callables."""

    def __init__(self) -> None:
        self._pending: list[tuple[str, Callable[..., Any], tuple, dict]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def defer(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``fn(*args, **kwargs)`` under a descriptive *name*."""
        self._pending.append((name, fn, args, kwargs))

    def run(self) -> list[str]:
        """Run every queued hook once. Returns the names of failed hooks."""
        pending, self._pending = self._pending, []
        failed: list[str] = []
        for name, fn, args, kwargs in pending:
            try:
                fn(*args, **kwargs)
            except Exception:
                logger.warning("Post-commit hook '%s' failed", name, exc_info=True)
                failed.append(name)
        return failed
