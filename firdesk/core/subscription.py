from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from firdesk.core.issue_model import Issue
from firdesk.core.logs import get_logger

log = get_logger(__name__)


@dataclass
class WatchHandle:
    """What a backend `watch` returns: a way to stop it and a way to ask if it still runs."""

    unsubscribe: Callable[[], None]
    is_alive: Callable[[], bool] = lambda: True


class IssueSubscription:
    """
    Live view over a backend query.

    Holds the most recent full snapshot. Each push replaces the previous one
    (no diffing, no queue). After `cancel()` or a stream error nothing more
    is delivered. A stream the backend closed on its own (no callback error)
    is picked up by `check_alive()` and recorded as an error too.
    """

    def __init__(self, on_change: Optional[Callable[[List[Issue]], None]] = None, label: str = ""):
        self._on_change = on_change
        self._handle: Optional[WatchHandle] = None
        self.label = label
        self.latest: Optional[List[Issue]] = None
        self.version = 0
        self.error: Optional[BaseException] = None
        self.cancelled = False

    # Called by the store once the backend watch exists.
    def bind(self, handle: WatchHandle) -> None:
        self._handle = handle
        if self.cancelled:
            self._stop_backend()

    @property
    def active(self) -> bool:
        return not self.cancelled and self.error is None

    @property
    def ready(self) -> bool:
        return self.latest is not None

    def issues(self) -> List[Issue]:
        return list(self.latest or [])

    def publish(self, issues: List[Issue]) -> None:
        if not self.active:
            return
        self.latest = list(issues)
        self.version += 1
        if self._on_change is not None:
            self._on_change(self.issues())

    def fail(self, exc: BaseException) -> None:
        if self.error is not None:
            return
        self.error = exc
        log.error("Issue subscription %s stopped: %s", self.label or "", exc)

    def check_alive(self) -> bool:
        """False (and `error` set) once the backend stream has closed under us."""
        if not self.active:
            return False
        if self._handle is None:
            return True
        try:
            alive = bool(self._handle.is_alive())
        except Exception as e:
            self.fail(e)
            return False
        if not alive:
            self.fail(RuntimeError("live query closed by the backend"))
        return alive

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._stop_backend()

    def _stop_backend(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.unsubscribe()
        except Exception as e:
            log.warning("Unsubscribe failed for %s: %s", self.label or "subscription", e)
