"""Shared load / submit / navigate behaviour for every portal view.

A view is mounted once per visit. ``mount`` bumps a generation counter and
runs the initial load; ``unmount`` bumps it again. Results that come back for
an older generation belong to a view the user has already left, so they are
dropped instead of applied.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from portal.api import PortalClient
from portal.auth import LOGIN_ROUTE
from portal.errors import PortalError, ValidationError
from portal.log import get_logger
from portal.models import Session
from portal.session import SessionStore

log = get_logger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass
class Notice:
    """A message the user must acknowledge before continuing."""

    kind: str
    message: str


def run_parallel(*calls: Callable[[], Any], max_workers: int = 4) -> list[Any]:
    """Run independent calls concurrently and wait for all of them to settle.

    Results come back in call order. If any call failed, the first failure
    (in call order) is raised and the other results are discarded.
    """
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=min(max_workers, len(calls))) as pool:
        futures = [pool.submit(call) for call in calls]
        wait(futures)
    for future in futures:
        exc = future.exception()
        if exc is not None:
            raise exc
    return [future.result() for future in futures]


def missing_fields(record: Any, required: tuple[str, ...]) -> list[str]:
    return [name for name in required if not str(getattr(record, name, "") or "").strip()]


def require(record: Any, required: tuple[str, ...], labels: dict[str, str] | None = None) -> None:
    """Raise ``ValidationError`` naming every blank required field."""
    missing = missing_fields(record, required)
    if missing:
        labels = labels or {}
        names = ", ".join(labels.get(m, m) for m in missing)
        raise ValidationError(f"Please fill in: {names}")


class View:
    route: str = ""
    title: str = ""

    def __init__(self, client: PortalClient, store: SessionStore, max_workers: int = 4) -> None:
        self.client = client
        self.store = store
        self.max_workers = max_workers
        self.loading = False
        self.error: str | None = None
        self.alert: Notice | None = None
        self.navigate_to: str | None = None
        self.mounted = False
        self._generation = 0
        self._unsubscribe: Callable[[], None] | None = None

    # ── lifecycle ────────────────────────────────────────────────────────

    def mount(self) -> None:
        self.mounted = True
        self._generation += 1
        self._unsubscribe = self.store.subscribe(self._on_session_change)
        self.load()

    def unmount(self) -> None:
        self.mounted = False
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def is_current(self, generation: int) -> bool:
        return self.mounted and generation == self._generation

    def _on_session_change(self, session: Session | None) -> None:
        if session is None:
            self.navigate_to = LOGIN_ROUTE
            self.unmount()

    # ── loading ──────────────────────────────────────────────────────────

    def fetch(self) -> Any:
        """Issue this view's API calls. Runs outside any view state."""
        return None

    def apply(self, result: Any) -> None:
        """Copy a fetched result into view state."""

    def load(self) -> None:
        generation = self._generation
        self.loading = True
        self.error = None
        try:
            result = self.fetch()
        except PortalError as exc:
            if self.is_current(generation):
                log.error("%s: load failed: %s", type(self).__name__, exc)
                self.error = getattr(exc, "message", str(exc))
                self.loading = False
            return
        if not self.is_current(generation):
            log.debug("%s: discarding result for a view no longer shown", type(self).__name__)
            return
        self.apply(result)
        self.loading = False

    def refresh(self) -> None:
        """Invalidate and refetch after a mutation."""
        if self.mounted:
            self.load()

    def parallel(self, *calls: Callable[[PortalClient], Any]) -> list[Any]:
        """Run ``calls`` concurrently, each handed a client pinned to the current token."""
        api = self.client.pinned()
        return run_parallel(*(partial(call, api) for call in calls), max_workers=self.max_workers)

    # ── mutations ────────────────────────────────────────────────────────

    def mutate(
        self,
        action: Callable[[], Any],
        *,
        success: str,
        failure: str,
        then: Callable[[Any], None] | None = None,
    ) -> bool:
        """Run one mutation and report its outcome through a blocking notice."""
        generation = self._generation
        try:
            result = action()
        except PortalError as exc:
            if self.is_current(generation):
                log.warning("%s: %s: %s", type(self).__name__, failure, exc)
                detail = getattr(exc, "message", str(exc))
                self.alert = Notice(ERROR, f"{failure}: {detail}")
            return False
        if not self.is_current(generation):
            log.debug("%s: mutation finished after the view closed", type(self).__name__)
            return True
        self.alert = Notice(SUCCESS, success)
        if then is not None:
            then(result)
        return True

    def acknowledge(self) -> None:
        self.alert = None

    def take_navigation(self) -> str | None:
        target, self.navigate_to = self.navigate_to, None
        return target
