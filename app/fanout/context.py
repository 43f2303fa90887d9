from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from app.core.errors import TransportError

log = logging.getLogger("fanout.context")


class CallContext:
    """Deadline + cancellation carrier passed from the inbound request to every adapter call.

    Children inherit the parent's deadline (a child can only shorten it) and are
    cancelled together with the parent.
    """

    def __init__(self, *, deadline: float | None = None, parent: CallContext | None = None) -> None:
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._reason: str | None = None
        self._callbacks: list[Callable[[], None]] = []
        if parent is not None:
            parent.add_callback(lambda: self.cancel(parent.reason or "parent cancelled"))

    @classmethod
    def background(cls) -> CallContext:
        return cls()

    @classmethod
    def with_timeout(cls, timeout_s: float) -> CallContext:
        return cls(deadline=time.monotonic() + timeout_s)

    def child(self, timeout_s: float | None = None) -> CallContext:
        deadline = None if timeout_s is None else time.monotonic() + timeout_s
        return CallContext(deadline=deadline, parent=self)

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise TransportError(f"cancelled: {self._reason or 'cancelled'}")
        if self.expired():
            raise TransportError("deadline exceeded")

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._reason = reason
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            try:
                fn()
            except Exception:
                log.exception("cancel callback failed")

    def add_callback(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(fn)
                return
        fn()
