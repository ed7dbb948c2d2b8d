"""Cancellation context threaded through resource operations."""

import threading
import time
import weakref
from typing import Callable, Optional

CANCELED = "context canceled"
DEADLINE_EXCEEDED = "context deadline exceeded"


class OperationContext:
    """
    Caller-owned cancellation context.

    A context is cancelled explicitly with ``cancel`` or implicitly when its
    own deadline passes. Cancelling a context cancels every context derived
    from it with ``with_timeout``.
    """

    def __init__(self, timeout: Optional[float] = None,
                 parent: Optional["OperationContext"] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: "weakref.WeakSet[OperationContext]" = weakref.WeakSet()
        self._reason: Optional[str] = None
        self._parent = parent

        deadline = clock() + timeout if timeout is not None else None
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent._add_child(self)

    @classmethod
    def background(cls) -> "OperationContext":
        """A context that is never cancelled unless ``cancel`` is called."""
        return cls()

    def with_timeout(self, timeout: float) -> "OperationContext":
        return OperationContext(timeout=timeout, parent=self, clock=self._clock)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self, reason: str = CANCELED) -> None:
        with self._lock:
            if self._reason is None:
                self._reason = reason
            children = list(self._children)
        self._event.set()
        for child in children:
            child.cancel(reason)

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def reason(self) -> Optional[str]:
        if not self.cancelled:
            return None
        if self._reason is None and self._parent is not None:
            return self._parent.reason
        return self._reason

    def wait(self, seconds: float) -> bool:
        """
        Sleep for up to ``seconds``, waking early on cancellation.

        Returns:
            True if the context is cancelled when the wait ends
        """
        if seconds > 0 and not self._event.is_set():
            if self._deadline is not None:
                seconds = min(seconds, max(0.0, self._deadline - self._clock()))
            self._event.wait(seconds)
        return self.cancelled

    def _add_child(self, child: "OperationContext") -> None:
        with self._lock:
            self._children.add(child)
            reason = self._reason
        if reason is not None:
            child.cancel(reason)
