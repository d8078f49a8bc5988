"""
Cancellation handle for one translation.

Two independent sources can abort an in-flight request:

- the user, through cancel(), which may be called from any thread
  (e.g. a Flask request thread while the translation runs in a worker);
- a wall-clock deadline armed when the handle is bound to the running task.

Whichever fires first cancels the bound asyncio task once. Both flags are
kept, so whoever observes the resulting CancelledError can ask ``cause``
which source fired. If both are set at that moment the deadline wins:
the request ran out of time regardless of what the user did afterwards.
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import Optional

DEFAULT_DEADLINE_SECONDS = 60.0


class CancelCause(str, Enum):
    TIMEOUT = "timeout"
    USER = "cancelled"


class CancellationHandle:
    """User cancel trigger plus deadline timer, bound to one asyncio task."""

    def __init__(self, timeout: float = DEFAULT_DEADLINE_SECONDS):
        self.timeout = timeout
        self._lock = threading.Lock()
        self._user_cancelled = False
        self._deadline_expired = False
        self._abort_requested = False
        self._closed = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending_abort: Optional[asyncio.Handle] = None
        self._aborted_task: Optional[asyncio.Task] = None

    @property
    def cause(self) -> Optional[CancelCause]:
        """Which source fired. The deadline takes precedence when both have."""
        if self._deadline_expired:
            return CancelCause.TIMEOUT
        if self._user_cancelled:
            return CancelCause.USER
        return None

    @property
    def cancelled(self) -> bool:
        return self.cause is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def bind(self, task: Optional[asyncio.Task] = None) -> None:
        """Attach to *task* (default: the current task) and arm the deadline.

        Must be called from inside the running event loop. A cancel that
        arrived before binding aborts the task right away.
        """
        loop = asyncio.get_running_loop()
        task = task or asyncio.current_task()
        with self._lock:
            if self._closed:
                raise RuntimeError("CancellationHandle is already closed")
            self._loop = loop
            self._task = task
            self._timer = loop.call_later(self.timeout, self.expire)
            if self.cause is not None:
                self._abort_locked()

    def cancel(self) -> None:
        """User-initiated cancel. Safe to call from any thread, any number of times."""
        with self._lock:
            self._user_cancelled = True
            self._abort_locked()

    def expire(self) -> None:
        """Deadline reached. Normally called by the timer armed in bind()."""
        with self._lock:
            self._deadline_expired = True
            self._abort_locked()

    def close(self) -> None:
        """Disarm the timer and detach from the task.

        Called as soon as an outcome is known; later triggers only set flags.
        """
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._pending_abort is not None:
                self._pending_abort.cancel()
                self._pending_abort = None
            self._task = None
            self._loop = None
            aborted, self._aborted_task = self._aborted_task, None
        # The abort has been handled by now: withdraw our cancel request
        if aborted is not None and hasattr(aborted, "uncancel"):
            aborted.uncancel()

    def _abort_locked(self) -> None:
        if self._closed or self._abort_requested or self._task is None:
            return
        self._abort_requested = True
        self._pending_abort = self._loop.call_soon_threadsafe(self._abort_task)

    def _abort_task(self) -> None:
        with self._lock:
            self._pending_abort = None
            task = self._task
            if task is None or task.done():
                return
            self._aborted_task = task
        task.cancel()
