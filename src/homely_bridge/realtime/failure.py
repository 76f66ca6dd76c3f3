"""One-shot, thread-safe failure notification.

The realtime transport reports failures from its own threads while the
bridge's worker thread blocks until the first one arrives. ``FailureSignal``
holds a write-once slot guarded by a ``threading.Condition``: the first
``set`` wins and wakes every waiter, later calls are no-ops.
"""

from __future__ import annotations

import threading
import time


class FailureSignal:
    """Write-once failure slot with a blocking ``wait``."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._error: BaseException | None = None
        self._set = False

    @property
    def is_set(self) -> bool:
        with self._cond:
            return self._set

    @property
    def error(self) -> BaseException | None:
        with self._cond:
            return self._error

    def set(self, error: BaseException) -> bool:
        """Record *error* if nothing was recorded yet.

        Returns ``True`` for the call that recorded the failure and ``False``
        for every later call.
        """
        with self._cond:
            if self._set:
                return False
            self._error = error
            self._set = True
            self._cond.notify_all()
            return True

    def wait(self, timeout: float | None = None) -> BaseException | None:
        """Block until a failure is recorded and return it.

        Returns ``None`` if *timeout* seconds pass first. Wakeups that find the
        slot still empty go back to waiting.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._set:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._cond.wait(remaining)
            return self._error
