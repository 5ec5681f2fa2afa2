"""Deferred callbacks for the listening session (restart delay)."""
import threading
from typing import Callable


class ScheduledCall:
    """Handle to a pending timer; cancel() is safe to call repeatedly."""

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler:
    """Runs callbacks after a delay on daemon threading.Timer threads.

    The caller's thread is never blocked; the callback runs on the timer thread
    and is responsible for its own synchronization.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return ScheduledCall(timer)
