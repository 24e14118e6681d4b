"""
Background scheduling for sync work: cancellable delayed calls and
fire-and-forget tasks on daemon threads.
"""

import logging
import threading
import uuid
from typing import Callable, Optional

from legal_secretary.config import log_event


class ScheduledCall:
    """Handle for a delayed call. Cancelling a call that already ran is a no-op."""

    def __init__(self, timer: threading.Timer, name: str):
        self._timer = timer
        self.name = name

    def cancel(self):
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return self._timer.is_alive()


class ThreadScheduler:
    """Runs callbacks on daemon threads."""

    def call_later(self, delay: float, fn: Callable[[], None], name: Optional[str] = None) -> ScheduledCall:
        name = name or fn.__name__
        timer = threading.Timer(delay, self._run, args=(fn, name))
        timer.daemon = True
        timer.start()
        log_event(logging.DEBUG, "scheduler_call_later", name=name, delay=delay)
        return ScheduledCall(timer, name)

    def submit(self, fn: Callable[[], None], name: Optional[str] = None) -> threading.Thread:
        name = name or fn.__name__
        thread = threading.Thread(
            target=self._run,
            args=(fn, name),
            name=f"{name}-{str(uuid.uuid4())[:8]}",
            daemon=True,
        )
        thread.start()
        return thread

    @staticmethod
    def _run(fn: Callable[[], None], name: str):
        try:
            fn()
        except Exception as e:
            log_event(logging.ERROR, "scheduler_task_error", name=name, error=str(e))
