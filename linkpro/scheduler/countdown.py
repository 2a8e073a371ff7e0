"""
Redirect countdown for the public redirect view.

A visitor landing on `/{username}/{platform}` sees "Redirecting in 3..." and
is sent on when the counter reaches zero. The navigation side effect must
never run once the view is gone, so every exit path cancels the timer:

    with RedirectCountdown(3, on_complete=lambda: navigate(link.url)) as countdown:
        ...  # leaving the block cancels a countdown that has not finished

LLM Prompt Example:
    "Show how to guarantee a timer callback never fires after cancellation
    when the timer thread and the cancelling thread race."
"""

import logging
import threading
from typing import Callable, Optional

log = logging.getLogger("linkpro.scheduler")


class RedirectCountdown:
    def __init__(
        self,
        seconds: int,
        on_complete: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        period: float = 1.0,
    ):
        """
        Args:
            seconds (int): Starting value; 0 completes on the first step.
            on_complete (Callable[[], None]): Navigation side effect, run at most once.
            on_tick (Optional[Callable[[int], None]]): Called with the remaining seconds after each step.
            period (float): Wall-clock seconds between steps.
        """
        self.remaining = max(0, int(seconds))
        self.on_complete = on_complete
        self.on_tick = on_tick
        self.period = period
        self.completed = False
        self.cancelled = False
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return not (self.completed or self.cancelled)

    def step(self) -> int:
        """Advance one second; fires `on_complete` when the count reaches zero."""
        with self._lock:
            if not self.active:
                return self.remaining
            if self.remaining > 0:
                self.remaining -= 1
            if self.on_tick:
                self.on_tick(self.remaining)
            if self.remaining == 0:
                self.completed = True
                self._stop.set()
                # Fired under the lock so cancel() cannot slip in between
                self.on_complete()
            return self.remaining

    def start(self) -> "RedirectCountdown":
        with self._lock:
            if self._thread is None and self.active:
                self._thread = threading.Thread(target=self._run, name="linkpro-countdown", daemon=True)
                self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stop.wait(self.period):
            try:
                self.step()
            except Exception:
                log.exception("Redirect countdown callback failed")
                self.cancel()

    def cancel(self) -> None:
        with self._lock:
            if not self.completed:
                self.cancelled = True
            self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.period + 1.0)

    def __enter__(self) -> "RedirectCountdown":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
