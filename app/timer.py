"""Background timer driving the sampling loop.

Runs a callback every `interval` seconds on one daemon thread. The period
is measured from the start of each run, so a slow callback shortens the
following wait instead of drifting the schedule. A run that overruns the
whole period is not doubled up: the next one starts as soon as it ends.

Usage:
    from app.timer import PeriodicTimer

    timer = PeriodicTimer(sampler.tick, interval=1.0)
    timer.start()
    ...
    timer.stop()
"""

import threading
import time
from typing import Callable, Optional

from config import get_logger, log_exception

logger = get_logger(__name__)


class PeriodicTimer:
    """Calls `callback()` on a fixed period until stopped.

    Attributes:
        interval: Seconds between the starts of consecutive runs.
        stop_event: Set by stop(); long-running callbacks may watch it to
            finish early.
    """

    def __init__(self, callback: Callable[[], object], interval: float,
                 name: str = "PeriodicTimer", run_immediately: bool = True):
        self._callback = callback
        self._interval = interval
        self._name = name
        self._run_immediately = run_immediately
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.stop_event = threading.Event()

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        with self._lock:
            self._interval = value

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        if not self._run_immediately and self.stop_event.wait(self._interval):
            return

        while not self.stop_event.is_set():
            started = time.monotonic()
            try:
                self._callback()
            except Exception as e:
                # One bad run must not kill the schedule
                log_exception(logger, f"{self._name} callback failed", e)

            with self._lock:
                interval = self._interval
            remaining = interval - (time.monotonic() - started)
            if self.stop_event.wait(max(0.0, remaining)):
                return

    def start(self) -> None:
        if self.is_running:
            return
        self.stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self._name)
        self._thread.start()
        logger.debug(f"{self._name} started with interval {self._interval}s")

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        """Signal the thread to stop and wait for the current run to end."""
        self.stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None
        logger.debug(f"{self._name} stopped")
