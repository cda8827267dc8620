"""Throughput computation from cumulative byte counters.

RateTracker keeps the previous counter reading for one interface and turns
each new reading into instantaneous receive/transmit rates in bytes per
second. Callers scale for display.

Example:
    >>> tracker = RateTracker()
    >>> tracker.seed(bytes_recv=1000, bytes_sent=500, timestamp=0.0)
    >>> sample = tracker.update(bytes_recv=2024, bytes_sent=500, timestamp=1.0)
    >>> sample.recv_rate
    1024.0
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from config import THRESHOLDS, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CounterReading:
    """Cumulative counters of one interface at a point in time."""

    bytes_recv: int
    bytes_sent: int
    timestamp: float


@dataclass(frozen=True)
class RateSample:
    """Rates measured between two counter readings.

    Attributes:
        previous: Reading the interval starts from.
        current: Reading the interval ends at.
        elapsed: Interval length in seconds, floored to a positive minimum.
        recv_rate: Receive rate in bytes/sec, None if the counter went
            backwards (wrap or adapter reset).
        sent_rate: Transmit rate in bytes/sec, None if indeterminate.
    """

    previous: CounterReading
    current: CounterReading
    elapsed: float
    recv_rate: Optional[float]
    sent_rate: Optional[float]


class RateTracker:
    """Turns successive counter readings into rates.

    Each update() measures the interval since the previous reading and
    then replaces it, so rates are per-interval rather than a moving
    average. Owned by the sampling loop and reset whenever the active
    interface changes identity.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        min_elapsed: float = THRESHOLDS.MIN_ELAPSED_SECONDS,
    ) -> None:
        self._clock = clock
        self._min_elapsed = min_elapsed
        self._previous: Optional[CounterReading] = None
        self._interface_name: Optional[str] = None

    @property
    def is_seeded(self) -> bool:
        return self._previous is not None

    @property
    def interface_name(self) -> Optional[str]:
        """Name of the interface the stored counters belong to."""
        return self._interface_name

    def seed(
        self,
        bytes_recv: int,
        bytes_sent: int,
        timestamp: Optional[float] = None,
        interface_name: Optional[str] = None,
    ) -> None:
        """Store an initial reading without reporting a rate."""
        self._previous = CounterReading(
            bytes_recv=bytes_recv,
            bytes_sent=bytes_sent,
            timestamp=self._clock() if timestamp is None else timestamp,
        )
        self._interface_name = interface_name
        logger.debug(f"RateTracker seeded for {interface_name or 'interface'}")

    def reset(self) -> None:
        """Forget the stored reading (interface lost or replaced)."""
        self._previous = None
        self._interface_name = None

    def update(
        self,
        bytes_recv: int,
        bytes_sent: int,
        timestamp: Optional[float] = None,
    ) -> RateSample:
        """Compute rates since the previous reading and store the new one.

        The first call after construction or reset() seeds the tracker and
        reports zero rates.
        """
        now = self._clock() if timestamp is None else timestamp
        current = CounterReading(bytes_recv=bytes_recv, bytes_sent=bytes_sent, timestamp=now)

        if self._previous is None:
            self._previous = current
            return RateSample(
                previous=current, current=current, elapsed=self._min_elapsed,
                recv_rate=0.0, sent_rate=0.0,
            )

        previous = self._previous
        elapsed = max(self._min_elapsed, now - previous.timestamp)
        recv_rate = self._rate(bytes_recv - previous.bytes_recv, elapsed, "receive")
        sent_rate = self._rate(bytes_sent - previous.bytes_sent, elapsed, "transmit")

        self._previous = current
        return RateSample(
            previous=previous, current=current, elapsed=elapsed,
            recv_rate=recv_rate, sent_rate=sent_rate,
        )

    @staticmethod
    def _rate(delta: int, elapsed: float, direction: str) -> Optional[float]:
        if delta < 0:
            logger.debug(f"{direction} counter decreased by {-delta} bytes, rate indeterminate")
            return None
        return delta / elapsed


__all__ = ["CounterReading", "RateSample", "RateTracker"]
