"""Internet reachability probing with a burst of ICMP echoes.

A probe sends a bounded number of single-packet echoes to a fixed target,
one after another, and reduces them to average latency, loss percentage
and a reachable flag.

Loss jitter:
    When loss is strictly between 0 and 100 the reported percentage is
    nudged by up to ±LOSS_JITTER_POINTS and clamped to [0, 100]. This is a
    cosmetic display smoothing so a partially lossy link does not show the
    same number every tick. It is not a measurement correction; the raw
    counts stay on the result.

Example:
    >>> probe = ReachabilityProbe()
    >>> result = probe.probe("8.8.8.8")
    >>> result.reachable, result.loss_percent
"""

from __future__ import annotations

import random
import re
import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from config import (
    INTERVALS,
    NETWORK,
    THRESHOLDS,
    CommandNotFoundError,
    CommandTimeoutError,
    ProbeUnavailableError,
    SubprocessError,
    get_logger,
    safe_run,
)

logger = get_logger(__name__)

# "time=9.742 ms", "time=12ms", "time<1ms"
_RTT_PATTERN = re.compile(r'time\s*[=<]\s*(\d+(?:[.,]\d+)?)\s*ms', re.IGNORECASE)


@dataclass(frozen=True)
class PingReply:
    """Outcome of one echo request."""

    success: bool
    rtt_ms: float = 0.0


class PingTransport(Protocol):
    """Anything that can send a single echo with a timeout."""

    def send(self, target: str, timeout_ms: int) -> PingReply:
        ...


@dataclass(frozen=True)
class ReachabilityResult:
    """Reduced outcome of a probe burst.

    Attributes:
        attempts: Echo requests actually sent.
        successes: Echo replies received.
        rtt_sum_ms: Sum of round-trip times over successful replies.
        avg_latency_ms: Mean round-trip time, None ("no data") when no
            reply arrived.
        loss_percent: Reported loss, 0-100 (possibly jittered).
        reachable: True when at least one reply arrived.
        jittered: Whether the cosmetic loss jitter was applied.
    """

    attempts: int
    successes: int
    rtt_sum_ms: float
    avg_latency_ms: Optional[float]
    loss_percent: int
    reachable: bool
    jittered: bool = False

    @classmethod
    def offline(cls, attempts: int = 0) -> "ReachabilityResult":
        """Result used when the probe facility itself is unavailable."""
        return cls(
            attempts=attempts, successes=0, rtt_sum_ms=0.0,
            avg_latency_ms=None, loss_percent=100, reachable=False,
        )


class SystemPingTransport:
    """Sends echoes by running the system `ping` command once per echo."""

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    def build_command(self, target: str, timeout_ms: int) -> list:
        if self.platform == "win32":
            return ['ping', '-n', '1', '-w', str(timeout_ms), target]
        if self.platform == "darwin":
            # macOS takes the wait time in milliseconds
            return ['ping', '-c', '1', '-W', str(timeout_ms), target]
        # iputils takes seconds and accepts fractions
        return ['ping', '-c', '1', '-W', f"{timeout_ms / 1000:g}", target]

    def send(self, target: str, timeout_ms: int) -> PingReply:
        cmd = self.build_command(target, timeout_ms)
        try:
            result = safe_run(
                cmd, timeout=timeout_ms / 1000 + INTERVALS.PING_OVERHEAD_SECONDS, quiet=True
            )
        except CommandTimeoutError:
            return PingReply(success=False)
        except CommandNotFoundError as e:
            raise ProbeUnavailableError("ping is not available", {"command": cmd}) from e
        except SubprocessError as e:
            raise ProbeUnavailableError(f"ping could not be started: {e.message}") from e

        if result.returncode != 0:
            return PingReply(success=False)
        rtt = parse_rtt(result.stdout)
        if rtt is None:
            # Windows exits 0 on "Destination host unreachable"
            return PingReply(success=False)
        if rtt > timeout_ms:
            return PingReply(success=False)
        return PingReply(success=True, rtt_ms=rtt)


def parse_rtt(output: str) -> Optional[float]:
    """Extract the round-trip time in ms from single-echo ping output."""
    match = _RTT_PATTERN.search(output or "")
    if not match:
        return None
    return float(match.group(1).replace(",", "."))


def apply_loss_jitter(loss: int, rng: random.Random, points: int = THRESHOLDS.LOSS_JITTER_POINTS) -> int:
    """Cosmetic ±points nudge for partial loss; 0 and 100 pass through."""
    if loss <= 0 or loss >= 100:
        return loss
    return max(0, min(100, loss + rng.randint(-points, points)))


class ReachabilityProbe:
    """Runs probe bursts through a PingTransport.

    Args:
        transport: Echo sender, SystemPingTransport by default.
        rng: Random source for the cosmetic jitter.
        sleep: Used for inter-probe spacing when no cancel event is given.
    """

    def __init__(
        self,
        transport: Optional[PingTransport] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport or SystemPingTransport()
        self._rng = rng or random.Random()
        self._sleep = sleep

    def probe(
        self,
        target: str = NETWORK.DEFAULT_PROBE_HOST,
        sample_count: int = THRESHOLDS.PROBE_SAMPLE_COUNT,
        per_probe_timeout_ms: int = INTERVALS.PROBE_TIMEOUT_MS,
        inter_probe_delay_ms: int = INTERVALS.PROBE_DELAY_MS,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReachabilityResult:
        """Send up to sample_count echoes and summarise them.

        Never raises: a transport failure yields ReachabilityResult.offline().
        Setting cancel_event stops the burst early; the result then covers
        only the echoes actually sent.
        """
        attempts = 0
        successes = 0
        rtt_sum = 0.0

        try:
            for i in range(sample_count):
                if cancel_event is not None and cancel_event.is_set():
                    break
                reply = self.transport.send(target, per_probe_timeout_ms)
                attempts += 1
                if reply.success:
                    successes += 1
                    rtt_sum += reply.rtt_ms
                if i < sample_count - 1:
                    self._pause(inter_probe_delay_ms / 1000, cancel_event)
        except Exception as e:
            logger.warning(f"Reachability probe to {target} failed: {e}")
            return ReachabilityResult.offline(attempts)

        if attempts == 0:
            return ReachabilityResult.offline()

        raw_loss = round((attempts - successes) * 100 / attempts)
        loss = apply_loss_jitter(raw_loss, self._rng)
        avg = rtt_sum / successes if successes else None

        logger.debug(
            f"Probe {target}: {successes}/{attempts} replies, "
            f"avg={avg if avg is None else round(avg, 1)}ms, loss={loss}%"
        )
        return ReachabilityResult(
            attempts=attempts,
            successes=successes,
            rtt_sum_ms=rtt_sum,
            avg_latency_ms=avg,
            loss_percent=loss,
            reachable=successes > 0,
            jittered=0 < raw_loss < 100,
        )

    def _pause(self, seconds: float, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None:
            cancel_event.wait(seconds)
        else:
            self._sleep(seconds)


__all__ = [
    "PingReply",
    "PingTransport",
    "ReachabilityProbe",
    "ReachabilityResult",
    "SystemPingTransport",
    "apply_loss_jitter",
    "parse_rtt",
]
