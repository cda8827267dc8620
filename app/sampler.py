"""One telemetry tick, and the guarantee that ticks never overlap.

A tick enumerates interfaces, picks the active one, and gathers rates,
addresses, reachability and wireless details into a TelemetrySnapshot,
which is then published as SNAPSHOT_UPDATED.

Overlap rules:
    - tick() from the timer uses a non-blocking acquire: if the previous
      tick is still probing, this fire is skipped.
    - refresh() blocks until the running tick ends and then runs its own,
      so an out-of-band refresh (after a toggle) is never lost.

Usage:
    from app.sampler import SamplingLoop

    loop = SamplingLoop(enumerator, probe, wifi_reader, resolver, event_bus=bus)
    snapshot = loop.refresh()
"""

import threading
import time
from typing import Callable, Optional

from app.events import EventType
from app.snapshot import TelemetrySnapshot, classify_activity
from config import INTERVALS, NETWORK, THRESHOLDS, get_logger, log_exception
from config.logging_config import LogContext
from monitor.rates import RateTracker
from monitor.selector import select_active_interface
from monitor.wifi import WifiMetadata

logger = get_logger(__name__)


class SamplingLoop:
    """Builds snapshots from the telemetry collectors.

    Attributes:
        probe_target: Host the reachability burst is sent to.
        sample_count: Echoes per burst.
        probe_timeout_ms: Per-echo timeout.
        probe_delay_ms: Pause between echoes.
        stop_event: Set on shutdown; interrupts a running probe burst.
    """

    def __init__(
        self,
        enumerator,
        probe,
        wifi_reader,
        public_resolver,
        event_bus=None,
        rate_tracker: Optional[RateTracker] = None,
        probe_target: str = NETWORK.DEFAULT_PROBE_HOST,
        sample_count: int = THRESHOLDS.PROBE_SAMPLE_COUNT,
        probe_timeout_ms: int = INTERVALS.PROBE_TIMEOUT_MS,
        probe_delay_ms: int = INTERVALS.PROBE_DELAY_MS,
        clock: Callable[[], float] = time.monotonic,
        stop_event: Optional[threading.Event] = None,
    ):
        self.enumerator = enumerator
        self.probe = probe
        self.wifi_reader = wifi_reader
        self.public_resolver = public_resolver
        self.event_bus = event_bus
        self.rate_tracker = rate_tracker or RateTracker(clock=clock)
        self.probe_target = probe_target
        self.sample_count = sample_count
        self.probe_timeout_ms = probe_timeout_ms
        self.probe_delay_ms = probe_delay_ms
        self.stop_event = stop_event or threading.Event()
        self._clock = clock

        self._tick_lock = threading.Lock()
        self._snapshot_lock = threading.Lock()
        self._latest: Optional[TelemetrySnapshot] = None

    @property
    def latest_snapshot(self) -> Optional[TelemetrySnapshot]:
        """Most recent successful snapshot (None before the first tick)."""
        with self._snapshot_lock:
            return self._latest

    def tick(self, blocking: bool = False) -> Optional[TelemetrySnapshot]:
        """Run one tick.

        Returns:
            The new snapshot, or None when the tick was skipped because
            another one is running, or when it failed unexpectedly (the
            previous snapshot then stays current).
        """
        if not self._tick_lock.acquire(blocking=blocking):
            logger.debug("Tick still running, skipping this one")
            return None
        try:
            snapshot = self._sample()
            with self._snapshot_lock:
                self._latest = snapshot
        except Exception as e:
            log_exception(logger, "Sampling tick failed", e)
            return None
        finally:
            self._tick_lock.release()

        self._publish(EventType.SNAPSHOT_UPDATED, {"snapshot": snapshot})
        return snapshot

    def refresh(self) -> Optional[TelemetrySnapshot]:
        """Tick now, waiting for any running tick to finish first."""
        return self.tick(blocking=True)

    def request_refresh(self) -> threading.Thread:
        """refresh() on a daemon thread; for callers that must not block."""
        worker = threading.Thread(target=self.refresh, daemon=True, name="SamplingRefresh")
        worker.start()
        return worker

    def apply_settings(self, settings) -> None:
        """Take probe parameters from an AppSettings instance."""
        self.probe_target = settings.probe_target
        self.sample_count = settings.sample_count
        self.probe_timeout_ms = settings.probe_timeout_ms
        self.probe_delay_ms = settings.probe_delay_ms
        self.public_resolver.url = settings.public_ip_url

    def _publish(self, event_type: EventType, data: dict) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, data, source="sampler")

    def _sample(self) -> TelemetrySnapshot:
        interfaces = self.enumerator.list_interfaces()
        now = self._clock()
        active = select_active_interface(interfaces)

        if active is None:
            if self.rate_tracker.is_seeded:
                self._publish(EventType.INTERFACE_CHANGED, {
                    "old": self.rate_tracker.interface_name, "new": None,
                })
            self.rate_tracker.reset()
            logger.debug("No active interface, reporting offline")
            return TelemetrySnapshot.offline()

        if self.rate_tracker.interface_name != active.name:
            # Counters of a different adapter are not comparable
            self._publish(EventType.INTERFACE_CHANGED, {
                "old": self.rate_tracker.interface_name, "new": active.name,
            })
            self.rate_tracker.seed(active.bytes_recv, active.bytes_sent,
                                   timestamp=now, interface_name=active.name)
            recv_rate, sent_rate = 0.0, 0.0
        else:
            rates = self.rate_tracker.update(active.bytes_recv, active.bytes_sent, timestamp=now)
            recv_rate, sent_rate = rates.recv_rate, rates.sent_rate

        ip_config = self.enumerator.get_ip_configuration(active)
        public_address = self.public_resolver.resolve()
        with LogContext(logger, f"Probe burst to {self.probe_target}"):
            reachability = self.probe.probe(
                self.probe_target,
                sample_count=self.sample_count,
                per_probe_timeout_ms=self.probe_timeout_ms,
                inter_probe_delay_ms=self.probe_delay_ms,
                cancel_event=self.stop_event,
            )
        wifi = self.wifi_reader.read(active.name) if active.is_wireless else WifiMetadata.unknown()

        return TelemetrySnapshot(
            timestamp=time.time(),
            has_interface=True,
            interface_name=active.name,
            interface_description=active.description,
            media_type=active.media_type.value,
            interface_status=active.status_label,
            local_address=ip_config.local_address,
            gateway=ip_config.gateway,
            dns_server=ip_config.dns_server,
            public_address=public_address,
            wifi=wifi,
            recv_rate=recv_rate,
            sent_rate=sent_rate,
            reachability=reachability,
            activity=classify_activity(recv_rate, sent_rate),
        )


__all__ = ["SamplingLoop"]
