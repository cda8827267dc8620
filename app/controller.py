"""Application controller for Network Tool.

Wires the sampling loop, its timer and the kill switch together from an
AppDependencies container. Front ends (menu bar, headless console) talk
only to the controller and the event bus.

Usage:
    from app.controller import AppController
    from app.dependencies import create_dependencies

    controller = AppController(create_dependencies())
    controller.start()
    ...
    controller.stop()
"""
from typing import Callable, Optional

from app.dependencies import AppDependencies
from app.events import EventBus, EventType, get_event_bus
from app.sampler import SamplingLoop
from app.snapshot import TelemetrySnapshot
from app.timer import PeriodicTimer
from app.toggle import ToggleController, ToggleResult, ToggleState
from config import ConfigurationError, get_logger

logger = get_logger(__name__)


class AppController:
    """Owns the engine's long-lived objects.

    Attributes:
        deps: The dependency container.
        event_bus: Where snapshots and toggle events are published.
        sampler: The SamplingLoop producing snapshots.
        toggle: The kill switch.
    """

    def __init__(self, deps: AppDependencies, event_bus: Optional[EventBus] = None):
        self.deps = deps
        self.event_bus = event_bus or deps.event_bus or get_event_bus()
        settings = deps.settings.settings

        self.sampler = SamplingLoop(
            enumerator=deps.enumerator,
            probe=deps.probe,
            wifi_reader=deps.wifi_reader,
            public_resolver=deps.public_resolver,
            event_bus=self.event_bus,
        )
        self.sampler.apply_settings(settings)

        self.toggle = ToggleController(
            enumerator=deps.enumerator,
            admin_runner=deps.admin_runner,
            event_bus=self.event_bus,
            refresh_callback=self.sampler.request_refresh,
            poll_settle=settings.poll_settle,
        )

        self.timer = PeriodicTimer(
            self.sampler.tick, interval=settings.sample_interval, name="SamplingTimer"
        )
        self._running = False

        logger.info("AppController initialized")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def latest_snapshot(self) -> Optional[TelemetrySnapshot]:
        return self.sampler.latest_snapshot

    @property
    def toggle_state(self) -> ToggleState:
        return self.toggle.state

    def start(self) -> None:
        """Start periodic sampling (first tick runs immediately)."""
        if self._running:
            return
        logger.info("Starting AppController...")
        self._running = True
        self.sampler.stop_event.clear()
        self.event_bus.publish(EventType.APP_STARTING)
        self.timer.start()

    def stop(self) -> None:
        """Stop sampling; a running probe burst is cut short."""
        if not self._running:
            return
        logger.info("Stopping AppController...")
        self._running = False
        self.sampler.stop_event.set()
        self.timer.stop()
        self.event_bus.publish(EventType.APP_STOPPING)

    def refresh(self) -> Optional[TelemetrySnapshot]:
        """Blocking out-of-band tick."""
        return self.sampler.refresh()

    # === Kill switch (called from UI) ===

    def set_internet_disabled(
        self, disabled: bool, on_done: Optional[Callable[[ToggleResult], None]] = None
    ) -> bool:
        """Start a disable/enable on a worker thread.

        Returns:
            False when the request was rejected because another toggle is
            in flight.
        """
        if disabled:
            worker = self.toggle.request_disable_async(on_done)
        else:
            worker = self.toggle.request_enable_async(on_done)
        return worker is not None

    # === Settings ===

    def update_settings(self, **values) -> None:
        """Persist new settings and apply them to the running engine.

        Raises:
            ConfigurationError: If any value is invalid (nothing changes).
        """
        try:
            self.deps.settings.update(**values)
        except ConfigurationError:
            logger.warning(f"Rejected settings update: {sorted(values)}")
            raise

        settings = self.deps.settings.settings
        self.sampler.apply_settings(settings)
        self.toggle.poll_settle = settings.poll_settle
        self.timer.interval = settings.sample_interval
        self.event_bus.publish(EventType.SETTINGS_CHANGED, {"changed": sorted(values)})
