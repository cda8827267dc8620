"""Event bus connecting the telemetry engine to its front ends.

The sampling loop and toggle controller publish; the menu bar app, the
headless logger and tests subscribe. Neither side holds a reference to
the other.

Usage:
    from app.events import EventBus, EventType

    bus = EventBus(async_mode=False)
    bus.subscribe(EventType.SNAPSHOT_UPDATED, lambda e: print(e.data["snapshot"]))
    bus.publish(EventType.SNAPSHOT_UPDATED, {"snapshot": snapshot})
"""
import queue
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from config import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    """Events published inside the application."""

    # Telemetry
    SNAPSHOT_UPDATED = auto()
    INTERFACE_CHANGED = auto()

    # Kill switch
    TOGGLE_STARTED = auto()
    TOGGLE_COMPLETED = auto()
    TOGGLE_REJECTED = auto()
    TOGGLE_FAILED = auto()

    # Lifecycle
    APP_STARTING = auto()
    APP_STOPPING = auto()
    SETTINGS_CHANGED = auto()


@dataclass
class Event:
    """A published event.

    Attributes:
        event_type: What happened.
        data: Event-specific payload.
        timestamp: Creation time.
        source: Optional name of the publisher.
    """
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None

    def __str__(self) -> str:
        return f"Event({self.event_type.name}, source={self.source})"


EventHandler = Callable[[Event], None]


class EventBus:
    """Thread-safe publish/subscribe bus.

    In async mode events are queued and delivered by one worker thread, in
    publish order. In sync mode handlers run on the publisher's thread.
    A failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self, async_mode: bool = True):
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()
        self._async_mode = async_mode
        self._queue: "queue.Queue[Optional[Event]]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None

        if async_mode:
            self._worker = threading.Thread(
                target=self._run_worker, daemon=True, name="EventBus-Worker"
            )
            self._worker.start()

    @property
    def async_mode(self) -> bool:
        return self._async_mode

    def _run_worker(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self._deliver(event)
            finally:
                self._queue.task_done()

    def _deliver(self, event: Event) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, ()))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler for {event.event_type.name} failed: {e}", exc_info=True)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        with self._lock:
            self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed to {event_type.name}")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """Remove a handler. Returns False if it was not subscribed."""
        with self._lock:
            handlers = self._handlers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)
                return True
        return False

    def publish(self, event_type: EventType, data: Optional[Dict[str, Any]] = None,
                source: Optional[str] = None) -> None:
        """Publish an event (queued in async mode)."""
        event = Event(event_type=event_type, data=data or {}, source=source)
        if self._async_mode:
            self._queue.put(event)
        else:
            self._deliver(event)

    def publish_sync(self, event_type: EventType, data: Optional[Dict[str, Any]] = None,
                     source: Optional[str] = None) -> None:
        """Deliver immediately on the calling thread, bypassing the queue."""
        self._deliver(Event(event_type=event_type, data=data or {}, source=source))

    def wait_until_idle(self) -> None:
        """Block until every queued event has been delivered."""
        if self._async_mode:
            self._queue.join()

    def subscriber_count(self, event_type: EventType) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def clear_subscribers(self, event_type: Optional[EventType] = None) -> None:
        with self._lock:
            if event_type is None:
                self._handlers.clear()
            else:
                self._handlers.pop(event_type, None)

    def shutdown(self) -> None:
        """Deliver what is queued, then stop the worker."""
        if self._worker is not None and self._worker.is_alive():
            self._queue.put(None)
            self._worker.join(timeout=1.0)
        self._worker = None
        logger.debug("EventBus shut down")


_global_bus: Optional[EventBus] = None
_global_bus_lock = threading.Lock()


def get_event_bus() -> EventBus:
    """Get or create the process-wide async event bus."""
    global _global_bus
    with _global_bus_lock:
        if _global_bus is None:
            _global_bus = EventBus(async_mode=True)
        return _global_bus
