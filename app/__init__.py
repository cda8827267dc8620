"""Application module for Network Tool.

Contains the engine and its wiring:
- SamplingLoop: One telemetry tick, never overlapping
- ToggleController: Race-free internet kill switch
- EventBus: Internal event communication
- AppController: Orchestration with DI
- PeriodicTimer: Background tick scheduling
- Views: Display formatting, status icon and menu bar UI
"""

from app.controller import AppController
from app.dependencies import AppDependencies, create_dependencies
from app.events import Event, EventBus, EventType
from app.sampler import SamplingLoop
from app.snapshot import Activity, TelemetrySnapshot, classify_activity
from app.timer import PeriodicTimer
from app.toggle import AdminCommandRunner, ToggleController, ToggleResult, ToggleState

__all__ = [
    "Activity",
    "AdminCommandRunner",
    "AppController",
    "AppDependencies",
    "Event",
    "EventBus",
    "EventType",
    "PeriodicTimer",
    "SamplingLoop",
    "TelemetrySnapshot",
    "ToggleController",
    "ToggleResult",
    "ToggleState",
    "classify_activity",
    "create_dependencies",
]
