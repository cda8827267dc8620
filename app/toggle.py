"""Internet kill switch: administratively disable / enable the active adapter.

State machine:

    ENABLED --request_disable--> DISABLING --> DISABLED
    DISABLED --request_enable--> ENABLING  --> ENABLED

Only one transition runs at a time. ToggleGuard does an atomic
check-and-set under a lock; a request that loses the race is rejected at
once (no command issued) and a TOGGLE_REJECTED event tells the front end
which state to snap its control back to. The guard is released in a
`finally` on every exit path.

The admin command's output is kept as a diagnostic. It is logged and
reported, but it never decides the transition and nothing is retried.

Example:
    >>> toggle = ToggleController(InterfaceEnumerator(), event_bus=bus)
    >>> result = toggle.request_disable()
    >>> result.state, result.message
"""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from app.events import EventType
from config import INTERVALS, SubprocessError, ToggleError, get_logger, log_exception, safe_run
from monitor.selector import select_active_interface, select_fallback_adapter

logger = get_logger(__name__)

NO_ACTIVE_ADAPTER = "No active network adapter found"
NO_ADAPTER_TO_ENABLE = "No network adapter found to re-enable"


class ToggleState(Enum):
    ENABLED = "enabled"
    DISABLING = "disabling"
    DISABLED = "disabled"
    ENABLING = "enabling"

    @property
    def settled(self) -> "ToggleState":
        """State this one ends in once the running transition finishes."""
        if self is ToggleState.DISABLING:
            return ToggleState.DISABLED
        if self is ToggleState.ENABLING:
            return ToggleState.ENABLED
        return self

    @property
    def internet_disabled(self) -> bool:
        return self.settled is ToggleState.DISABLED


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle request.

    Attributes:
        accepted: False when the request was rejected without running.
        succeeded: True when the transition completed.
        state: Controller state after the request.
        adapter_name: Adapter acted on, if any.
        message: Diagnostic text (admin command output or the reason).
    """

    accepted: bool
    succeeded: bool
    state: ToggleState
    adapter_name: Optional[str] = None
    message: str = ""


class AdminCommandRunner:
    """Issues the platform's interface enable/disable command."""

    def __init__(self, platform: Optional[str] = None,
                 timeout: float = INTERVALS.ADMIN_COMMAND_TIMEOUT_SECONDS):
        self.platform = platform or sys.platform
        self.timeout = timeout

    def build_command(self, adapter_name: str, enable: bool) -> List[str]:
        if self.platform == "win32":
            return ['netsh', 'interface', 'set', 'interface', f'name={adapter_name}',
                    f'admin={"ENABLED" if enable else "DISABLED"}']
        if self.platform == "darwin":
            return ['ifconfig', adapter_name, 'up' if enable else 'down']
        return ['ip', 'link', 'set', 'dev', adapter_name, 'up' if enable else 'down']

    def set_admin_state(self, adapter_name: str, enable: bool) -> str:
        """Run the command and return its diagnostic text. Never raises.

        stderr wins over stdout when both are present; a launch failure
        is reported as "Error: ...".
        """
        cmd = self.build_command(adapter_name, enable)
        try:
            result = safe_run(cmd, timeout=self.timeout)
        except SubprocessError as e:
            return f"Error: {e.message}"

        stderr = (result.stderr or "").strip()
        return stderr if stderr else (result.stdout or "").strip()


class ToggleGuard:
    """Lock-protected single-flight flag."""

    def __init__(self):
        self._lock = threading.Lock()
        self._busy = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def try_begin(self) -> bool:
        """Claim the guard. Returns False if an operation is in flight."""
        with self._lock:
            if self._busy:
                return False
            self._busy = True
            return True

    def end(self) -> None:
        with self._lock:
            self._busy = False


class ToggleController:
    """Runs kill switch transitions against the current active adapter.

    Args:
        enumerator: Source of fresh interface lists (InterfaceEnumerator).
        admin_runner: Issues the admin command.
        event_bus: Receives TOGGLE_* events; optional.
        refresh_callback: Called after a completed transition so the
            telemetry reflects the new link state.
        poll_settle: Poll the adapter status instead of a fixed delay.
        sleep / clock: Injectable for tests.
    """

    def __init__(
        self,
        enumerator,
        admin_runner: Optional[AdminCommandRunner] = None,
        event_bus=None,
        refresh_callback: Optional[Callable[[], None]] = None,
        poll_settle: bool = False,
        disable_settle_seconds: float = INTERVALS.DISABLE_SETTLE_SECONDS,
        enable_settle_seconds: float = INTERVALS.ENABLE_SETTLE_SECONDS,
        poll_interval_seconds: float = INTERVALS.SETTLE_POLL_SECONDS,
        poll_timeout_seconds: float = INTERVALS.SETTLE_POLL_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.enumerator = enumerator
        self.admin_runner = admin_runner or AdminCommandRunner()
        self.event_bus = event_bus
        self.refresh_callback = refresh_callback
        self.poll_settle = poll_settle
        self.disable_settle_seconds = disable_settle_seconds
        self.enable_settle_seconds = enable_settle_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.poll_timeout_seconds = poll_timeout_seconds
        self._sleep = sleep
        self._clock = clock

        self._guard = ToggleGuard()
        self._state_lock = threading.Lock()
        self._state = ToggleState.ENABLED
        self._disabled_adapter: Optional[str] = None

    # === State ===

    @property
    def state(self) -> ToggleState:
        with self._state_lock:
            return self._state

    @property
    def disabled_adapter(self) -> Optional[str]:
        """Name of the adapter this controller disabled, if any."""
        with self._state_lock:
            return self._disabled_adapter

    @property
    def busy(self) -> bool:
        return self._guard.busy

    def _set_state(self, state: ToggleState) -> None:
        with self._state_lock:
            previous, self._state = self._state, state
        if previous is not state:
            logger.debug(f"Toggle state {previous.name} -> {state.name}")

    def _publish(self, event_type: EventType, data: dict) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, data, source="toggle")

    # === Requests ===

    def request_disable(self) -> ToggleResult:
        """Disable the active adapter; blocks until settled."""
        if not self._guard.try_begin():
            return self._reject("disable")
        return self._run_guarded(self._disable)

    def request_enable(self) -> ToggleResult:
        """Re-enable the disabled (or fallback) adapter; blocks until settled."""
        if not self._guard.try_begin():
            return self._reject("enable")
        return self._run_guarded(self._enable)

    def request_disable_async(
        self, on_done: Optional[Callable[[ToggleResult], None]] = None
    ) -> Optional[threading.Thread]:
        """Like request_disable() on a worker thread.

        The race check happens on the calling thread, so a rejection is
        immediate and returns None.
        """
        return self._start_async("disable", self._disable, on_done)

    def request_enable_async(
        self, on_done: Optional[Callable[[ToggleResult], None]] = None
    ) -> Optional[threading.Thread]:
        return self._start_async("enable", self._enable, on_done)

    def _start_async(self, action, operation, on_done) -> Optional[threading.Thread]:
        if not self._guard.try_begin():
            result = self._reject(action)
            if on_done is not None:
                on_done(result)
            return None
        worker = threading.Thread(
            target=self._run_guarded, args=(operation, on_done),
            daemon=True, name=f"Toggle-{action}",
        )
        worker.start()
        return worker

    def _run_guarded(self, operation, on_done=None) -> ToggleResult:
        """Run an operation whose guard is already held."""
        before = self.state
        try:
            result = operation()
        except ToggleError as e:
            result = self._fail(before, e.details.get("adapter"), e.message)
        except Exception as e:
            log_exception(logger, "Toggle operation failed", e)
            result = self._fail(before, None, f"Error: {e}")
        finally:
            self._guard.end()

        if result.succeeded:
            self._request_refresh()
        if on_done is not None:
            on_done(result)
        return result

    def _reject(self, action: str) -> ToggleResult:
        state = self.state
        logger.info(f"Rejected {action} request: {state.name} in progress")
        self._publish(EventType.TOGGLE_REJECTED, {
            "action": action,
            "state": state,
            "revert_to": state.settled,
        })
        return ToggleResult(
            accepted=False, succeeded=False, state=state,
            message="Another toggle operation is in progress",
        )

    def _fail(self, revert_to: ToggleState, adapter: Optional[str], message: str) -> ToggleResult:
        self._set_state(revert_to)
        logger.warning(f"Toggle failed: {message}")
        self._publish(EventType.TOGGLE_FAILED, {
            "state": revert_to,
            "revert_to": revert_to,
            "adapter": adapter,
            "message": message,
        })
        return ToggleResult(
            accepted=True, succeeded=False, state=revert_to,
            adapter_name=adapter, message=message,
        )

    # === Transitions (guard held) ===

    def _disable(self) -> ToggleResult:
        current = self.state
        if current is not ToggleState.ENABLED:
            logger.info(f"Disable requested while {current.name}, ignoring")
            self._publish(EventType.TOGGLE_REJECTED, {
                "action": "disable", "state": current, "revert_to": current,
            })
            return ToggleResult(
                accepted=False, succeeded=False, state=current,
                adapter_name=self.disabled_adapter, message="Internet is already disabled",
            )

        self._set_state(ToggleState.DISABLING)
        self._publish(EventType.TOGGLE_STARTED, {"action": "disable"})

        active = select_active_interface(self.enumerator.list_interfaces())
        if active is None:
            raise ToggleError(NO_ACTIVE_ADAPTER)

        name = active.name
        with self._state_lock:
            self._disabled_adapter = name

        logger.info(f"Disabling adapter {name}")
        diagnostic = self.admin_runner.set_admin_state(name, enable=False)
        if diagnostic:
            logger.info(f"Disable {name}: {diagnostic}")

        self._settle(name, want_up=False, delay=self.disable_settle_seconds)
        self._set_state(ToggleState.DISABLED)
        return self._complete("disable", name, diagnostic)

    def _enable(self) -> ToggleResult:
        self._set_state(ToggleState.ENABLING)
        self._publish(EventType.TOGGLE_STARTED, {"action": "enable"})

        name = self.disabled_adapter
        if name is None:
            # Remembered name lost (or never set): pick any physical adapter
            fallback = select_fallback_adapter(self.enumerator.list_interfaces())
            if fallback is None:
                raise ToggleError(NO_ADAPTER_TO_ENABLE)
            name = fallback.name
            logger.info(f"No remembered adapter, re-enabling fallback {name}")

        logger.info(f"Enabling adapter {name}")
        diagnostic = self.admin_runner.set_admin_state(name, enable=True)
        if diagnostic:
            logger.info(f"Enable {name}: {diagnostic}")

        self._settle(name, want_up=True, delay=self.enable_settle_seconds)
        with self._state_lock:
            self._disabled_adapter = None
        self._set_state(ToggleState.ENABLED)
        return self._complete("enable", name, diagnostic)

    def _complete(self, action: str, name: str, diagnostic: str) -> ToggleResult:
        state = self.state
        self._publish(EventType.TOGGLE_COMPLETED, {
            "action": action,
            "state": state,
            "adapter": name,
            "message": diagnostic,
        })
        return ToggleResult(
            accepted=True, succeeded=True, state=state,
            adapter_name=name, message=diagnostic,
        )

    def _settle(self, name: str, want_up: bool, delay: float) -> None:
        """Give the OS time to apply the change before the next sample."""
        if not self.poll_settle:
            self._sleep(delay)
            return

        deadline = self._clock() + self.poll_timeout_seconds
        while self._clock() < deadline:
            iface = self.enumerator.find(name)
            # A disabled adapter may vanish from the list entirely
            is_up = iface is not None and iface.is_up
            if is_up == want_up:
                return
            self._sleep(self.poll_interval_seconds)
        logger.warning(f"{name} did not report {'up' if want_up else 'down'} "
                       f"within {self.poll_timeout_seconds}s")

    def _request_refresh(self) -> None:
        if self.refresh_callback is None:
            return
        try:
            self.refresh_callback()
        except Exception as e:
            log_exception(logger, "Refresh after toggle failed", e)


__all__ = [
    "AdminCommandRunner",
    "NO_ACTIVE_ADAPTER",
    "NO_ADAPTER_TO_ENABLE",
    "ToggleController",
    "ToggleGuard",
    "ToggleResult",
    "ToggleState",
]
