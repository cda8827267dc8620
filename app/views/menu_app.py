"""macOS menu bar front end (rumps).

The engine runs on background threads; rumps callbacks and timers run on
the main thread. The two meet only through AppController.latest_snapshot,
the toggle state, and a revert flag set from event handlers.
"""
import subprocess  # nosec B404 - used only to open the data folder in Finder
import threading
from pathlib import Path
from typing import Optional

import rumps

from app.controller import AppController
from app.events import Event, EventType
from app.snapshot import Activity, TelemetrySnapshot
from app.toggle import ToggleResult
from app.views.formatting import menu_bar_title
from app.views.icons import IconGenerator, status_color
from app.views.menu_builder import MenuBuilder, MenuCallbacks
from config import UI, get_logger

logger = get_logger(__name__)


class NetworkToolApp(rumps.App):
    """Menu bar application showing the latest telemetry snapshot."""

    def __init__(self, controller: AppController, data_dir: Path):
        super().__init__(name=UI.APP_NAME, title="--", quit_button=None)
        self._controller = controller
        self._data_dir = data_dir
        self._icons = IconGenerator()
        self._builder = MenuBuilder()
        self._rendered: Optional[TelemetrySnapshot] = None

        # Set from event handler threads, consumed on the main thread
        self._revert_lock = threading.Lock()
        self._revert_to_disabled: Optional[bool] = None

        self.menu = self._builder.build_main_menu(MenuCallbacks(
            refresh=self._on_refresh,
            toggle_internet=self._on_toggle,
            open_data_folder=self._open_data_folder,
            show_about=self._show_about,
            quit_app=self._quit,
        ))

        bus = controller.event_bus
        bus.subscribe(EventType.TOGGLE_REJECTED, self._on_toggle_reverted)
        bus.subscribe(EventType.TOGGLE_FAILED, self._on_toggle_reverted)

        self._ui_timer = rumps.Timer(self._refresh_ui, UI.UI_REFRESH_SECONDS)
        self._ui_timer.start()
        controller.start()

    # === Main-thread UI refresh ===

    def _refresh_ui(self, _timer) -> None:
        toggle = self._controller.toggle
        with self._revert_lock:
            revert, self._revert_to_disabled = self._revert_to_disabled, None
        if revert is not None:
            self._builder.set_toggle_state(revert, busy=toggle.busy)
        elif not toggle.busy:
            self._builder.set_toggle_state(toggle.state.internet_disabled)

        snapshot = self._controller.latest_snapshot
        if snapshot is self._rendered:
            return
        self._rendered = snapshot
        self._builder.update_from_snapshot(snapshot)
        self.title = menu_bar_title(snapshot)

        settings = self._controller.deps.settings.settings
        color = status_color(
            snapshot,
            internet_disabled=toggle.state.internet_disabled,
            good_ms=settings.latency_good,
            ok_ms=settings.latency_ok,
        )
        activity = snapshot.activity if snapshot else Activity.OFFLINE
        self.icon = self._icons.create_status_icon(color, activity)

    # === Callbacks ===

    def _on_toggle(self, sender) -> None:
        want_disabled = not bool(sender.state)
        # Optimistic; a rejection or failure snaps it back
        self._builder.set_toggle_state(want_disabled, busy=True)
        self._controller.set_internet_disabled(want_disabled, on_done=self._on_toggle_done)

    def _on_toggle_done(self, result: ToggleResult) -> None:
        if result.succeeded:
            logger.info(f"Toggle finished: {result.state.name} ({result.adapter_name})")
        elif result.accepted:
            rumps.notification(UI.APP_NAME, "Kill switch", result.message)

    def _on_toggle_reverted(self, event: Event) -> None:
        revert_to = event.data.get("revert_to")
        if revert_to is None:
            return
        with self._revert_lock:
            self._revert_to_disabled = revert_to.internet_disabled

    def _on_refresh(self, _sender) -> None:
        self._controller.sampler.request_refresh()

    def _open_data_folder(self, _sender) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        subprocess.run(['open', str(self._data_dir)], check=False)  # nosec B603 B607

    def _show_about(self, _sender) -> None:
        rumps.alert(
            title=UI.APP_NAME,
            message="Live adapter telemetry with an internet kill switch.",
        )

    def _quit(self, _sender) -> None:
        logger.info("Quit requested")
        self._ui_timer.stop()
        self._controller.stop()
        self._icons.cleanup()
        rumps.quit_application()
