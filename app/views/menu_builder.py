"""Menu building for the Network Tool menu bar app.

Keeps rumps menu construction and updates out of the app class.

Usage:
    from app.views.menu_builder import MenuBuilder, MenuCallbacks

    builder = MenuBuilder()
    app.menu = builder.build_main_menu(MenuCallbacks(refresh=on_refresh))
    builder.update_from_snapshot(snapshot)
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import rumps

from app.snapshot import TelemetrySnapshot
from app.views.formatting import snapshot_lines
from config import get_logger

logger = get_logger(__name__)

TOGGLE_TITLE = "Disable Internet"
TOGGLE_BUSY_SUFFIX = " (working...)"

# Menu sections, in display order
_SECTIONS = (
    ("adapter", "type", "state", "internet"),
    ("local_ip", "gateway", "dns", "public_ip"),
    ("ssid", "signal", "mac"),
    ("download", "upload", "ping", "loss", "status"),
)


@dataclass
class MenuCallbacks:
    """Callbacks for clickable menu items (rumps passes the sender)."""
    refresh: Optional[Callable] = None
    toggle_internet: Optional[Callable] = None
    open_data_folder: Optional[Callable] = None
    show_about: Optional[Callable] = None
    quit_app: Optional[Callable] = None


class MenuBuilder:
    """Builds the menu and keeps references to items that change."""

    def __init__(self):
        self._menu_items: Dict[str, rumps.MenuItem] = {}

    def build_main_menu(self, callbacks: MenuCallbacks) -> List:
        """Build the menu structure for rumps.App.menu."""
        placeholder = snapshot_lines(None)
        menu: List = []
        for section in _SECTIONS:
            for key in section:
                self._menu_items[key] = rumps.MenuItem(placeholder[key])
                menu.append(self._menu_items[key])
            menu.append(rumps.separator)

        self._menu_items['toggle'] = rumps.MenuItem(TOGGLE_TITLE, callback=callbacks.toggle_internet)
        self._menu_items['refresh'] = rumps.MenuItem("Refresh", callback=callbacks.refresh)
        menu.extend([
            self._menu_items['toggle'],
            self._menu_items['refresh'],
            rumps.separator,
            rumps.MenuItem("Open Data Folder", callback=callbacks.open_data_folder),
            rumps.MenuItem("About", callback=callbacks.show_about),
            rumps.MenuItem("Quit", callback=callbacks.quit_app),
        ])
        return menu

    def get_item(self, key: str) -> Optional[rumps.MenuItem]:
        return self._menu_items.get(key)

    def update_from_snapshot(self, snapshot: Optional[TelemetrySnapshot]) -> None:
        """Rewrite every telemetry line from a snapshot."""
        for key, text in snapshot_lines(snapshot).items():
            item = self._menu_items.get(key)
            if item is not None:
                item.title = text

    def set_toggle_state(self, internet_disabled: bool, busy: bool = False) -> None:
        """Checkmark the kill switch item when internet is disabled."""
        item = self._menu_items.get('toggle')
        if item is None:
            return
        item.state = 1 if internet_disabled else 0
        item.title = TOGGLE_TITLE + (TOGGLE_BUSY_SUFFIX if busy else "")
