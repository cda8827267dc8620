"""View components for the Network Tool UI.

Contains:
- formatting: Snapshot to display text (no UI toolkit needed)
- icons: Status icon generation (Pillow)
- menu_builder: rumps menu construction, imported directly since it
  needs rumps
"""
from app.views.formatting import format_rate, menu_bar_title, snapshot_lines, summary_line
from app.views.icons import IconGenerator, status_color

__all__ = [
    "IconGenerator",
    "format_rate",
    "menu_bar_title",
    "snapshot_lines",
    "status_color",
    "summary_line",
]
