"""Status icon generation for Network Tool.

The menu bar shows a coloured dot: green/yellow/red by latency while
online, red when offline, gray when the kill switch has disabled the
adapter. A white arrow inside the dot marks download or upload activity.
Icons are PNG files in a temp directory, cached per variant.

Usage:
    from app.views.icons import IconGenerator, status_color

    icons = IconGenerator()
    path = icons.create_status_icon(status_color(snapshot), snapshot.activity)
"""
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw

from app.snapshot import Activity, TelemetrySnapshot
from config import COLORS, STORAGE, THRESHOLDS, UI, get_logger

logger = get_logger(__name__)

_COLOR_MAP: Dict[str, Tuple[int, int, int, int]] = {
    'green': COLORS.GREEN_RGBA,
    'yellow': COLORS.YELLOW_RGBA,
    'red': COLORS.RED_RGBA,
    'gray': COLORS.GRAY_RGBA,
}
_ARROW_RGBA = (255, 255, 255, 255)


def status_color(
    snapshot: Optional[TelemetrySnapshot],
    internet_disabled: bool = False,
    good_ms: int = THRESHOLDS.LATENCY_GOOD_MS,
    ok_ms: int = THRESHOLDS.LATENCY_OK_MS,
) -> str:
    """Colour name for the status dot."""
    if internet_disabled:
        return 'gray'
    if snapshot is None or not snapshot.internet_online:
        return 'red'
    latency = snapshot.reachability.avg_latency_ms
    if latency is None:
        return 'gray'
    if latency < good_ms:
        return 'green'
    if latency < ok_ms:
        return 'yellow'
    return 'red'


class IconGenerator:
    """Creates and caches status icons."""

    def __init__(self, temp_dir: Optional[Path] = None):
        self._temp_dir = temp_dir or Path(tempfile.gettempdir()) / STORAGE.ICON_TEMP_DIR
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        self._cache: Dict[str, str] = {}
        logger.debug(f"IconGenerator initialized, temp dir: {self._temp_dir}")

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    def create_status_icon(
        self, color: str, activity: Activity = Activity.IDLE, size: Optional[int] = None
    ) -> str:
        """Render the status dot and return the PNG path.

        Args:
            color: 'green', 'yellow', 'red' or 'gray'; anything
                else draws gray.
            activity: DOWNLOADING / UPLOADING add an arrow.
            size: Icon edge in pixels (default from UI config).
        """
        size = size or UI.STATUS_ICON_SIZE
        arrow = {Activity.DOWNLOADING: 'down', Activity.UPLOADING: 'up'}.get(activity, 'none')
        cache_key = f"status_{color}_{arrow}_{size}"

        cached = self._cache.get(cache_key)
        if cached and Path(cached).exists():
            return cached

        img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)

        padding = 2
        draw.ellipse(
            [padding, padding, size - padding, size - padding],
            fill=_COLOR_MAP.get(color, COLORS.GRAY_RGBA),
        )
        if arrow != 'none':
            draw.polygon(self._arrow_points(size, arrow == 'down'), fill=_ARROW_RGBA)

        icon_path = self._temp_dir / f'{cache_key}.png'
        img.save(icon_path, 'PNG')

        self._cache[cache_key] = str(icon_path)
        return str(icon_path)

    @staticmethod
    def _arrow_points(size: int, pointing_down: bool):
        center = size / 2
        half = size / 5
        if pointing_down:
            return [(center - half, center - half / 2), (center + half, center - half / 2),
                    (center, center + half)]
        return [(center - half, center + half / 2), (center + half, center + half / 2),
                (center, center - half)]

    def cleanup(self) -> None:
        """Remove generated icons."""
        try:
            if self._temp_dir.exists():
                shutil.rmtree(self._temp_dir)
                self._temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not clean up {self._temp_dir}: {e}")
        self._cache.clear()
