"""Persistent user settings for Network Tool."""
import json
import threading
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config import INTERVALS, NETWORK, STORAGE, THRESHOLDS, ConfigurationError, get_logger

logger = get_logger(__name__)


def _is_hostname(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip()) and " " not in value.strip()


def _is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def _int_between(low: int, high: int) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high
    return check


def _positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


_VALIDATORS: Dict[str, Callable[[Any], bool]] = {
    "probe_target": _is_hostname,
    "sample_count": _int_between(1, 100),
    "probe_timeout_ms": _int_between(50, 10_000),
    "probe_delay_ms": _int_between(0, 5_000),
    "public_ip_url": _is_http_url,
    "poll_settle": lambda value: isinstance(value, bool),
    "sample_interval": _positive_number,
    "latency_good": _int_between(1, 10_000),
    "latency_ok": _int_between(1, 10_000),
}


@dataclass
class AppSettings:
    """Application settings."""
    probe_target: str = NETWORK.DEFAULT_PROBE_HOST
    sample_count: int = THRESHOLDS.PROBE_SAMPLE_COUNT
    probe_timeout_ms: int = INTERVALS.PROBE_TIMEOUT_MS
    probe_delay_ms: int = INTERVALS.PROBE_DELAY_MS
    public_ip_url: str = NETWORK.PUBLIC_IP_URL
    poll_settle: bool = False         # poll adapter status instead of fixed delays
    sample_interval: float = INTERVALS.SAMPLE_SECONDS

    # Latency colouring of the status icon
    latency_good: int = THRESHOLDS.LATENCY_GOOD_MS
    latency_ok: int = THRESHOLDS.LATENCY_OK_MS

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'AppSettings':
        """Build settings from stored JSON.

        Unknown keys are ignored; a value that fails validation keeps its
        default and logs a warning.
        """
        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if _VALIDATORS[f.name](value):
                values[f.name] = value
            else:
                logger.warning(f"Ignoring invalid setting {f.name}={value!r}")
        return cls(**values)


class SettingsManager:
    """Thread-safe access to AppSettings stored as JSON."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.settings_file = data_dir / STORAGE.SETTINGS_FILE
        self._lock = threading.Lock()
        self._settings: AppSettings = AppSettings()
        self._load()

    def _load(self) -> None:
        if not self.settings_file.exists():
            self._settings = AppSettings()
            return
        try:
            with open(self.settings_file, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file does not contain an object")
            self._settings = AppSettings.from_dict(data)
        except (json.JSONDecodeError, ValueError, OSError) as e:
            logger.warning(f"Could not load settings, using defaults: {e}")
            self._settings = AppSettings()

    def _save(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w') as f:
                json.dump(self._settings.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    @property
    def settings(self) -> AppSettings:
        """A copy of the current settings."""
        with self._lock:
            return AppSettings(**self._settings.to_dict())

    def get(self, key: str) -> Any:
        with self._lock:
            if key not in _VALIDATORS:
                raise ConfigurationError(f"Unknown setting: {key}")
            return getattr(self._settings, key)

    def set(self, key: str, value: Any) -> None:
        """Validate, store and persist one setting.

        Raises:
            ConfigurationError: Unknown key or invalid value.
        """
        validator = _VALIDATORS.get(key)
        if validator is None:
            raise ConfigurationError(f"Unknown setting: {key}")
        if not validator(value):
            raise ConfigurationError(f"Invalid value for {key}", {"value": value})
        with self._lock:
            setattr(self._settings, key, value)
            self._save()
        logger.info(f"Setting {key} changed to {value!r}")

    def update(self, **values: Any) -> None:
        """Set several settings at once; nothing is stored if any is invalid."""
        for key, value in values.items():
            validator = _VALIDATORS.get(key)
            if validator is None:
                raise ConfigurationError(f"Unknown setting: {key}")
            if not validator(value):
                raise ConfigurationError(f"Invalid value for {key}", {"value": value})
        with self._lock:
            for key, value in values.items():
                setattr(self._settings, key, value)
            self._save()

    def reset(self) -> None:
        with self._lock:
            self._settings = AppSettings()
            self._save()


def get_settings_manager(data_dir: Optional[Path] = None) -> SettingsManager:
    """Create the settings manager for the given (or default) data directory."""
    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    return SettingsManager(data_dir)
