"""Centralized constants and configuration for Network Tool.

This module contains all magic numbers, strings, and configuration values
used by the telemetry engine and the kill switch. Centralizing them
makes the code easier to maintain and configure.

Usage:
    from config.constants import INTERVALS, THRESHOLDS, NETWORK

    # Access values
    sample_period = INTERVALS.SAMPLE_SECONDS
    threshold = THRESHOLDS.ACTIVITY_THRESHOLD_BYTES
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Intervals:
    """Time intervals for various operations (in seconds).

    All interval values are in seconds unless otherwise specified.
    """
    # Main sampling loop
    SAMPLE_SECONDS: float = 1.0

    # Reachability probe burst
    PROBE_TIMEOUT_MS: int = 600
    PROBE_DELAY_MS: int = 30

    # Public address lookup
    PUBLIC_IP_TIMEOUT_SECONDS: float = 3.0

    # Kill switch settle delays (enabling takes longer to show up in OS state)
    DISABLE_SETTLE_SECONDS: float = 0.5
    ENABLE_SETTLE_SECONDS: float = 1.5

    # Settle polling (only when polling mode is enabled)
    SETTLE_POLL_SECONDS: float = 0.25
    SETTLE_POLL_TIMEOUT_SECONDS: float = 10.0

    # Subprocess timeouts
    SUBPROCESS_TIMEOUT_SECONDS: float = 5.0
    ADMIN_COMMAND_TIMEOUT_SECONDS: float = 15.0
    PING_OVERHEAD_SECONDS: float = 0.25


@dataclass(frozen=True)
class Thresholds:
    """Threshold values for various measurements."""
    # Activity classification (bytes/sec), 1 MB/s
    ACTIVITY_THRESHOLD_BYTES: int = 1024 * 1024

    # Rate computation never divides by less than this many seconds
    MIN_ELAPSED_SECONDS: float = 0.001

    # Reachability burst: 20 samples = 5% loss resolution
    PROBE_SAMPLE_COUNT: int = 20

    # Cosmetic loss jitter, in percentage points
    LOSS_JITTER_POINTS: int = 2

    # Latency colouring (milliseconds)
    LATENCY_GOOD_MS: int = 50
    LATENCY_OK_MS: int = 100


@dataclass(frozen=True)
class StorageConfig:
    """Storage and file-related configuration."""
    # Directory and file names
    DATA_DIR_NAME: str = ".network-tool"
    SETTINGS_FILE: str = "settings.json"
    LOG_FILE: str = "network_tool.log"

    # Log rotation
    LOG_MAX_BYTES: int = 5_000_000  # 5MB
    LOG_BACKUP_COUNT: int = 3

    # Temp directories
    ICON_TEMP_DIR: str = "nettool-icons"


@dataclass(frozen=True)
class Colors:
    """Color definitions for UI elements.

    Colors are defined as RGBA tuples (0-255) for PIL.
    """
    GREEN_RGBA: Tuple[int, int, int, int] = (52, 199, 89, 255)
    YELLOW_RGBA: Tuple[int, int, int, int] = (255, 204, 0, 255)
    RED_RGBA: Tuple[int, int, int, int] = (255, 59, 48, 255)
    GRAY_RGBA: Tuple[int, int, int, int] = (142, 142, 147, 255)


@dataclass(frozen=True)
class NetworkConfig:
    """Network-related configuration."""
    # Reachability target
    DEFAULT_PROBE_HOST: str = "8.8.8.8"

    # Public address echo service
    PUBLIC_IP_URL: str = "https://api.ipify.org"
    USER_AGENT: str = "NetworkTool/1.0"

    # Interfaces whose description contains any of these are never "active"
    EXCLUDED_DESCRIPTION_KEYWORDS: Tuple[str, ...] = ("virtual", "loopback")

    # Name prefixes used to classify interfaces when the OS gives no hint
    WIRELESS_NAME_HINTS: Tuple[str, ...] = ("wl", "wi-fi", "wifi", "wlan", "wireless", "airport")
    WIRED_NAME_HINTS: Tuple[str, ...] = ("eth", "en", "ethernet", "lan")
    VIRTUAL_NAME_PREFIXES: Tuple[str, ...] = (
        "docker", "veth", "br-", "virbr", "vmnet", "vboxnet", "vethernet",
        "utun", "tun", "tap", "bridge", "awdl", "llw", "anpi", "gif", "stf", "zt",
    )

    # Wi-Fi device queried on macOS when the caller names none
    DARWIN_WIFI_DEVICE: str = "en0"

    # macOS wireless status tool (removed in recent macOS releases)
    AIRPORT_PATH: str = (
        "/System/Library/PrivateFrameworks/Apple80211.framework/"
        "Versions/Current/Resources/airport"
    )


@dataclass(frozen=True)
class UIConfig:
    """UI-related configuration."""
    STATUS_ICON_SIZE: int = 18
    APP_NAME: str = "Network Tool"

    # Main-thread poll of the latest snapshot
    UI_REFRESH_SECONDS: float = 0.5


# Global instances - import these
INTERVALS = Intervals()
THRESHOLDS = Thresholds()
STORAGE = StorageConfig()
COLORS = Colors()
NETWORK = NetworkConfig()
UI = UIConfig()

# Single "not available" sentinel for string telemetry fields
UNKNOWN = "unknown"


# Allowed commands for subprocess safety
ALLOWED_SUBPROCESS_COMMANDS = frozenset({
    'ping',
    'netsh',
    'nmcli',
    'ip',
    'ifconfig',
    'route',
    'networksetup',
    'ipconfig',
})
