"""Immutable result of one sampling tick.

A TelemetrySnapshot is built once per tick and never mutated; the UI only
ever swaps its reference to the latest one. String fields that could not
be determined hold UNKNOWN; front ends decide how to render that.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from config import THRESHOLDS, UNKNOWN
from monitor.reachability import ReachabilityResult
from monitor.wifi import WifiMetadata


class Activity(Enum):
    """Coarse traffic direction over the last interval."""
    DOWNLOADING = "Downloading"
    UPLOADING = "Uploading"
    IDLE = "Idle"
    OFFLINE = "Offline"


def classify_activity(
    recv_rate: Optional[float],
    sent_rate: Optional[float],
    threshold: float = THRESHOLDS.ACTIVITY_THRESHOLD_BYTES,
) -> Activity:
    """Classify traffic from rates in bytes/sec.

    The busier direction wins, and only once it exceeds the threshold.
    Indeterminate (None) rates count as zero; equal rates are Idle.
    """
    recv = recv_rate or 0.0
    sent = sent_rate or 0.0
    if recv > threshold and recv > sent:
        return Activity.DOWNLOADING
    if sent > threshold and sent > recv:
        return Activity.UPLOADING
    return Activity.IDLE


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Everything a front end shows for one tick.

    Attributes:
        timestamp: Wall-clock time the tick finished (time.time()).
        has_interface: False when no active interface was found.
        interface_name: OS name of the active interface.
        interface_description: Human label of the active interface.
        media_type: "wired", "wireless", "other" or UNKNOWN.
        interface_status: "Up", "Down" or UNKNOWN.
        local_address / gateway / dns_server / public_address: IPv4
            strings or UNKNOWN.
        wifi: SSID/signal/BSSID; all unknown for non-wireless links.
        recv_rate / sent_rate: Bytes/sec, None when indeterminate.
        reachability: Probe outcome for this tick.
        activity: Traffic classification.
    """

    timestamp: float
    has_interface: bool
    interface_name: str = UNKNOWN
    interface_description: str = UNKNOWN
    media_type: str = UNKNOWN
    interface_status: str = UNKNOWN
    local_address: str = UNKNOWN
    gateway: str = UNKNOWN
    dns_server: str = UNKNOWN
    public_address: str = UNKNOWN
    wifi: WifiMetadata = field(default_factory=WifiMetadata)
    recv_rate: Optional[float] = 0.0
    sent_rate: Optional[float] = 0.0
    reachability: ReachabilityResult = field(default_factory=ReachabilityResult.offline)
    activity: Activity = Activity.OFFLINE

    @property
    def internet_online(self) -> bool:
        return self.has_interface and self.reachability.reachable

    @property
    def is_wireless(self) -> bool:
        return self.media_type == "wireless"

    @classmethod
    def offline(cls, timestamp: Optional[float] = None) -> "TelemetrySnapshot":
        """Snapshot for a tick that found no active interface."""
        return cls(
            timestamp=time.time() if timestamp is None else timestamp,
            has_interface=False,
        )

    def to_dict(self) -> dict:
        """Flat, JSON-friendly view (headless output, logs)."""
        return {
            "timestamp": self.timestamp,
            "interface": self.interface_name,
            "media_type": self.media_type,
            "status": self.interface_status,
            "internet": "online" if self.internet_online else "offline",
            "local_ip": self.local_address,
            "gateway": self.gateway,
            "dns": self.dns_server,
            "public_ip": self.public_address,
            "ssid": self.wifi.ssid,
            "signal": self.wifi.signal_percent,
            "bssid": self.wifi.bssid,
            "recv_rate": self.recv_rate,
            "sent_rate": self.sent_rate,
            "latency_ms": self.reachability.avg_latency_ms,
            "loss_percent": self.reachability.loss_percent,
            "activity": self.activity.value,
        }


__all__ = ["Activity", "TelemetrySnapshot", "classify_activity"]
