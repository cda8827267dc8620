"""Text rendering of telemetry snapshots.

Turns a TelemetrySnapshot into the labelled lines every front end shows.
This is the only place UNKNOWN and "no data" values become "N/A".

Example:
    >>> lines = snapshot_lines(snapshot)
    >>> lines["download"]
    '⬇ 1.25 MB/s'
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Optional

from app.snapshot import Activity, TelemetrySnapshot
from config import UNKNOWN

NOT_AVAILABLE = "N/A"
BYTES_PER_MB = 1024 * 1024

_MEDIA_LABELS = {
    "wired": "Ethernet",
    "wireless": "Wi-Fi",
    "other": "Other",
}

_ACTIVITY_LABELS = {
    Activity.DOWNLOADING: "Downloading...",
    Activity.UPLOADING: "Uploading...",
    Activity.IDLE: "Idle",
    Activity.OFFLINE: "Offline",
}


def display(value: Optional[str]) -> str:
    """Render a possibly-unknown string field."""
    if value is None or value == UNKNOWN or not str(value).strip():
        return NOT_AVAILABLE
    return str(value)


def format_rate(bytes_per_second: Optional[float]) -> str:
    """Bytes/sec as "x.xx MB/s" (1 MB = 1024 * 1024 bytes)."""
    if bytes_per_second is None:
        return NOT_AVAILABLE
    return f"{bytes_per_second / BYTES_PER_MB:.2f} MB/s"


def format_latency(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return NOT_AVAILABLE
    return f"{round(latency_ms)} ms"


def format_signal(signal_percent: Optional[int]) -> str:
    if signal_percent is None:
        return NOT_AVAILABLE
    return f"{signal_percent}%"


def snapshot_lines(snapshot: Optional[TelemetrySnapshot]) -> Dict[str, str]:
    """Display lines keyed by menu slot, in display order.

    A missing snapshot (nothing sampled yet) renders like the offline one.
    """
    if snapshot is None or not snapshot.has_interface:
        return _offline_lines()

    reach = snapshot.reachability
    lines = OrderedDict()
    lines["adapter"] = f"Adapter: {display(snapshot.interface_name)}"
    lines["type"] = f"Type: {_MEDIA_LABELS.get(snapshot.media_type, NOT_AVAILABLE)}"
    lines["state"] = f"State: {display(snapshot.interface_status)}"
    lines["internet"] = f"Internet: {'Online' if snapshot.internet_online else 'Offline'}"
    lines["local_ip"] = f"Local IP: {display(snapshot.local_address)}"
    lines["gateway"] = f"Gateway: {display(snapshot.gateway)}"
    lines["dns"] = f"DNS: {display(snapshot.dns_server)}"
    lines["public_ip"] = f"Public IP: {display(snapshot.public_address)}"
    lines["ssid"] = f"SSID: {display(snapshot.wifi.ssid)}"
    lines["signal"] = f"Signal: {format_signal(snapshot.wifi.signal_percent)}"
    lines["mac"] = f"MAC: {display(snapshot.wifi.bssid)}"
    lines["download"] = f"⬇ {format_rate(snapshot.recv_rate)}"
    lines["upload"] = f"⬆ {format_rate(snapshot.sent_rate)}"
    lines["ping"] = f"Ping: {format_latency(reach.avg_latency_ms)}"
    lines["loss"] = f"Packet Loss: {reach.loss_percent}%"
    lines["status"] = f"Status: {_ACTIVITY_LABELS[snapshot.activity]}"
    return lines


def _offline_lines() -> Dict[str, str]:
    lines = OrderedDict()
    lines["adapter"] = "Adapter: None"
    lines["type"] = f"Type: {NOT_AVAILABLE}"
    lines["state"] = "State: Offline"
    lines["internet"] = "Internet: Offline"
    for key, label in (("local_ip", "Local IP"), ("gateway", "Gateway"), ("dns", "DNS"),
                       ("public_ip", "Public IP"), ("ssid", "SSID"), ("signal", "Signal"),
                       ("mac", "MAC")):
        lines[key] = f"{label}: {NOT_AVAILABLE}"
    lines["download"] = f"⬇ {format_rate(0.0)}"
    lines["upload"] = f"⬆ {format_rate(0.0)}"
    lines["ping"] = f"Ping: {NOT_AVAILABLE}"
    lines["loss"] = f"Packet Loss: {NOT_AVAILABLE}"
    lines["status"] = "Status: Offline"
    return lines


def summary_line(snapshot: Optional[TelemetrySnapshot]) -> str:
    """One-line form used by the headless console mode."""
    lines = snapshot_lines(snapshot)
    return " | ".join(lines[key] for key in (
        "adapter", "internet", "download", "upload", "ping", "loss", "status"
    ))


def menu_bar_title(snapshot: Optional[TelemetrySnapshot]) -> str:
    """Compact title next to the status icon."""
    if snapshot is None or not snapshot.internet_online:
        return "Offline"
    latency = snapshot.reachability.avg_latency_ms
    return f"{round(latency)}ms" if latency is not None else NOT_AVAILABLE


__all__ = [
    "NOT_AVAILABLE",
    "display",
    "format_latency",
    "format_rate",
    "format_signal",
    "menu_bar_title",
    "snapshot_lines",
    "summary_line",
]
