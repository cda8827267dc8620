"""Network telemetry components.

This package holds the leaf collectors a sampling tick is built from.

Modules:
    interfaces: Interface enumeration and IP configuration (psutil)
    selector: Active / fallback interface selection policy
    rates: Throughput from cumulative byte counters
    reachability: ICMP probe bursts, latency and packet loss
    wifi: SSID, signal and BSSID of the wireless link
    public_address: WAN address via an HTTP IP-echo endpoint

Example:
    >>> from monitor import InterfaceEnumerator, select_active_interface
    >>> active = select_active_interface(InterfaceEnumerator().list_interfaces())
    >>> print(active.name if active else "offline")
"""
from .interfaces import InterfaceDescriptor, InterfaceEnumerator, IpConfiguration, MediaType
from .public_address import PublicAddressResolver
from .rates import CounterReading, RateSample, RateTracker
from .reachability import (
    PingReply,
    ReachabilityProbe,
    ReachabilityResult,
    SystemPingTransport,
)
from .selector import is_excluded, select_active_interface, select_fallback_adapter
from .wifi import WifiMetadata, WifiMetadataReader, parse_wifi_output

__all__ = [
    # Interfaces
    "InterfaceDescriptor",
    "InterfaceEnumerator",
    "IpConfiguration",
    "MediaType",
    # Selection
    "is_excluded",
    "select_active_interface",
    "select_fallback_adapter",
    # Rates
    "CounterReading",
    "RateSample",
    "RateTracker",
    # Reachability
    "PingReply",
    "ReachabilityProbe",
    "ReachabilityResult",
    "SystemPingTransport",
    # Wireless
    "WifiMetadata",
    "WifiMetadataReader",
    "parse_wifi_output",
    # Public address
    "PublicAddressResolver",
]
