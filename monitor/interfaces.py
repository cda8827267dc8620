"""Network interface enumeration using psutil.

Builds a fresh list of InterfaceDescriptor objects from the OS on every
call, including live byte counters. Nothing is cached between calls: an
adapter that disappears or changes status must show up on the next tick.

Gateway and DNS lookups are per-interface and more expensive, so they are
done separately via get_ip_configuration() for the active interface only.

Example:
    >>> enumerator = InterfaceEnumerator()
    >>> for iface in enumerator.list_interfaces():
    ...     print(iface.name, iface.media_type.value, iface.is_up)
"""

from __future__ import annotations

import ipaddress
import os
import re
import socket
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import psutil

from config import INTERVALS, NETWORK, UNKNOWN, SubprocessError, get_logger, safe_run

logger = get_logger(__name__)

SYS_CLASS_NET = Path("/sys/class/net")
PROC_NET_ROUTE = Path("/proc/net/route")
RESOLV_CONF = Path("/etc/resolv.conf")


class MediaType(Enum):
    """Physical medium of an interface."""
    WIRED = "wired"
    WIRELESS = "wireless"
    OTHER = "other"


@dataclass(frozen=True)
class InterfaceDescriptor:
    """One OS-reported network interface, as seen at enumeration time.

    Attributes:
        name: OS identifier used by admin commands (e.g. "eth0", "Wi-Fi").
        description: Human label. Contains "Loopback" or "Virtual" for
            adapters that must never be chosen as the active interface.
        media_type: Wired, wireless or other.
        is_up: Operational status.
        speed_mbps: Reported link speed, 0 when unknown.
        bytes_recv: Cumulative bytes received.
        bytes_sent: Cumulative bytes sent.
        ipv4_addresses: Unicast IPv4 addresses in OS order.
    """

    name: str
    description: str
    media_type: MediaType
    is_up: bool
    speed_mbps: int = 0
    bytes_recv: int = 0
    bytes_sent: int = 0
    ipv4_addresses: tuple = field(default_factory=tuple)

    @property
    def is_wireless(self) -> bool:
        return self.media_type is MediaType.WIRELESS

    @property
    def status_label(self) -> str:
        return "Up" if self.is_up else "Down"


@dataclass(frozen=True)
class IpConfiguration:
    """Addresses of the active interface; each is UNKNOWN when absent."""

    local_address: str = UNKNOWN
    gateway: str = UNKNOWN
    dns_server: str = UNKNOWN


def _first_ipv4(candidates) -> str:
    """Return the first syntactically valid IPv4 address, or UNKNOWN."""
    for candidate in candidates:
        try:
            return str(ipaddress.IPv4Address(candidate.strip()))
        except (ipaddress.AddressValueError, ValueError, AttributeError):
            continue
    return UNKNOWN


class InterfaceEnumerator:
    """Enumerates interfaces and resolves IP configuration.

    Attributes:
        platform: sys.platform value used to choose the OS-specific
            gateway/DNS strategy. Injectable for tests.
    """

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform
        logger.debug(f"InterfaceEnumerator initialized for {self.platform}")

    # === Enumeration ===

    def list_interfaces(self) -> List[InterfaceDescriptor]:
        """Query the OS for every interface, in enumeration order."""
        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()
        counters = psutil.net_io_counters(pernic=True)
        hardware_ports = self._hardware_ports() if self.platform == "darwin" else {}

        interfaces = []
        for name, if_stats in stats.items():
            ipv4 = tuple(
                addr.address
                for addr in addrs.get(name, [])
                if addr.family == socket.AF_INET
            )
            io = counters.get(name)
            interfaces.append(InterfaceDescriptor(
                name=name,
                description=self._describe(name, ipv4, hardware_ports.get(name)),
                media_type=self._classify_media(name, hardware_ports.get(name)),
                is_up=bool(if_stats.isup),
                speed_mbps=int(if_stats.speed or 0),
                bytes_recv=int(io.bytes_recv) if io else 0,
                bytes_sent=int(io.bytes_sent) if io else 0,
                ipv4_addresses=ipv4,
            ))
        return interfaces

    def find(self, name: str) -> Optional[InterfaceDescriptor]:
        """Return the named interface from a fresh enumeration, if present."""
        for iface in self.list_interfaces():
            if iface.name == name:
                return iface
        return None

    def _is_loopback(self, name: str, ipv4: tuple) -> bool:
        lowered = name.lower()
        if lowered == "lo" or lowered.startswith("lo0") or "loopback" in lowered:
            return True
        return any(addr.startswith("127.") for addr in ipv4)

    def _is_virtual(self, name: str) -> bool:
        lowered = name.lower()
        if lowered.startswith(NETWORK.VIRTUAL_NAME_PREFIXES):
            return True
        if self.platform.startswith("linux"):
            # Software devices live under /sys/devices/virtual/net
            try:
                return "/virtual/" in os.path.realpath(SYS_CLASS_NET / name)
            except OSError:
                return False
        return False

    def _describe(self, name: str, ipv4: tuple, hardware_port: Optional[str]) -> str:
        if self._is_loopback(name, ipv4):
            return f"Loopback adapter ({name})"
        if self._is_virtual(name):
            return f"Virtual adapter ({name})"
        if hardware_port:
            return f"{hardware_port} ({name})"
        return name

    def _classify_media(self, name: str, hardware_port: Optional[str]) -> MediaType:
        if self.platform.startswith("linux") and (SYS_CLASS_NET / name / "wireless").exists():
            return MediaType.WIRELESS
        label = (hardware_port or name).lower()
        if label.startswith(NETWORK.WIRELESS_NAME_HINTS) or "wi-fi" in label or "wireless" in label:
            return MediaType.WIRELESS
        if label.startswith(NETWORK.WIRED_NAME_HINTS) or "ethernet" in label:
            return MediaType.WIRED
        return MediaType.OTHER

    def _hardware_ports(self) -> Dict[str, str]:
        """Map macOS device names to hardware port labels ("Wi-Fi", ...)."""
        ports: Dict[str, str] = {}
        try:
            result = safe_run(['networksetup', '-listallhardwareports'])
        except SubprocessError as e:
            logger.debug(f"Could not list hardware ports: {e}")
            return ports

        current_port = ""
        for line in result.stdout.splitlines():
            if line.startswith('Hardware Port:'):
                current_port = line.replace('Hardware Port:', '').strip()
            elif line.startswith('Device:') and current_port:
                ports[line.replace('Device:', '').strip()] = current_port
        return ports

    # === IP configuration ===

    def get_ip_configuration(self, interface: InterfaceDescriptor) -> IpConfiguration:
        """Resolve local, gateway and DNS addresses (first IPv4 of each).

        Never raises; any lookup failure leaves that field UNKNOWN.
        """
        local = _first_ipv4(interface.ipv4_addresses)
        gateway = UNKNOWN
        dns = UNKNOWN

        try:
            if self.platform == "win32":
                gateway, dns = self._windows_gateway_and_dns(interface.name)
            else:
                if self.platform.startswith("linux"):
                    gateway = self._linux_gateway(interface.name)
                elif self.platform == "darwin":
                    gateway = self._darwin_gateway(interface.name)
                dns = self._resolv_conf_dns()
        except Exception as e:
            logger.debug(f"IP configuration lookup failed for {interface.name}: {e}")

        return IpConfiguration(local_address=local, gateway=gateway, dns_server=dns)

    def _linux_gateway(self, name: str) -> str:
        """Read the default route for this interface from /proc/net/route."""
        try:
            lines = PROC_NET_ROUTE.read_text().splitlines()[1:]
        except OSError:
            return UNKNOWN

        for line in lines:
            fields = line.split()
            if len(fields) < 4 or fields[0] != name:
                continue
            destination, gateway_hex, flags = fields[1], fields[2], int(fields[3], 16)
            # RTF_GATEWAY (0x2) on the default route
            if destination == "00000000" and flags & 0x2:
                packed = int(gateway_hex, 16).to_bytes(4, "little")
                return socket.inet_ntoa(packed)
        return UNKNOWN

    def _darwin_gateway(self, name: str) -> str:
        result = safe_run(['route', '-n', 'get', 'default'])
        if result.returncode != 0:
            return UNKNOWN
        iface_match = re.search(r'interface:\s*(\S+)', result.stdout)
        if iface_match and iface_match.group(1) != name:
            return UNKNOWN
        gw_match = re.search(r'gateway:\s*(\S+)', result.stdout)
        return _first_ipv4([gw_match.group(1)]) if gw_match else UNKNOWN

    def _resolv_conf_dns(self) -> str:
        try:
            text = RESOLV_CONF.read_text()
        except OSError:
            return UNKNOWN
        servers = re.findall(r'^\s*nameserver\s+(\S+)', text, re.MULTILINE)
        return _first_ipv4(servers)

    def _windows_gateway_and_dns(self, name: str):
        result = safe_run(
            ['netsh', 'interface', 'ip', 'show', 'config', f'name={name}'],
            timeout=INTERVALS.SUBPROCESS_TIMEOUT_SECONDS,
        )
        if result.returncode != 0:
            return UNKNOWN, UNKNOWN
        return parse_netsh_ip_config(result.stdout)


def parse_netsh_ip_config(output: str):
    """Extract (gateway, dns) from `netsh interface ip show config` output.

    DNS servers may be listed as "Statically Configured DNS Servers" or
    "DNS servers configured through DHCP"; the first IPv4 entry wins.
    """
    gateway_match = re.search(r'Default Gateway:\s*([\d.]+)', output)
    gateway = _first_ipv4([gateway_match.group(1)]) if gateway_match else UNKNOWN

    dns_match = re.search(r'DNS Servers[^:]*:\s*([\d.]+)', output, re.IGNORECASE)
    dns = _first_ipv4([dns_match.group(1)]) if dns_match else UNKNOWN
    return gateway, dns


__all__ = [
    "InterfaceDescriptor",
    "InterfaceEnumerator",
    "IpConfiguration",
    "MediaType",
    "parse_netsh_ip_config",
]
