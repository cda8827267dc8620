"""Active interface selection policy.

The "active" interface is the subject of all telemetry for one tick. It is
recomputed on every tick from a fresh enumeration, never remembered, since
adapters come and go (notably right after the kill switch toggles one).
"""
from typing import Iterable, Optional

from config import NETWORK
from monitor.interfaces import InterfaceDescriptor


def is_excluded(interface: InterfaceDescriptor) -> bool:
    """True for virtual and loopback adapters (case-insensitive match)."""
    description = interface.description.lower()
    return any(keyword in description for keyword in NETWORK.EXCLUDED_DESCRIPTION_KEYWORDS)


def select_active_interface(
    interfaces: Iterable[InterfaceDescriptor],
) -> Optional[InterfaceDescriptor]:
    """Pick the fastest up, physical interface.

    Ties on link speed are broken by enumeration order (first wins).

    Returns:
        The selected interface, or None when nothing qualifies.
    """
    best: Optional[InterfaceDescriptor] = None
    for iface in interfaces:
        if not iface.is_up or is_excluded(iface):
            continue
        # Strict comparison keeps the earlier interface on a tie
        if best is None or iface.speed_mbps > best.speed_mbps:
            best = iface
    return best


def select_fallback_adapter(
    interfaces: Iterable[InterfaceDescriptor],
) -> Optional[InterfaceDescriptor]:
    """First non-virtual, non-loopback adapter, whatever its status.

    Used to re-enable an adapter when the name of the one that was
    disabled has been lost.
    """
    for iface in interfaces:
        if not is_excluded(iface):
            return iface
    return None
