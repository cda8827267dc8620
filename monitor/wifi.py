"""Wireless association metadata (SSID, signal, BSSID).

The reader runs the platform's wireless status command and pulls labelled
lines out of its text output. Parsing free text is fragile, so the
contract is best effort: each field falls back to unknown on its own, and
a missing SSID never blanks the signal or BSSID.

Supported output shapes:
    Windows  `netsh wlan show interfaces`  ("SSID : Home", "Signal : 80%")
    Linux    `nmcli -m multiline ... device wifi list` (one block per AP,
             the in-use block is marked "IN-USE: *")
    macOS    `airport -I` ("SSID: Home", "BSSID: ..."; no percentage),
             `ipconfig getsummary en0` ("SSID : Home", "BSSID : ...") and
             `networksetup -getairportnetwork en0` ("Current Wi-Fi Network: Home")
"""
import re
import sys
from dataclasses import dataclass, replace
from typing import List, Optional

from config import INTERVALS, NETWORK, UNKNOWN, get_logger, run_with_fallback

logger = get_logger(__name__)

_SSID_PATTERN = re.compile(r'^\s*SSID\s*:[ \t]*(.*\S)?[ \t]*$', re.MULTILINE | re.IGNORECASE)
_SIGNAL_PATTERN = re.compile(r'^\s*Signal\s*:\s*(\d{1,3})\s*%?', re.MULTILINE | re.IGNORECASE)
_BSSID_PATTERN = re.compile(r'^\s*(?:AP\s+)?BSSID\s*:\s*([0-9A-Fa-f]{2}(?:[:-][0-9A-Fa-f]{2}){5})', re.MULTILINE | re.IGNORECASE)
_IN_USE_PATTERN = re.compile(r'^[ \t]*IN-USE[ \t]*:[ \t]*(\S*)', re.MULTILINE | re.IGNORECASE)
_CURRENT_NETWORK_PATTERN = re.compile(r'^\s*Current Wi-Fi Network\s*:\s*(.*\S)', re.MULTILINE | re.IGNORECASE)
_REDACTED = "<redacted>"


@dataclass(frozen=True)
class WifiMetadata:
    """Association details of the wireless link.

    Attributes:
        ssid: Network name, or UNKNOWN.
        signal_percent: 0-100, or None when unknown.
        bssid: Access point MAC, or UNKNOWN.
    """

    ssid: str = UNKNOWN
    signal_percent: Optional[int] = None
    bssid: str = UNKNOWN

    @classmethod
    def unknown(cls) -> "WifiMetadata":
        return cls()


def _active_block(output: str) -> str:
    """For nmcli-style multi-record output, keep the record marked in use."""
    markers = list(_IN_USE_PATTERN.finditer(output))
    if not markers:
        return output

    for index, marker in enumerate(markers):
        if marker.group(1) == "*":
            end = markers[index + 1].start() if index + 1 < len(markers) else len(output)
            return output[marker.start():end]
    # Nothing associated: no record describes our link
    return ""


def parse_wifi_output(output: str) -> WifiMetadata:
    """Parse wireless status text into WifiMetadata, field by field."""
    text = _active_block(output or "")

    ssid = UNKNOWN
    ssid_match = _SSID_PATTERN.search(text)
    if ssid_match and ssid_match.group(1):
        ssid = ssid_match.group(1).strip()
    else:
        current = _CURRENT_NETWORK_PATTERN.search(text)
        if current:
            ssid = current.group(1).strip()
    if ssid.lower() == _REDACTED:
        # macOS hides the name from processes without location access
        ssid = UNKNOWN

    signal: Optional[int] = None
    signal_match = _SIGNAL_PATTERN.search(text)
    if signal_match:
        value = int(signal_match.group(1))
        if 0 <= value <= 100:
            signal = value

    bssid = UNKNOWN
    bssid_match = _BSSID_PATTERN.search(text)
    if bssid_match:
        bssid = bssid_match.group(1).upper().replace("-", ":")

    return WifiMetadata(ssid=ssid, signal_percent=signal, bssid=bssid)


def _fill_missing(metadata: WifiMetadata, other: WifiMetadata) -> WifiMetadata:
    """Take signal and BSSID from `other` where `metadata` has none."""
    return replace(
        metadata,
        signal_percent=metadata.signal_percent if metadata.signal_percent is not None
        else other.signal_percent,
        bssid=metadata.bssid if metadata.bssid != UNKNOWN else other.bssid,
    )


class WifiMetadataReader:
    """Reads wireless metadata through the platform's status command."""

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    def commands(self, interface_name: Optional[str] = None) -> List[List[str]]:
        """Candidate commands for this platform, tried in order."""
        if self.platform == "win32":
            return [['netsh', 'wlan', 'show', 'interfaces']]
        if self.platform == "darwin":
            device = interface_name or NETWORK.DARWIN_WIFI_DEVICE
            return [
                [NETWORK.AIRPORT_PATH, '-I'],
                ['ipconfig', 'getsummary', device],
                ['networksetup', '-getairportnetwork', device],
            ]
        nmcli = ['nmcli', '-m', 'multiline', '-f', 'IN-USE,SSID,BSSID,SIGNAL',
                 'device', 'wifi', 'list']
        if interface_name:
            nmcli += ['ifname', interface_name]
        return [nmcli + ['--rescan', 'no']]

    def read(self, interface_name: Optional[str] = None) -> WifiMetadata:
        """Return metadata for the current association; never raises.

        Commands are tried in order until one names the network. A tool
        that runs but only yields some fields is kept as the answer if
        no later tool does better.
        """
        partial = WifiMetadata.unknown()
        for cmd in self.commands(interface_name):
            try:
                result = run_with_fallback([cmd], timeout=INTERVALS.SUBPROCESS_TIMEOUT_SECONDS)
            except Exception as e:
                logger.debug(f"Wireless status command failed: {e}")
                continue
            if result is None:
                continue

            metadata = parse_wifi_output(result.stdout)
            if metadata.ssid != UNKNOWN:
                return _fill_missing(metadata, partial)
            partial = _fill_missing(partial, metadata)
        return partial


__all__ = ["WifiMetadata", "WifiMetadataReader", "parse_wifi_output"]
