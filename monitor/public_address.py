"""Public (WAN) address lookup through an HTTP IP-echo endpoint.

The endpoint answers a plain GET with the caller's address as the body.
One request per tick, short timeout, no caching: when the link goes down
the next snapshot must show the address as unknown.
"""

from typing import Callable, Optional
from urllib.error import URLError
from urllib.request import Request, urlopen

from config import INTERVALS, NETWORK, UNKNOWN, get_logger

logger = get_logger(__name__)


class PublicAddressResolver:
    """Resolves the host's public address.

    Args:
        url: IP-echo endpoint returning the address as plain text.
        timeout: Request timeout in seconds.
        opener: Replacement for urlopen (tests).
    """

    def __init__(
        self,
        url: str = NETWORK.PUBLIC_IP_URL,
        timeout: float = INTERVALS.PUBLIC_IP_TIMEOUT_SECONDS,
        opener: Optional[Callable] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._open = opener or urlopen

    def resolve(self) -> str:
        """Return the public address, or UNKNOWN on any failure."""
        request = Request(self.url, headers={"User-Agent": NETWORK.USER_AGENT})
        try:
            with self._open(request, timeout=self.timeout) as response:
                status = getattr(response, "status", None) or response.getcode()
                if not 200 <= status < 300:
                    logger.debug(f"Public IP lookup returned HTTP {status}")
                    return UNKNOWN
                body = response.read().decode("utf-8", errors="replace").strip()
        except (URLError, OSError, ValueError) as e:
            # URLError covers HTTPError; socket timeouts are OSError
            logger.debug(f"Public IP lookup failed: {e}")
            return UNKNOWN

        return body or UNKNOWN


__all__ = ["PublicAddressResolver"]
