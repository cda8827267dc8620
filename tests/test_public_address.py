"""Tests for the public address resolver."""
import socket
from unittest.mock import MagicMock
from urllib.error import HTTPError, URLError

import pytest

from config.constants import NETWORK, UNKNOWN
from monitor.public_address import PublicAddressResolver


def make_opener(body=b"203.0.113.7\n", status=200, error=None):
    """urlopen replacement returning a context-managed fake response."""
    response = MagicMock()
    response.status = status
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = False

    opener = MagicMock()
    if error is not None:
        opener.side_effect = error
    else:
        opener.return_value = response
    return opener


class TestPublicAddressResolver:

    def test_returns_trimmed_body(self):
        resolver = PublicAddressResolver(opener=make_opener())
        assert resolver.resolve() == "203.0.113.7"

    def test_sends_user_agent_and_timeout(self):
        opener = make_opener()
        PublicAddressResolver(url="https://ip.example", timeout=1.5, opener=opener).resolve()

        request = opener.call_args[0][0]
        assert request.full_url == "https://ip.example"
        assert request.get_header("User-agent") == NETWORK.USER_AGENT
        assert opener.call_args.kwargs["timeout"] == 1.5

    def test_non_success_status_is_unknown(self):
        resolver = PublicAddressResolver(opener=make_opener(status=503))
        assert resolver.resolve() == UNKNOWN

    def test_empty_body_is_unknown(self):
        resolver = PublicAddressResolver(opener=make_opener(body=b"  \n"))
        assert resolver.resolve() == UNKNOWN

    @pytest.mark.parametrize("error", [
        URLError("no route"),
        HTTPError("https://api.ipify.org", 500, "err", {}, None),
        socket.timeout("timed out"),
        ConnectionResetError(),
    ])
    def test_transport_errors_are_unknown(self, error):
        resolver = PublicAddressResolver(opener=make_opener(error=error))
        assert resolver.resolve() == UNKNOWN

    def test_no_caching_between_calls(self):
        opener = make_opener()
        resolver = PublicAddressResolver(opener=opener)
        resolver.resolve()
        opener.side_effect = URLError("down")
        assert resolver.resolve() == UNKNOWN
        assert opener.call_count == 2
