"""Pytest configuration and shared fixtures.

This module provides:
- Pytest markers for test categorization (unit, integration, slow, macos_only)
- Directory fixtures for settings and logs
- Fakes for the enumerator, ping transport, wifi reader, public resolver
  and admin runner, plus ready-wired sampler / toggle fixtures
"""
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from app.events import EventBus
from app.sampler import SamplingLoop
from app.toggle import ToggleController
from monitor.interfaces import MediaType
from tests.mocks import (
    FakeAdminRunner,
    FakeEnumerator,
    FakePublicResolver,
    FakeTransport,
    FakeWifiReader,
    make_interface,
    make_probe,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "macos_only: mark test as requiring macOS")


# =============================================================================
# Directory and Path Fixtures
# =============================================================================


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for settings and logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Interface Fixtures
# =============================================================================


@pytest.fixture
def wired_interface():
    return make_interface("eth0", description="Intel Ethernet", speed_mbps=1000)


@pytest.fixture
def wireless_interface():
    return make_interface("wlan0", description="Wireless adapter",
                          media_type=MediaType.WIRELESS, speed_mbps=300)


@pytest.fixture
def fake_enumerator(wired_interface) -> FakeEnumerator:
    return FakeEnumerator([wired_interface])


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def sync_bus() -> Generator[EventBus, None, None]:
    """Synchronous event bus: handlers run before publish() returns."""
    bus = EventBus(async_mode=False)
    yield bus
    bus.shutdown()


@pytest.fixture
def recorded_events(sync_bus):
    """List of every event published on sync_bus."""
    events = []
    original = sync_bus.publish

    def record(event_type, data=None, source=None):
        events.append((event_type, dict(data or {})))
        original(event_type, data, source)

    sync_bus.publish = record
    return events


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sampler(fake_enumerator, fake_transport, sync_bus) -> SamplingLoop:
    """SamplingLoop on fakes with a fixed, caller-advanced clock."""
    clock = MagicMock(return_value=0.0)
    loop = SamplingLoop(
        enumerator=fake_enumerator,
        probe=make_probe(fake_transport),
        wifi_reader=FakeWifiReader(),
        public_resolver=FakePublicResolver(),
        event_bus=sync_bus,
        probe_delay_ms=0,
        clock=clock,
    )
    loop.test_clock = clock
    return loop


@pytest.fixture
def admin_runner(fake_enumerator) -> FakeAdminRunner:
    return FakeAdminRunner(output="Ok.", enumerator=fake_enumerator)


@pytest.fixture
def toggle(fake_enumerator, admin_runner, sync_bus) -> ToggleController:
    """ToggleController on fakes that never sleeps."""
    return ToggleController(
        enumerator=fake_enumerator,
        admin_runner=admin_runner,
        event_bus=sync_bus,
        sleep=lambda _seconds: None,
    )


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_subprocess() -> Generator[MagicMock, None, None]:
    """Mock subprocess for command execution testing."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="",
            stderr="",
        )
        yield mock_run


@pytest.fixture
def mock_event_bus() -> MagicMock:
    """Create a mock event bus for testing event-driven components."""
    mock_bus = MagicMock()
    mock_bus.publish = MagicMock()
    mock_bus.subscribe = MagicMock()
    mock_bus.unsubscribe = MagicMock()
    return mock_bus
