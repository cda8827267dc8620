"""Dependency injection container for Network Tool.

Every collector the sampling loop and kill switch need is built here, so
tests can swap any of them for a fake.

Usage:
    from app.dependencies import create_dependencies

    deps = create_dependencies()
    deps.enumerator.list_interfaces()
    deps.settings.settings.probe_target
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config import STORAGE, get_logger

logger = get_logger(__name__)


@dataclass
class AppDependencies:
    """Container for the application's components.

    Fields are typed by name only, so tests may pass any object with the
    same methods.
    """

    # Telemetry collectors
    enumerator: "InterfaceEnumerator"
    probe: "ReachabilityProbe"
    wifi_reader: "WifiMetadataReader"
    public_resolver: "PublicAddressResolver"

    # Kill switch
    admin_runner: "AdminCommandRunner"

    # Storage
    settings: "SettingsManager"

    event_bus: Optional["EventBus"] = None

    def __post_init__(self):
        logger.debug("AppDependencies container created")


def create_dependencies(
    data_dir: Optional[Path] = None, event_bus: Optional["EventBus"] = None
) -> AppDependencies:
    """Create the real components for this platform.

    Args:
        data_dir: Override the default data directory (~/.network-tool).
        event_bus: Existing event bus; the global one is used otherwise.
    """
    # Import here to avoid circular imports
    from app.events import get_event_bus
    from app.toggle import AdminCommandRunner
    from monitor.interfaces import InterfaceEnumerator
    from monitor.public_address import PublicAddressResolver
    from monitor.reachability import ReachabilityProbe
    from monitor.wifi import WifiMetadataReader
    from storage.settings import get_settings_manager

    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME

    settings = get_settings_manager(data_dir)
    current = settings.settings

    deps = AppDependencies(
        enumerator=InterfaceEnumerator(),
        probe=ReachabilityProbe(),
        wifi_reader=WifiMetadataReader(),
        public_resolver=PublicAddressResolver(url=current.public_ip_url),
        admin_runner=AdminCommandRunner(),
        settings=settings,
        event_bus=event_bus or get_event_bus(),
    )
    logger.info("Application dependencies created")
    return deps


def create_mock_dependencies(data_dir: Optional[Path] = None) -> AppDependencies:
    """Dependencies backed by the fakes in tests/mocks.py.

    No interface is touched, no command runs and no request leaves the
    host. The event bus is synchronous so tests see events immediately.
    """
    import tempfile

    from app.events import EventBus
    from storage.settings import SettingsManager
    from tests.mocks import (
        FakeAdminRunner,
        FakeEnumerator,
        FakePublicResolver,
        FakeWifiReader,
        make_interface,
        make_probe,
    )

    if data_dir is None:
        data_dir = Path(tempfile.mkdtemp(prefix="nettool-test-"))

    enumerator = FakeEnumerator([make_interface("eth0", speed_mbps=1000)])
    logger.debug("Creating mock dependencies for testing")
    return AppDependencies(
        enumerator=enumerator,
        probe=make_probe(),
        wifi_reader=FakeWifiReader(),
        public_resolver=FakePublicResolver(),
        admin_runner=FakeAdminRunner(enumerator=enumerator),
        settings=SettingsManager(data_dir),
        event_bus=EventBus(async_mode=False),
    )
