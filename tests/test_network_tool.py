"""Tests for the command line entry point."""
import json
import logging
from unittest.mock import MagicMock, patch

import pytest

import network_tool
from app.dependencies import create_mock_dependencies
from app.toggle import ToggleResult, ToggleState


@pytest.fixture(autouse=True)
def _reset_nettool_logger():
    yield
    root = logging.getLogger('nettool')
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def mock_deps(temp_data_dir):
    """Route create_dependencies to the fakes."""
    deps = create_mock_dependencies(temp_data_dir)
    deps.settings.update(sample_count=3, probe_delay_ms=0)

    def factory(data_dir, event_bus):
        deps.event_bus = event_bus
        return deps

    with patch("network_tool.create_dependencies", side_effect=factory):
        yield deps


class TestParseArgs:

    def test_defaults(self):
        args = network_tool.parse_args([])
        assert not args.headless
        assert not args.once
        assert args.data_dir is None

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            network_tool.parse_args(["--once", "--disable-internet"])


class TestMain:

    def test_once_prints_json_snapshot(self, mock_deps, temp_data_dir, capsys):
        assert network_tool.main(["--once", "--data-dir", str(temp_data_dir)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["interface"] == "eth0"
        assert data["internet"] == "online"
        assert data["public_ip"] == "203.0.113.7"

    @pytest.mark.slow
    def test_disable_internet(self, mock_deps, temp_data_dir, capsys):
        code = network_tool.main(["--disable-internet", "--data-dir", str(temp_data_dir)])

        assert code == 0
        assert mock_deps.admin_runner.calls == [("eth0", False)]
        assert capsys.readouterr().out.startswith("disabled")

    @pytest.mark.slow
    def test_enable_without_prior_disable_uses_fallback(self, mock_deps, temp_data_dir):
        code = network_tool.main(["--enable-internet", "--data-dir", str(temp_data_dir)])

        assert code == 0
        assert mock_deps.admin_runner.calls == [("eth0", True)]


class TestRunners:

    def test_run_once_failure(self, capsys):
        controller = MagicMock()
        controller.refresh.return_value = None
        assert network_tool.run_once(controller) == 1
        assert "Sampling failed" in capsys.readouterr().err

    def test_run_toggle_reports_failure(self, capsys):
        controller = MagicMock()
        controller.toggle.request_disable.return_value = ToggleResult(
            accepted=True, succeeded=False, state=ToggleState.ENABLED,
            message="No active network adapter found",
        )
        assert network_tool.run_toggle(controller, disable=True) == 1
        assert controller.toggle.refresh_callback is None
        assert "No active network adapter found" in capsys.readouterr().out
