"""Tests for the config module."""
import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from config.constants import (
    ALLOWED_SUBPROCESS_COMMANDS,
    COLORS,
    INTERVALS,
    NETWORK,
    STORAGE,
    THRESHOLDS,
    UNKNOWN,
)
from config.exceptions import (
    CommandNotFoundError,
    CommandTimeoutError,
    ConfigurationError,
    NetworkToolError,
    ProbeUnavailableError,
    SubprocessError,
    ToggleError,
)
from config.logging_config import LogContext, get_logger, log_exception, setup_logging
from config.subprocess_runner import run_with_fallback, safe_run


class TestConstants:
    """Tests for constants module."""

    def test_intervals_are_positive(self):
        """All interval values should be positive."""
        assert INTERVALS.SAMPLE_SECONDS > 0
        assert INTERVALS.PROBE_TIMEOUT_MS > 0
        assert INTERVALS.PUBLIC_IP_TIMEOUT_SECONDS > 0
        assert INTERVALS.SUBPROCESS_TIMEOUT_SECONDS > 0

    def test_enable_settles_longer_than_disable(self):
        assert INTERVALS.ENABLE_SETTLE_SECONDS > INTERVALS.DISABLE_SETTLE_SECONDS

    def test_thresholds_latency_ordering(self):
        """Latency thresholds should be in ascending order."""
        assert THRESHOLDS.LATENCY_GOOD_MS < THRESHOLDS.LATENCY_OK_MS

    def test_activity_threshold_is_one_megabyte(self):
        assert THRESHOLDS.ACTIVITY_THRESHOLD_BYTES == 1024 * 1024

    def test_default_burst_is_twenty_samples(self):
        assert THRESHOLDS.PROBE_SAMPLE_COUNT == 20

    def test_storage_config_has_required_fields(self):
        """Storage config should have all required fields."""
        assert STORAGE.DATA_DIR_NAME
        assert STORAGE.SETTINGS_FILE
        assert STORAGE.LOG_FILE

    def test_colors_rgba_format(self):
        """RGBA colors should be 4-tuples with values 0-255."""
        for color in [COLORS.GREEN_RGBA, COLORS.YELLOW_RGBA, COLORS.RED_RGBA, COLORS.GRAY_RGBA]:
            assert len(color) == 4
            assert all(0 <= c <= 255 for c in color)

    def test_excluded_keywords_are_lowercase(self):
        for keyword in NETWORK.EXCLUDED_DESCRIPTION_KEYWORDS:
            assert keyword == keyword.lower()

    def test_unknown_sentinel(self):
        assert UNKNOWN == "unknown"

    def test_constants_are_frozen(self):
        with pytest.raises(Exception):
            INTERVALS.SAMPLE_SECONDS = 5.0


class TestExceptions:
    """Tests for custom exceptions."""

    def test_base_exception_with_details(self):
        """NetworkToolError should work with message and details."""
        exc = NetworkToolError("Test error", {"key": "value"})
        assert exc.message == "Test error"
        assert exc.details == {"key": "value"}
        assert "Test error" in str(exc)
        assert "key" in str(exc)

    def test_exception_without_details(self):
        """Exceptions should work without details."""
        exc = ConfigurationError("Bad value")
        assert exc.message == "Bad value"
        assert exc.details == {}
        assert str(exc) == "Bad value"

    def test_subprocess_error_with_full_info(self):
        """SubprocessError should capture command details."""
        exc = SubprocessError(
            "Command failed",
            command=["ping", "-c", "1", "8.8.8.8"],
            returncode=1,
            stdout="output",
            stderr="error",
        )
        assert exc.command == ["ping", "-c", "1", "8.8.8.8"]
        assert exc.returncode == 1
        assert exc.details["stderr"] == "error"
        assert "command" in exc.details

    def test_subprocess_error_truncates_output(self):
        exc = SubprocessError("Command failed", stdout="x" * 2000)
        assert len(exc.details["stdout"]) == 500
        assert len(exc.stdout) == 2000

    def test_exception_inheritance(self):
        """All custom exceptions should inherit from NetworkToolError."""
        assert issubclass(SubprocessError, NetworkToolError)
        assert issubclass(CommandTimeoutError, SubprocessError)
        assert issubclass(CommandNotFoundError, SubprocessError)
        assert issubclass(ProbeUnavailableError, NetworkToolError)
        assert issubclass(ToggleError, NetworkToolError)
        assert issubclass(ConfigurationError, NetworkToolError)


class TestLogging:
    """Tests for logging configuration."""

    def test_setup_logging_creates_logger(self, temp_data_dir):
        """setup_logging should return a configured logger."""
        logger = setup_logging(data_dir=temp_data_dir, console_output=False)
        assert logger is not None
        assert logger.name == 'nettool'
        assert (temp_data_dir / STORAGE.LOG_FILE).exists()

    def test_setup_logging_replaces_handlers(self, temp_data_dir):
        setup_logging(data_dir=temp_data_dir, console_output=False)
        logger = setup_logging(data_dir=temp_data_dir, console_output=False)
        assert len(logger.handlers) == 1

    def test_get_logger_returns_child(self, temp_data_dir):
        """get_logger should return child of root logger."""
        setup_logging(data_dir=temp_data_dir, console_output=False)
        logger = get_logger("monitor.reachability")
        assert logger.name == 'nettool.monitor.reachability'

    def test_get_logger_is_cached(self):
        assert get_logger("app.sampler") is get_logger("app.sampler")

    def test_log_exception_includes_type(self):
        logger = MagicMock()
        log_exception(logger, "Tick failed", ValueError("boom"))
        message = logger.error.call_args[0][0]
        assert "Tick failed" in message
        assert "ValueError" in message

    def test_log_context_measures_duration(self):
        """LogContext should measure operation duration."""
        logger = MagicMock()
        with LogContext(logger, "Probe burst") as ctx:
            pass
        assert ctx.start_time is not None
        assert ctx.duration_ms >= 0
        assert logger.log.call_count == 2

    def test_log_context_does_not_swallow(self):
        logger = MagicMock()
        with pytest.raises(RuntimeError):
            with LogContext(logger, "Probe burst"):
                raise RuntimeError("fail")
        logger.error.assert_called_once()


class TestSafeRun:
    """Tests for the allowlisted subprocess runner."""

    def test_safe_run_validates_command(self):
        """safe_run should reject commands not in allowlist."""
        with pytest.raises(SubprocessError) as exc_info:
            safe_run(['rm', '-rf', '/'], check_allowed=True)

        assert "not in allowlist" in str(exc_info.value)

    def test_empty_command_rejected(self):
        with pytest.raises(SubprocessError):
            safe_run([])

    def test_allowlist_covers_engine_commands(self):
        for command in ('ping', 'netsh', 'nmcli', 'ip', 'ifconfig', 'ipconfig', 'networksetup'):
            assert command in ALLOWED_SUBPROCESS_COMMANDS

    def test_never_uses_shell(self, mock_subprocess):
        safe_run(['ping', '-c', '1', '8.8.8.8'], timeout=1.0)
        kwargs = mock_subprocess.call_args.kwargs
        assert kwargs['shell'] is False
        assert kwargs['timeout'] == 1.0
        assert kwargs['capture_output'] is True

    def test_failed_exit_logged_as_warning(self, mock_subprocess):
        mock_subprocess.return_value.returncode = 1
        with patch('config.subprocess_runner.log_subprocess_call') as log_call:
            safe_run(['ping', '-c', '1', '10.0.0.99'])
        assert log_call.call_args.kwargs['success'] is False

    def test_quiet_failed_exit_logged_at_debug(self, mock_subprocess):
        mock_subprocess.return_value.returncode = 1
        with patch('config.subprocess_runner.log_subprocess_call') as log_call:
            result = safe_run(['ping', '-c', '1', '10.0.0.99'], quiet=True)
        assert result.returncode == 1
        assert log_call.call_args.kwargs['success'] is True
        assert 'quiet' not in mock_subprocess.call_args.kwargs

    def test_exe_suffix_is_allowed(self, mock_subprocess):
        safe_run(['netsh.exe', 'wlan', 'show', 'interfaces'])
        mock_subprocess.assert_called_once()

    def test_timeout_maps_to_command_timeout(self):
        with patch('subprocess.run', side_effect=subprocess.TimeoutExpired(['ping'], 1)):
            with pytest.raises(CommandTimeoutError):
                safe_run(['ping', '8.8.8.8'], timeout=1.0)

    def test_missing_binary_maps_to_not_found(self):
        with patch('subprocess.run', side_effect=FileNotFoundError()):
            with pytest.raises(CommandNotFoundError):
                safe_run(['nmcli', 'device'])

    def test_os_error_maps_to_subprocess_error(self):
        with patch('subprocess.run', side_effect=PermissionError("denied")):
            with pytest.raises(SubprocessError) as exc_info:
                safe_run(['ip', 'link'])
        assert not isinstance(exc_info.value, CommandNotFoundError)


class TestRunWithFallback:
    """Tests for run_with_fallback."""

    def test_returns_first_success(self, mock_subprocess):
        mock_subprocess.side_effect = [
            MagicMock(returncode=1, stdout="", stderr="nope"),
            MagicMock(returncode=0, stdout="ok", stderr=""),
        ]
        result = run_with_fallback([['nmcli', 'a'], ['ip', 'b']])
        assert result.stdout == "ok"
        assert mock_subprocess.call_count == 2

    def test_returns_none_when_all_fail(self):
        with patch('subprocess.run', side_effect=FileNotFoundError()):
            assert run_with_fallback([['nmcli', 'a'], ['netsh', 'b']]) is None

    def test_disallowed_command_is_skipped(self, mock_subprocess):
        result = run_with_fallback([['curl', 'x'], ['ip', 'link']])
        assert result is mock_subprocess.return_value
        assert mock_subprocess.call_count == 1

    def test_absolute_path_skips_allowlist(self, mock_subprocess):
        run_with_fallback([['/usr/local/bin/airport', '-I']])
        mock_subprocess.assert_called_once()


@pytest.fixture(autouse=True)
def _reset_nettool_logger():
    yield
    root = logging.getLogger('nettool')
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
