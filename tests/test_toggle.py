"""Tests for the internet kill switch."""
import subprocess
import threading
from unittest.mock import MagicMock, patch

import pytest

from app.events import EventType
from app.toggle import (
    NO_ACTIVE_ADAPTER,
    NO_ADAPTER_TO_ENABLE,
    AdminCommandRunner,
    ToggleController,
    ToggleGuard,
    ToggleState,
)
from config.exceptions import CommandNotFoundError
from tests.mocks import FakeAdminRunner, make_interface


def events_of(recorded, event_type):
    return [data for kind, data in recorded if kind is event_type]


class TestRoundTrip:

    def test_disable_then_enable(self, toggle, admin_runner, fake_enumerator, recorded_events):
        result = toggle.request_disable()

        assert result.accepted and result.succeeded
        assert result.state is ToggleState.DISABLED
        assert result.adapter_name == "eth0"
        assert result.message == "Ok."
        assert toggle.disabled_adapter == "eth0"
        assert not fake_enumerator.find("eth0").is_up

        result = toggle.request_enable()

        assert result.succeeded
        assert result.state is ToggleState.ENABLED
        assert toggle.disabled_adapter is None
        assert fake_enumerator.find("eth0").is_up
        assert admin_runner.calls == [("eth0", False), ("eth0", True)]

        completed = events_of(recorded_events, EventType.TOGGLE_COMPLETED)
        assert [e["action"] for e in completed] == ["disable", "enable"]
        assert len(events_of(recorded_events, EventType.TOGGLE_STARTED)) == 2

    def test_enable_targets_remembered_adapter_while_it_is_down(self, toggle, admin_runner,
                                                               fake_enumerator):
        fake_enumerator.set_interfaces([
            make_interface("eth0", speed_mbps=1000),
            make_interface("wlan0", speed_mbps=100),
        ])
        toggle.request_disable()
        # eth0 is down now, so wlan0 would be "active"
        toggle.request_enable()
        assert admin_runner.calls[-1] == ("eth0", True)

    def test_fixed_settle_delays(self, fake_enumerator, admin_runner):
        sleep = MagicMock()
        toggle = ToggleController(fake_enumerator, admin_runner, sleep=sleep,
                                  disable_settle_seconds=0.5, enable_settle_seconds=1.5)
        toggle.request_disable()
        toggle.request_enable()
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.5]

    def test_refresh_after_completion(self, fake_enumerator, admin_runner):
        refresh = MagicMock()
        toggle = ToggleController(fake_enumerator, admin_runner, refresh_callback=refresh,
                                  sleep=lambda _s: None)
        toggle.request_disable()
        refresh.assert_called_once()

    def test_refresh_failure_does_not_break_toggle(self, fake_enumerator, admin_runner):
        toggle = ToggleController(fake_enumerator, admin_runner,
                                  refresh_callback=MagicMock(side_effect=RuntimeError("x")),
                                  sleep=lambda _s: None)
        assert toggle.request_disable().succeeded
        assert not toggle.busy


class TestRejection:

    def test_disable_while_disabled_is_rejected(self, toggle, admin_runner, recorded_events):
        toggle.request_disable()
        result = toggle.request_disable()

        assert not result.accepted
        assert result.message == "Internet is already disabled"
        assert result.state is ToggleState.DISABLED
        assert len(admin_runner.calls) == 1
        rejected = events_of(recorded_events, EventType.TOGGLE_REJECTED)
        assert rejected[-1]["revert_to"] is ToggleState.DISABLED

    def test_concurrent_request_rejected_without_command(self, toggle, admin_runner,
                                                         recorded_events):
        admin_runner.block = threading.Event()
        done = []
        worker = toggle.request_disable_async(on_done=done.append)
        assert admin_runner.started.wait(timeout=5.0)

        assert toggle.busy
        assert toggle.state is ToggleState.DISABLING

        second = toggle.request_disable()
        enable = toggle.request_enable()
        assert not second.accepted
        assert not enable.accepted

        rejected = events_of(recorded_events, EventType.TOGGLE_REJECTED)
        assert len(rejected) == 2
        assert all(e["revert_to"] is ToggleState.DISABLED for e in rejected)

        admin_runner.block.set()
        worker.join(timeout=5.0)

        assert admin_runner.calls == [("eth0", False)]
        assert toggle.state is ToggleState.DISABLED
        assert done[0].succeeded
        assert not toggle.busy

    def test_async_rejection_is_immediate(self, toggle, admin_runner):
        admin_runner.block = threading.Event()
        worker = toggle.request_disable_async()
        assert admin_runner.started.wait(timeout=5.0)

        results = []
        assert toggle.request_enable_async(on_done=results.append) is None
        assert not results[0].accepted

        admin_runner.block.set()
        worker.join(timeout=5.0)

    def test_rejected_request_skips_refresh(self, fake_enumerator, admin_runner):
        refresh = MagicMock()
        toggle = ToggleController(fake_enumerator, admin_runner, refresh_callback=refresh,
                                  sleep=lambda _s: None)
        toggle.request_disable()
        refresh.reset_mock()
        toggle.request_disable()
        refresh.assert_not_called()


class TestFailures:

    def test_no_active_adapter(self, toggle, admin_runner, fake_enumerator, recorded_events):
        fake_enumerator.set_interfaces([make_interface("eth0", is_up=False)])
        result = toggle.request_disable()

        assert result.accepted and not result.succeeded
        assert result.message == NO_ACTIVE_ADAPTER
        assert toggle.state is ToggleState.ENABLED
        assert admin_runner.calls == []
        failed = events_of(recorded_events, EventType.TOGGLE_FAILED)
        assert failed[-1]["revert_to"] is ToggleState.ENABLED

    def test_enable_falls_back_to_first_physical_adapter(self, toggle, admin_runner,
                                                         fake_enumerator):
        fake_enumerator.set_interfaces([
            make_interface("lo", description="Loopback adapter (lo)"),
            make_interface("eth1", is_up=False),
        ])
        result = toggle.request_enable()

        assert result.succeeded
        assert result.adapter_name == "eth1"
        assert admin_runner.calls == [("eth1", True)]

    def test_enable_with_no_adapter(self, toggle, admin_runner, fake_enumerator):
        fake_enumerator.set_interfaces([])
        result = toggle.request_enable()

        assert not result.succeeded
        assert result.message == NO_ADAPTER_TO_ENABLE
        assert toggle.state is ToggleState.ENABLED
        assert admin_runner.calls == []

    def test_unexpected_error_reverts_and_releases_guard(self, fake_enumerator, recorded_events,
                                                        sync_bus):
        runner = MagicMock()
        runner.set_admin_state.side_effect = RuntimeError("driver crashed")
        toggle = ToggleController(fake_enumerator, runner, event_bus=sync_bus,
                                  sleep=lambda _s: None)

        result = toggle.request_disable()
        assert not result.succeeded
        assert toggle.state is ToggleState.ENABLED
        assert not toggle.busy
        assert events_of(recorded_events, EventType.TOGGLE_FAILED)

    def test_command_diagnostic_does_not_decide_outcome(self, fake_enumerator):
        runner = FakeAdminRunner(output="Error: access denied", enumerator=fake_enumerator)
        toggle = ToggleController(fake_enumerator, runner, sleep=lambda _s: None)

        result = toggle.request_disable()
        assert result.succeeded
        assert result.message == "Error: access denied"
        assert len(runner.calls) == 1


class TestPollSettle:

    def make_clock(self):
        now = [0.0]

        def sleep(seconds):
            now[0] += seconds

        return (lambda: now[0]), sleep

    def test_returns_once_status_matches(self, fake_enumerator, admin_runner):
        clock, sleep = self.make_clock()
        toggle = ToggleController(fake_enumerator, admin_runner, poll_settle=True,
                                  sleep=sleep, clock=clock)
        toggle.request_disable()
        assert clock() == 0.0

    def test_gives_up_after_timeout(self, fake_enumerator):
        clock, sleep = self.make_clock()
        runner = FakeAdminRunner()  # never changes the adapter
        toggle = ToggleController(fake_enumerator, runner, poll_settle=True,
                                  poll_interval_seconds=0.25, poll_timeout_seconds=1.0,
                                  sleep=sleep, clock=clock)

        result = toggle.request_disable()
        assert result.succeeded
        assert clock() == pytest.approx(1.0)

    def test_vanished_adapter_counts_as_down(self, fake_enumerator):
        clock, sleep = self.make_clock()
        runner = MagicMock()
        runner.set_admin_state.side_effect = lambda name, enable: fake_enumerator.set_interfaces([]) or ""
        toggle = ToggleController(fake_enumerator, runner, poll_settle=True,
                                  sleep=sleep, clock=clock)
        toggle.request_disable()
        assert clock() == 0.0


class TestToggleState:

    @pytest.mark.parametrize("state, settled, disabled", [
        (ToggleState.ENABLED, ToggleState.ENABLED, False),
        (ToggleState.DISABLING, ToggleState.DISABLED, True),
        (ToggleState.DISABLED, ToggleState.DISABLED, True),
        (ToggleState.ENABLING, ToggleState.ENABLED, False),
    ])
    def test_settled(self, state, settled, disabled):
        assert state.settled is settled
        assert state.internet_disabled is disabled

    def test_guard_is_single_flight(self):
        guard = ToggleGuard()
        assert guard.try_begin()
        assert not guard.try_begin()
        assert guard.busy
        guard.end()
        assert guard.try_begin()


class TestAdminCommandRunner:

    @pytest.mark.parametrize("platform, enable, expected", [
        ("win32", False, ['netsh', 'interface', 'set', 'interface', 'name=Wi-Fi', 'admin=DISABLED']),
        ("win32", True, ['netsh', 'interface', 'set', 'interface', 'name=Wi-Fi', 'admin=ENABLED']),
        ("linux", False, ['ip', 'link', 'set', 'dev', 'Wi-Fi', 'down']),
        ("darwin", True, ['ifconfig', 'Wi-Fi', 'up']),
    ])
    def test_build_command(self, platform, enable, expected):
        assert AdminCommandRunner(platform).build_command("Wi-Fi", enable) == expected

    def test_name_with_spaces_is_one_argument(self):
        cmd = AdminCommandRunner("win32").build_command("Ethernet 2", False)
        assert "name=Ethernet 2" in cmd

    def test_stderr_wins_over_stdout(self):
        result = subprocess.CompletedProcess([], 1, "Ok.", "  The requested operation requires elevation.\n")
        with patch("app.toggle.safe_run", return_value=result):
            output = AdminCommandRunner("win32").set_admin_state("Wi-Fi", False)
        assert output == "The requested operation requires elevation."

    def test_stdout_when_no_stderr(self):
        with patch("app.toggle.safe_run",
                   return_value=subprocess.CompletedProcess([], 0, "Ok.\n", "")):
            assert AdminCommandRunner("win32").set_admin_state("Wi-Fi", True) == "Ok."

    def test_launch_failure_is_reported_not_raised(self):
        with patch("app.toggle.safe_run", side_effect=CommandNotFoundError("Command not found: ip")):
            output = AdminCommandRunner("linux").set_admin_state("eth0", False)
        assert output == "Error: Command not found: ip"
