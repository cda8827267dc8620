#!/usr/bin/env python3
"""
Network Tool - adapter telemetry and internet kill switch.

Samples the active network adapter every second (throughput, addresses,
reachability, Wi-Fi details) and can administratively disable / re-enable
it. Runs as a macOS menu bar app, or headless on any platform.
"""
import argparse
import json
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from app.controller import AppController
from app.dependencies import create_dependencies
from app.events import EventBus, EventType
from app.views.formatting import summary_line
from config import STORAGE, get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="network-tool",
        description="Adapter telemetry with an internet kill switch.",
    )
    parser.add_argument("--headless", action="store_true",
                        help="run without the menu bar UI and log one line per snapshot")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true",
                      help="take a single snapshot, print it as JSON and exit")
    mode.add_argument("--disable-internet", action="store_true",
                      help="disable the active adapter and exit")
    mode.add_argument("--enable-internet", action="store_true",
                      help="re-enable the adapter and exit")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help=f"settings and log directory (default ~/{STORAGE.DATA_DIR_NAME})")
    return parser.parse_args(argv)


def run_once(controller: AppController) -> int:
    snapshot = controller.refresh()
    if snapshot is None:
        print("Sampling failed, see the log for details.", file=sys.stderr)
        return 1
    print(json.dumps(snapshot.to_dict(), indent=2))
    return 0


def run_toggle(controller: AppController, disable: bool) -> int:
    # Exiting right after; no telemetry refresh needed
    controller.toggle.refresh_callback = None
    if disable:
        result = controller.toggle.request_disable()
    else:
        result = controller.toggle.request_enable()
    print(f"{result.state.value}: {result.message or 'done'}")
    return 0 if result.succeeded else 1


def run_headless(controller: AppController) -> int:
    stop = threading.Event()

    def on_snapshot(event):
        logger.info(summary_line(event.data.get("snapshot")))

    def on_signal(signum, _frame):
        logger.info(f"Received signal {signum}, stopping...")
        stop.set()

    controller.event_bus.subscribe(EventType.SNAPSHOT_UPDATED, on_snapshot)
    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)

    controller.start()
    try:
        while not stop.wait(0.5):
            pass
    finally:
        controller.stop()
    return 0


def run_menu_bar(controller: AppController, data_dir: Path) -> int:
    # rumps only exists on macOS; import on demand so headless runs anywhere
    from app.views.menu_app import NetworkToolApp

    app = NetworkToolApp(controller, data_dir)
    try:
        app.run()
    except Exception as e:
        logger.critical(f"Application crashed: {e}", exc_info=True)
        raise
    finally:
        controller.stop()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    args = parse_args(argv)
    data_dir = args.data_dir or Path.home() / STORAGE.DATA_DIR_NAME

    one_shot = args.once or args.disable_internet or args.enable_internet
    setup_logging(data_dir=data_dir, debug=args.debug, console_output=not one_shot or args.debug)
    logger.info("Network Tool starting...")

    # One-shot commands and the headless logger deliver events synchronously
    event_bus = EventBus(async_mode=not (one_shot or args.headless))
    controller = AppController(create_dependencies(data_dir, event_bus), event_bus)

    try:
        if args.disable_internet:
            return run_toggle(controller, disable=True)
        if args.enable_internet:
            return run_toggle(controller, disable=False)
        if args.once:
            return run_once(controller)
        if args.headless or sys.platform != "darwin":
            return run_headless(controller)
        return run_menu_bar(controller, data_dir)
    finally:
        event_bus.shutdown()


if __name__ == "__main__":
    sys.exit(main())
