"""Logging for Network Tool.

Everything logs under the 'nettool' logger: a rotating file in the data
directory gets the full record, the console only gets warnings unless
debug is on.

Usage:
    from config.logging_config import setup_logging, get_logger

    setup_logging(data_dir=Path.home() / ".network-tool")

    logger = get_logger(__name__)    # nettool.app.sampler
    logger.info("Sampling loop started")
"""
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional

from config.constants import STORAGE

ROOT_LOGGER_NAME = 'nettool'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'

_loggers: Dict[str, logging.Logger] = {}


def setup_logging(
    data_dir: Optional[Path] = None,
    debug: bool = False,
    console_output: bool = True,
    log_to_file: bool = True
) -> logging.Logger:
    """Install the file and console handlers on the 'nettool' logger.

    Calling it again swaps the handlers rather than stacking them, so the
    CLI can reconfigure after parsing its arguments.

    Args:
        data_dir: Where network_tool.log goes. Defaults to ~/.network-tool/
        debug: DEBUG level everywhere, including the console.
        console_output: Attach a stderr handler.
        log_to_file: Attach the rotating file handler.

    Returns:
        The 'nettool' logger.
    """
    data_dir = data_dir or Path.home() / STORAGE.DATA_DIR_NAME
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    while root_logger.handlers:
        old = root_logger.handlers[0]
        root_logger.removeHandler(old)
        old.close()

    if log_to_file:
        data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            data_dir / STORAGE.LOG_FILE,
            maxBytes=STORAGE.LOG_MAX_BYTES,
            backupCount=STORAGE.LOG_BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level if debug else logging.WARNING)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)

    root_logger.info(
        f"Logging ready ({logging.getLevelName(level)}, "
        f"file={log_to_file}, console={console_output})"
    )
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Child of 'nettool' named after the last two parts of `name`.

    `get_logger("monitor.wifi")` and `get_logger(__name__)` inside
    monitor/wifi.py return the same 'nettool.monitor.wifi' logger.
    """
    short_name = '.'.join(name.split('.')[-2:])
    logger = _loggers.get(short_name)
    if logger is None:
        logger = logging.getLogger(f'{ROOT_LOGGER_NAME}.{short_name}')
        _loggers[short_name] = logger
    return logger


def log_exception(logger: logging.Logger, message: str, exc: Exception) -> None:
    """ERROR record with the exception type in the text and the traceback attached."""
    exc_type = type(exc).__name__
    logger.error(f"{message}: {exc_type}: {exc}", exc_info=exc,
                 extra={'exception_type': exc_type})


def log_subprocess_call(
    logger: logging.Logger,
    command: List[str],
    returncode: int,
    duration_ms: float,
    success: bool
) -> None:
    """One line per external command; failures at WARNING."""
    shown = ' '.join(command[:3]) + ('...' if len(command) > 3 else '')
    logger.log(
        logging.DEBUG if success else logging.WARNING,
        f"Subprocess: {shown} -> rc={returncode}, {duration_ms:.1f}ms",
    )


class LogContext:
    """Times a block and logs its start and end.

    Example:
        >>> with LogContext(logger, "Probe burst to 8.8.8.8"):
        ...     probe.probe("8.8.8.8")
        # "Probe burst to 8.8.8.8 took 1234ms"

    A failing block is logged at ERROR and the exception propagates.
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.log(self.level, f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.monotonic() - self.start_time) * 1000
        if exc_type is not None:
            self.logger.error(f"{self.operation} failed after {self.duration_ms:.0f}ms: {exc_val}")
        else:
            self.logger.log(self.level, f"{self.operation} took {self.duration_ms:.0f}ms")
        return False
