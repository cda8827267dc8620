"""Configuration module for Network Tool.

Provides centralized configuration, logging, exceptions, and utilities.
"""
from config.constants import (
    ALLOWED_SUBPROCESS_COMMANDS,
    COLORS,
    INTERVALS,
    NETWORK,
    STORAGE,
    THRESHOLDS,
    UI,
    UNKNOWN,
    Colors,
    Intervals,
    NetworkConfig,
    StorageConfig,
    Thresholds,
    UIConfig,
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
from config.logging_config import get_logger, log_exception, setup_logging
from config.subprocess_runner import run_with_fallback, safe_run

__all__ = [
    # Constants
    "INTERVALS",
    "THRESHOLDS",
    "STORAGE",
    "COLORS",
    "NETWORK",
    "UI",
    "UNKNOWN",
    "Intervals",
    "Thresholds",
    "StorageConfig",
    "Colors",
    "NetworkConfig",
    "UIConfig",
    "ALLOWED_SUBPROCESS_COMMANDS",
    # Exceptions
    "NetworkToolError",
    "SubprocessError",
    "CommandTimeoutError",
    "CommandNotFoundError",
    "ProbeUnavailableError",
    "ToggleError",
    "ConfigurationError",
    # Logging
    "setup_logging",
    "get_logger",
    "log_exception",
    # Subprocess
    "safe_run",
    "run_with_fallback",
]
