"""Subprocess execution with safety checks and timing.

Every external command the engine runs (ping, the wireless status tools,
the interface admin commands) goes through this module.

Security Note:
    All commands are validated against an allowlist in
    ALLOWED_SUBPROCESS_COMMANDS. Shell=False is always used to prevent
    shell injection; adapter names are passed as single argv entries.

Usage:
    from config.subprocess_runner import safe_run

    result = safe_run(['ping', '-c', '1', '8.8.8.8'], timeout=2.0)
"""

# nosec B404 - subprocess usage is required and validated via allowlist
import subprocess
import sys
import time
from pathlib import Path
from typing import List, Optional

from config.constants import ALLOWED_SUBPROCESS_COMMANDS, INTERVALS
from config.exceptions import CommandNotFoundError, CommandTimeoutError, SubprocessError
from config.logging_config import get_logger, log_subprocess_call

logger = get_logger(__name__)


def _base_command(cmd: List[str]) -> str:
    """Return the executable name without directory or .exe suffix."""
    name = Path(cmd[0]).name if ("/" in cmd[0] or "\\" in cmd[0]) else cmd[0]
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name


def _platform_kwargs() -> dict:
    """Keep console windows from flashing up on Windows."""
    if sys.platform == "win32":
        return {"creationflags": getattr(subprocess, "CREATE_NO_WINDOW", 0)}
    return {}


def safe_run(
    cmd: List[str],
    timeout: Optional[float] = None,
    check_allowed: bool = True,
    quiet: bool = False,
    **kwargs,
) -> subprocess.CompletedProcess:
    """Run a subprocess command with safety checks.

    This is the recommended way to run subprocesses in Network Tool.
    It validates the command against an allowlist and ensures safe defaults.

    Args:
        cmd: Command and arguments as list.
        timeout: Command timeout in seconds.
        check_allowed: If True, validate command is in allowlist.
        quiet: Log a non-zero exit at DEBUG. For commands whose failure is
            an expected answer (an unanswered ping).
        **kwargs: Additional arguments passed to subprocess.run().

    Returns:
        subprocess.CompletedProcess with command output.

    Raises:
        CommandTimeoutError: If the command does not finish in time.
        CommandNotFoundError: If the executable does not exist.
        SubprocessError: If command is not allowed or cannot be started.

    Example:
        >>> result = safe_run(['netsh', 'wlan', 'show', 'interfaces'])
        >>> if result.returncode == 0:
        ...     print(result.stdout)
    """
    if not cmd:
        raise SubprocessError("Empty command", command=cmd)

    base_cmd = _base_command(cmd)
    if check_allowed and base_cmd not in ALLOWED_SUBPROCESS_COMMANDS:
        raise SubprocessError(
            f"Command not in allowlist: {base_cmd}",
            command=cmd,
            details={"allowed": sorted(ALLOWED_SUBPROCESS_COMMANDS)},
        )

    timeout = timeout or INTERVALS.SUBPROCESS_TIMEOUT_SECONDS
    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    kwargs.setdefault("errors", "replace")
    for key, value in _platform_kwargs().items():
        kwargs.setdefault(key, value)

    start_time = time.monotonic()
    try:
        result = subprocess.run(cmd, timeout=timeout, shell=False, **kwargs)  # nosec B603
    except subprocess.TimeoutExpired as e:
        logger.debug(f"Command timed out after {timeout}s: {base_cmd}")
        raise CommandTimeoutError(
            f"Command timed out after {timeout}s", command=cmd, details={"timeout": timeout}
        ) from e
    except FileNotFoundError as e:
        logger.warning(f"Command not found: {cmd[0]}")
        raise CommandNotFoundError(f"Command not found: {cmd[0]}", command=cmd) from e
    except OSError as e:
        logger.error(f"Subprocess error for {base_cmd}: {e}")
        raise SubprocessError(f"Subprocess error: {e}", command=cmd) from e

    duration_ms = (time.monotonic() - start_time) * 1000
    log_subprocess_call(
        logger, cmd, result.returncode, duration_ms, success=(quiet or result.returncode == 0)
    )
    return result


def run_with_fallback(
    commands: List[List[str]], timeout: Optional[float] = None
) -> Optional[subprocess.CompletedProcess]:
    """Try multiple commands in order until one succeeds.

    Useful for platform-specific commands with fallbacks. Commands given
    by absolute path skip the allowlist check, everything else is checked.

    Args:
        commands: List of commands to try in order.
        timeout: Timeout for each command.

    Returns:
        Result from first successful command, or None if all fail.

    Example:
        >>> result = run_with_fallback([
        ...     ['nmcli', '-m', 'multiline', 'device', 'wifi', 'list'],
        ...     ['/System/.../airport', '-I'],
        ... ])
    """
    for cmd in commands:
        try:
            result = safe_run(cmd, timeout=timeout, check_allowed=not Path(cmd[0]).is_absolute())
            if result.returncode == 0:
                return result
        except SubprocessError as e:
            logger.debug(f"Fallback command failed: {cmd[0]} - {e}")
            continue

    return None
