"""Errors raised inside Network Tool.

Collectors catch these at their own boundary and fall back to "unknown"
or an offline result; only settings validation and the kill switch let
them reach the caller.
"""

from typing import Optional

# Captured command output kept in `details` is cut to this many characters
_OUTPUT_PREVIEW_CHARS = 500


class NetworkToolError(Exception):
    """Root of every error this package raises on purpose.

    Attributes:
        message: What went wrong.
        details: Extra context for the log line (command, value, adapter...).
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (details: {self.details})"


class SubprocessError(NetworkToolError):
    """An external command was refused, could not start, or failed.

    Covers allowlist rejections as well as launch and permission
    problems. The full output stays on the instance; `details` only
    carries a preview of it.

    Examples:
        >>> SubprocessError("Command not in allowlist: curl", command=["curl", "x"])
    """

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        stdout: Optional[str] = None,
        stderr: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        context = dict(details or {})
        if command:
            context["command"] = command
        if returncode is not None:
            context["returncode"] = returncode
        for key, text in (("stdout", stdout), ("stderr", stderr)):
            if text:
                context[key] = text[:_OUTPUT_PREVIEW_CHARS]

        super().__init__(message, context)
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(SubprocessError):
    """A command did not finish within its timeout."""


class CommandNotFoundError(SubprocessError):
    """The command binary is not installed or not on PATH."""


class ProbeUnavailableError(NetworkToolError):
    """The ICMP echo facility cannot be used at all.

    Raised by ping transports when the underlying tool is missing or
    refuses to run. The reachability probe turns it into a fully
    offline result.
    """


class ToggleError(NetworkToolError):
    """A kill switch transition that cannot go ahead.

    The controller turns it into a failed ToggleResult and reverts to
    the state it started from.
    """


class ConfigurationError(NetworkToolError):
    """A setting name or value was rejected.

    Examples:
        >>> raise ConfigurationError("Invalid value for sample_count", {"value": 0})
    """
