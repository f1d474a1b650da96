"""Exception taxonomy for the config updater.

Every failure inside an update cycle is raised as an ``UpdaterError``
subclass and converted to a failed ``CycleOutcome`` at the cycle boundary.
Only ``ConfigError`` is fatal to the process.
"""

from __future__ import annotations


class UpdaterError(Exception):
    """Base class for all updater errors."""


class ConfigError(UpdaterError):
    """Startup settings are missing or invalid."""


class NetworkError(UpdaterError):
    """The remote document could not be retrieved."""


class HTTPStatusError(UpdaterError):
    """The remote server answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error: {status_code}")


class SizeError(UpdaterError):
    """The fetched payload is smaller than the configured minimum."""

    def __init__(self, size: int, minimum: int) -> None:
        self.size = size
        self.minimum = minimum
        super().__init__(f"downloaded config is too small: {size} bytes (minimum: {minimum})")


class ConfigIOError(UpdaterError):
    """A filesystem operation on the managed config file failed."""


class BackupMissingError(ConfigIOError):
    """A restore was requested but no backup file exists."""


class HookFailure(UpdaterError):
    """A hook exited nonzero or could not be spawned."""

    def __init__(self, hook_path: str, detail: str, returncode: int | None = None) -> None:
        self.hook_path = hook_path
        self.detail = detail
        self.returncode = returncode
        super().__init__(f"hook {hook_path} failed: {detail}")


def describe_error(exc: BaseException) -> str:
    """Flatten an exception and its ``__cause__`` chain into one line."""
    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None:
        text = str(current).strip() or type(current).__name__
        if text not in parts:
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)
