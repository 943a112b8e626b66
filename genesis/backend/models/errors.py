"""
Launcher exception hierarchy.

Handlers raise these; the orchestrator collapses any of them into a single
``download-error`` signal for the UI.
"""

from typing import Optional


class LauncherError(Exception):
    """Base class for all launcher errors."""


class TransferError(LauncherError):
    """Download failed (connection error or unexpected HTTP status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(LauncherError):
    """Archive could not be extracted."""


class ModLinkError(LauncherError):
    """The install's mods folder could not be prepared."""


class InvalidInstallPathError(LauncherError):
    """An engine id or version would place the install outside the versions root."""


class NoDownloadLinkError(LauncherError):
    """The catalog has no usable download link for this platform."""


class LaunchInProgressError(LauncherError):
    """A pipeline for the same (engine, version) is already running."""


class LaunchError(LauncherError):
    """The game executable could not be started."""

    NOT_FOUND = "not_found"
    COMPAT_MISSING = "compat_missing"
    SPAWN_FAILED = "spawn_failed"

    def __init__(self, message: str, hint: str = SPAWN_FAILED):
        super().__init__(message)
        self.hint = hint
