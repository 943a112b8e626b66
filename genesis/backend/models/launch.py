"""
Launch Data Models

Data structures passed between the UI layer and the install/launch pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Platform(Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    OTHER = "other"


class LaunchState(Enum):
    """Pipeline states of a single launch request."""
    IDLE = "idle"
    PROBING = "probing"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    LINKING = "linking"
    LAUNCHING = "launching"
    DONE = "done"
    ERROR = "error"


class Signals:
    """Backend -> UI signal names (fire-and-forget)."""
    DOWNLOAD_PROGRESS = "download-progress"
    UNZIP_START = "unzip-start"
    DOWNLOAD_COMPLETE = "download-complete"
    GAME_READY = "game-ready"
    DOWNLOAD_ERROR = "download-error"
    DELETE_SUCCESS = "delete-success"


@dataclass
class LaunchRequest:
    """A single "play" intent built by the UI from the catalog."""
    engine_id: str
    version: str
    exe_name: str
    download_links: Dict[str, str] = field(default_factory=dict)
    auto_launch: bool = True
    name: Optional[str] = None

    @property
    def key(self):
        return (self.engine_id, self.version)

    @property
    def display_name(self) -> str:
        return self.name or f"{self.engine_id} {self.version}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LaunchRequest":
        """Build from a ``launch-game`` command payload."""
        return cls(
            engine_id=str(data.get("engine", data.get("engine_id", ""))),
            version=str(data.get("version", data.get("v", ""))),
            exe_name=str(data.get("exeName", data.get("exe_name", ""))),
            download_links=dict(data.get("links") or {}),
            auto_launch=bool(data.get("autoLaunch", data.get("auto_launch", True))),
            name=data.get("name"),
        )


@dataclass
class LaunchResult:
    """Outcome of one pipeline run."""
    state: LaunchState
    install_dir: Optional[str] = None
    error: Optional[str] = None
    launched: bool = False
    exit_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.state == LaunchState.DONE


class HostWindow:
    """
    Narrow capability over the host UI window.

    The process launcher hides the window for the lifetime of the game and
    restores it afterwards with the bounds captured before hiding.
    """

    def get_bounds(self) -> Any:
        raise NotImplementedError

    def hide(self) -> None:
        raise NotImplementedError

    def restore(self, bounds: Any) -> None:
        raise NotImplementedError


class NullHostWindow(HostWindow):
    """Host window for headless frontends; does nothing."""

    def get_bounds(self):
        return None

    def hide(self):
        pass

    def restore(self, bounds):
        pass
