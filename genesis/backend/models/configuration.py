"""
Configuration Data Models

System context shared by the backend services.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import InvalidInstallPathError
from .launch import Platform


def _valid_segment(segment: str) -> bool:
    if not segment or segment in (".", ".."):
        return False
    return "/" not in segment and "\\" not in segment


@dataclass
class SystemInfo:
    """System information context."""
    platform: Platform
    compat_layer_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'platform': self.platform.value,
            'compat_layer_path': str(self.compat_layer_path) if self.compat_layer_path else None,
        }


@dataclass
class LauncherPaths:
    """Root directories the backend operates on."""
    versions_root: Path
    mods_root: Path

    def __post_init__(self):
        """Convert string paths to Path objects."""
        if isinstance(self.versions_root, str):
            self.versions_root = Path(self.versions_root)
        if isinstance(self.mods_root, str):
            self.mods_root = Path(self.mods_root)

    def install_dir(self, engine_id: str, version: str) -> Path:
        """
        <versions_root>/<engine_id>/<version>.

        Raises:
            InvalidInstallPathError: either segment is empty, "." or "..", or
                contains a path separator
        """
        for segment in (engine_id, version):
            if not _valid_segment(segment):
                raise InvalidInstallPathError(f"Invalid install path segment: {segment!r}")
        return self.versions_root / engine_id / version

    @classmethod
    def default(cls) -> 'LauncherPaths':
        from genesis.shared.paths import get_mods_dir, get_versions_dir
        return cls(versions_root=get_versions_dir(), mods_root=get_mods_dir())
