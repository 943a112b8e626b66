"""
Engine catalog data models.

The catalog (``versions.yaml``) looks like::

    engines:
      - id: codename
        name: Codename Engine
        icon: icons/codename.png
        executable_name: CodenameEngine
        versions:
          - version: "1.0"
            download_urls:
              windows: https://...
              linux: https://...
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

_NATURAL_SPLIT = re.compile(r"(\d+)")


def natural_version_key(version: str) -> Tuple:
    """Sort key comparing digit runs numerically ("0.2.10" > "0.2.9")."""
    parts = _NATURAL_SPLIT.split(str(version).strip().lower())
    key = []
    for part in parts:
        if not part:
            continue
        if part.isdigit():
            key.append((1, int(part), ""))
        else:
            key.append((0, 0, part))
    return tuple(key)


@dataclass
class VersionEntry:
    """A single downloadable version of an engine."""
    version: str
    download_urls: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionEntry":
        if "version" not in data:
            raise ValueError("Version entry missing 'version'")
        urls = data.get("download_urls") or {}
        return cls(
            version=str(data["version"]),
            download_urls={str(k): str(v) for k, v in urls.items() if v},
        )


@dataclass
class EngineCatalogEntry:
    """An engine build family and its versions."""
    id: str
    display_name: str
    executable_name: str
    icon_ref: Optional[str] = None
    icon_is_path: bool = False
    versions: List[VersionEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineCatalogEntry":
        required = ["id", "executable_name"]
        missing = [key for key in required if key not in data]
        if missing:
            raise ValueError(f"Engine entry missing keys: {', '.join(missing)}")

        icon_path = data.get("icon_path") or data.get("icon")
        versions = [VersionEntry.from_dict(v) for v in data.get("versions") or []]
        versions.sort(key=lambda v: natural_version_key(v.version), reverse=True)
        return cls(
            id=str(data["id"]),
            display_name=str(data.get("name", data["id"])),
            executable_name=str(data["executable_name"]),
            icon_ref=icon_path or data.get("icon_base64"),
            icon_is_path=bool(icon_path),
            versions=versions,
        )

    def get_version(self, version: str) -> Optional[VersionEntry]:
        for entry in self.versions:
            if entry.version == version:
                return entry
        return None


@dataclass
class Catalog:
    engines: List[EngineCatalogEntry] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for engine in self.engines:
            if engine.id in seen:
                raise ValueError(f"Duplicate engine id in catalog: {engine.id}")
            seen.add(engine.id)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Catalog":
        if not data:
            return cls()
        return cls(engines=[EngineCatalogEntry.from_dict(e) for e in data.get("engines") or []])

    def get_engine(self, engine_id: str) -> Optional[EngineCatalogEntry]:
        for engine in self.engines:
            if engine.id == engine_id:
                return engine
        return None
