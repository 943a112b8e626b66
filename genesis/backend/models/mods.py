"""
Mod library data models.

A mod is identified by its folder name under the mods root. Its metadata
comes from one of three file shapes; see ``classify_mod``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

POLYMOD_META_FILE = "_polymod_meta.json"
POLYMOD_ICON_FILE = "_polymod_icon.png"
PSYCH_META_FILE = "pack.json"
PSYCH_ICON_FILE = "pack.png"

FALLBACK_DESCRIPTION = "no description"


@dataclass(frozen=True)
class PolymodMod:
    folder_name: str
    title: str
    description: str
    version: str
    icon_path: Optional[str] = None
    mod_type = "polymod"
    engine_tag = "V-Slice"


@dataclass(frozen=True)
class PsychMod:
    folder_name: str
    title: str
    description: str
    icon_path: Optional[str] = None
    version = None
    mod_type = "psych"
    engine_tag = "psych"


@dataclass(frozen=True)
class FallbackMod:
    folder_name: str
    title: str
    description: str = FALLBACK_DESCRIPTION
    icon_path = None
    version = None
    mod_type = "codename"
    engine_tag = "codee"


ModVariant = Union[PolymodMod, PsychMod, FallbackMod]


def mod_to_dict(mod: ModVariant, visible: Optional[bool] = None) -> Dict[str, Any]:
    """UI-facing representation of a classified mod."""
    data = {
        "title": mod.title,
        "description": mod.description,
        "version": mod.version,
        "modType": mod.mod_type,
        "engineKey": mod.engine_tag,
        "iconPath": mod.icon_path,
        "folderName": mod.folder_name,
    }
    if visible is not None:
        data["visible"] = visible
    return data
