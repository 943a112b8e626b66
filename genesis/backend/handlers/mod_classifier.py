"""
Mod metadata classification.

A mod folder is probed for metadata in strict priority order; the first
structurally valid match wins and anything malformed falls through:

    1. _polymod_meta.json  {title, description, mod_version}  -> PolymodMod
    2. pack.json           {name, description}                -> PsychMod
    3. nothing matched                                        -> FallbackMod
"""

import json
import logging
from pathlib import Path
from typing import Optional

from genesis.backend.models.mods import (
    POLYMOD_ICON_FILE,
    POLYMOD_META_FILE,
    PSYCH_ICON_FILE,
    PSYCH_META_FILE,
    FallbackMod,
    ModVariant,
    PolymodMod,
    PsychMod,
)

logger = logging.getLogger(__name__)


def _parse_object(raw: Optional[str]) -> Optional[dict]:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _has_fields(data: dict, *fields) -> bool:
    return all(data.get(name) for name in fields)


def classify_mod(folder_name: str,
                 polymod_meta: Optional[str] = None,
                 psych_meta: Optional[str] = None,
                 polymod_icon: Optional[str] = None,
                 psych_icon: Optional[str] = None) -> ModVariant:
    """
    Classify a mod from the raw contents of its metadata files.

    Args:
        folder_name: Mod folder name (its identity)
        polymod_meta: Text of _polymod_meta.json, or None if absent
        psych_meta: Text of pack.json, or None if absent
        polymod_icon: Icon URI to attach to a Polymod match
        psych_icon: Icon URI to attach to a Psych match
    """
    meta = _parse_object(polymod_meta)
    if meta is not None and _has_fields(meta, 'title', 'description', 'mod_version'):
        return PolymodMod(
            folder_name=folder_name,
            title=str(meta['title']),
            description=str(meta['description']),
            version=str(meta['mod_version']),
            icon_path=polymod_icon,
        )

    meta = _parse_object(psych_meta)
    if meta is not None and _has_fields(meta, 'name', 'description'):
        return PsychMod(
            folder_name=folder_name,
            title=str(meta['name']),
            description=str(meta['description']),
            icon_path=psych_icon,
        )

    return FallbackMod(folder_name=folder_name, title=folder_name)


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding='utf-8-sig')
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Unreadable metadata file {path}: {e}")
        return None


def _icon_uri(path: Path) -> Optional[str]:
    return path.resolve().as_uri() if path.is_file() else None


def read_mod_folder(mod_dir: Path, folder_name: Optional[str] = None) -> ModVariant:
    """Read a mod folder's metadata files and classify it."""
    mod_dir = Path(mod_dir)
    return classify_mod(
        folder_name or mod_dir.name,
        polymod_meta=_read_text(mod_dir / POLYMOD_META_FILE),
        psych_meta=_read_text(mod_dir / PSYCH_META_FILE),
        polymod_icon=_icon_uri(mod_dir / POLYMOD_ICON_FILE),
        psych_icon=_icon_uri(mod_dir / PSYCH_ICON_FILE),
    )
