"""
ModLinkHandler module.

Exposes the shared mod library inside an install directory as
``<install>/mods/<mod folder>`` directory links, skipping hidden mods.
"""

import logging
import os
import shutil
import subprocess
import threading
import weakref
from pathlib import Path
from typing import Mapping, Tuple

from genesis.backend.models.errors import ModLinkError

logger = logging.getLogger(__name__)

INSTALL_MODS_DIR = "mods"


class ModLinkHandler:
    """
    Rebuilds an install's mods folder. Rebuilds of the same install
    directory are serialized; different installs proceed independently.
    """

    # Entries disappear once no rebuild holds the lock.
    _locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
    _locks_guard = threading.Lock()

    @classmethod
    def _lock_for(cls, install_dir: Path) -> threading.Lock:
        key = os.path.normcase(os.path.abspath(install_dir))
        with cls._locks_guard:
            lock = cls._locks.get(key)
            if lock is None:
                lock = cls._locks[key] = threading.Lock()
            return lock

    def materialize_links(self, install_dir: Path, mods_root: Path,
                          visibility: Mapping[str, bool]) -> Tuple[int, int]:
        """
        Recreate install_dir/mods holding one link per visible mod.

        Args:
            install_dir: Extracted build directory
            mods_root: Canonical mod library
            visibility: folder name -> visible; missing means visible

        Returns:
            (linked, total) mod counts

        Raises:
            ModLinkError: mods_root or install_dir/mods could not be created
        """
        install_dir = Path(install_dir)
        mods_root = Path(mods_root)
        install_mods = install_dir / INSTALL_MODS_DIR

        with self._lock_for(install_dir):
            try:
                mods_root.mkdir(parents=True, exist_ok=True)
                self._remove_entry(install_mods)
                install_mods.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Could not prepare mods folder in {install_dir}: {e}")
                raise ModLinkError(f"Could not prepare mods folder: {e}") from e

            folders = sorted(p for p in mods_root.iterdir() if p.is_dir())
            linked = 0
            for mod_dir in folders:
                if visibility.get(mod_dir.name) is False:
                    logger.debug(f"Skipping hidden mod {mod_dir.name}")
                    continue
                try:
                    self._create_dir_link(mod_dir.resolve(), install_mods / mod_dir.name)
                    linked += 1
                except (OSError, subprocess.SubprocessError) as e:
                    logger.error(f"Could not link mod {mod_dir.name}: {e}")

            logger.info(f"Linked mods in {install_mods} ({linked}/{len(folders)} mods linked)")
            return linked, len(folders)

    @staticmethod
    def _remove_entry(path: Path) -> None:
        """Remove a file, link, junction or directory tree at path (links are not followed)."""
        if path.is_symlink():
            os.unlink(path)
        elif os.name == 'nt' and _is_junction(path):
            os.rmdir(path)
        elif path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()

    @staticmethod
    def _create_dir_link(source: Path, link_path: Path) -> None:
        if os.name == 'nt':
            # Junctions need no elevated privileges on Windows
            result = subprocess.run(
                ['cmd', '/c', 'mklink', '/J', str(link_path), str(source)],
                capture_output=True, text=True, timeout=30
            )
            if result.returncode != 0:
                raise OSError(result.stderr.strip() or result.stdout.strip() or "mklink failed")
        else:
            os.symlink(source, link_path, target_is_directory=True)


def _is_junction(path: Path) -> bool:
    is_junction = getattr(path, 'is_junction', None)
    if is_junction is not None:
        return is_junction()
    try:
        return bool(os.readlink(path)) and path.is_dir()
    except (OSError, ValueError):
        return False
