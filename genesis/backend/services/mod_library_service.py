"""
Mod Library Service

Operations on the shared mod library: listing, validating, installing
(copying into the library), deleting and toggling visibility. Exposing mods
to a build is done separately by ModLinkHandler.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from genesis.backend.handlers.config_handler import ConfigHandler
from genesis.backend.handlers.filesystem_handler import FileSystemHandler
from genesis.backend.handlers.mod_classifier import read_mod_folder
from genesis.backend.handlers.mod_link_handler import ModLinkHandler
from genesis.backend.models.mods import ModVariant, mod_to_dict

logger = logging.getLogger(__name__)

SCAN_WORKERS = 8


class ModLibraryService:
    """Service for the canonical mod library under the mods root."""

    def __init__(self, mods_root: Path, config_handler: Optional[ConfigHandler] = None):
        self.mods_root = Path(mods_root)
        self.config_handler = config_handler or ConfigHandler()
        self.link_handler = ModLinkHandler()

    def _classify_safely(self, mod_dir: Path) -> Optional[ModVariant]:
        try:
            return read_mod_folder(mod_dir)
        except Exception as e:
            logger.warning(f"Could not read mod folder {mod_dir.name}: {e}")
            return None

    def scan(self) -> List[ModVariant]:
        """Classify every mod folder concurrently; unreadable folders are dropped."""
        try:
            folders = sorted(p for p in self.mods_root.iterdir() if p.is_dir())
        except OSError as e:
            logger.error(f"Error scanning mods directory {self.mods_root}: {e}")
            return []

        if not folders:
            return []
        with ThreadPoolExecutor(max_workers=min(SCAN_WORKERS, len(folders))) as pool:
            results = list(pool.map(self._classify_safely, folders))
        return [mod for mod in results if mod is not None]

    def get_installed(self) -> List[Dict[str, Any]]:
        """``mods:get-installed``: classified mods with their visibility flag."""
        visibility = self.config_handler.get_mod_visibility()
        return [
            mod_to_dict(mod, visible=visibility.get(mod.folder_name) is not False)
            for mod in self.scan()
        ]

    def validate_mod(self, selected_path: Optional[str]) -> Dict[str, Any]:
        """
        ``mods:validate-mod``: check a folder picked by the user before install.
        """
        if not selected_path:
            return {'status': 'cancelled'}

        source = Path(selected_path)
        if not source.is_dir():
            return {'error': f'Not a folder: {selected_path}'}

        folder_name = source.name
        if (self.mods_root / folder_name).exists():
            return {'error': f'The mod "{folder_name}" is already installed.'}

        mod = read_mod_folder(source, folder_name)
        return {
            'success': True,
            'modData': mod_to_dict(mod),
            'selectedPath': str(source),
            'folderName': folder_name,
        }

    def install_mod(self, selected_path: str, folder_name: str) -> Dict[str, Any]:
        """``mods:install-mod``: copy a mod folder into the library."""
        if not self._valid_folder_name(folder_name):
            return {'error': 'Invalid folder name.'}
        target = self.mods_root / folder_name
        if target.exists():
            return {'error': f'The mod "{folder_name}" is already installed.'}
        try:
            FileSystemHandler.copy_directory(Path(selected_path), target)
            logger.info(f"Installed mod {folder_name}")
            return {'success': True}
        except OSError as e:
            logger.error(f"Failed to install mod {folder_name}: {e}")
            return {'error': f'Error copying the mod folder: {e}'}

    def delete_mod(self, folder_name: str) -> Dict[str, Any]:
        """``mods:delete-mod``: remove a mod from the library."""
        if not self._valid_folder_name(folder_name):
            return {'error': 'Invalid folder name.'}
        try:
            FileSystemHandler.delete_directory(self.mods_root / folder_name)
        except OSError as e:
            logger.error(f"Failed to delete mod {folder_name}: {e}")
            return {'error': f'Error deleting the mod folder: {e}'}
        self.config_handler.forget_mod(folder_name)
        logger.info(f"Deleted mod {folder_name}")
        return {'success': True}

    def set_visibility(self, folder_name: str, visible: bool) -> Dict[str, Any]:
        if not (self.mods_root / folder_name).is_dir():
            return {'error': f'Mod not found: {folder_name}'}
        if not self.config_handler.set_mod_visible(folder_name, visible):
            return {'error': 'Could not save settings.'}
        return {'success': True}

    def link_into(self, install_dir: Path):
        """Materialize the visible mods inside an install directory."""
        return self.link_handler.materialize_links(
            install_dir, self.mods_root, self.config_handler.get_mod_visibility()
        )

    @staticmethod
    def _valid_folder_name(folder_name: Optional[str]) -> bool:
        if not folder_name or folder_name in ('.', '..'):
            return False
        return '/' not in folder_name and '\\' not in folder_name
