"""
Version Service

Installed-version listing and per-install management commands
(open folder, delete, status).
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from genesis.backend.handlers.filesystem_handler import FileSystemHandler
from genesis.backend.models.catalog import Catalog, natural_version_key
from genesis.backend.models.errors import InvalidInstallPathError
from genesis.backend.models.launch import Signals
from genesis.backend.services.install_state_service import InstallStateService

logger = logging.getLogger(__name__)

Emitter = Callable[[str, Dict[str, Any]], None]


class VersionService:

    def __init__(self, install_state: InstallStateService, emit: Optional[Emitter] = None):
        self.install_state = install_state
        self.emit = emit or (lambda name, payload: None)

    def get_installed_versions(self, catalog: Catalog) -> List[Dict[str, Any]]:
        """
        ``get-installed-versions``: engines from the catalog with at least one
        runnable install, newest version first.
        """
        versions_root = self.install_state.paths.versions_root
        installed = []
        try:
            engine_dirs = sorted(p for p in versions_root.iterdir() if p.is_dir())
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Error scanning installed versions: {e}")
            return []

        for engine_dir in engine_dirs:
            engine = catalog.get_engine(engine_dir.name)
            if engine is None:
                logger.debug(f"Skipping {engine_dir.name}: not in catalog")
                continue
            versions = self.install_state.installed_versions(engine.id, engine.executable_name)
            if not versions:
                continue
            versions.sort(key=natural_version_key, reverse=True)
            installed.append({
                'key': engine.id,
                'name': engine.display_name,
                'icon': engine.icon_ref,
                'icon_is_path': engine.icon_is_path,
                'versions': versions,
            })
        return installed

    def check_install_status(self, engine_id: str, version: str, exe_name: str) -> bool:
        return self.install_state.check_install_status(engine_id, version, exe_name)

    def _install_dir(self, engine_id: str, version: str) -> Optional[Path]:
        try:
            return self.install_state.install_dir(engine_id, version)
        except InvalidInstallPathError as e:
            logger.error(str(e))
            self.emit(Signals.DOWNLOAD_ERROR, {'error': str(e)})
            return None

    def open_install_path(self, engine_id: str, version: str) -> bool:
        install_dir = self._install_dir(engine_id, version)
        if install_dir is None:
            return False
        if not install_dir.is_dir():
            logger.warning(f"Install folder does not exist: {install_dir}")
            self.emit(Signals.DOWNLOAD_ERROR, {'error': f'Folder does not exist: {install_dir}'})
            return False
        try:
            FileSystemHandler.open_in_file_manager(install_dir)
            return True
        except OSError as e:
            logger.error(f"Could not open {install_dir}: {e}")
            self.emit(Signals.DOWNLOAD_ERROR, {'error': f'Could not open folder: {e}'})
            return False

    def delete_install(self, engine_id: str, version: str, wait: bool = False) -> Optional[threading.Thread]:
        """
        ``delete-install``: remove the install tree off the caller's thread,
        then emit ``delete-success`` (or ``download-error``).
        """
        install_dir = self._install_dir(engine_id, version)
        if install_dir is None:
            return None

        def delete_worker():
            try:
                FileSystemHandler.delete_directory(install_dir)
            except OSError as e:
                logger.error(f"Error deleting {install_dir}: {e}")
                self.emit(Signals.DOWNLOAD_ERROR, {'error': f'Error deleting: {e}'})
                return
            self.emit(Signals.DELETE_SUCCESS, {'engine': engine_id, 'version': version})

        thread = threading.Thread(target=delete_worker, daemon=True)
        thread.start()
        if wait:
            thread.join()
        return thread
