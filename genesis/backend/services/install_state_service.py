"""
Install State Service

Decides whether an (engine, version) install directory holds a runnable
build for the current platform:

    native  = platform is linux   and <install>/<exe>     is a file
    compat  = platform is windows
              or linux            and <install>/<exe>.exe is a file
    installed = <install> is a directory and (native or compat)

Windows never runs the extensionless binary and any other platform is
never considered installed.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from genesis.backend.handlers.wine_utils import WineUtils
from genesis.backend.models.configuration import LauncherPaths
from genesis.backend.models.errors import InvalidInstallPathError
from genesis.backend.models.launch import Platform

logger = logging.getLogger(__name__)


def native_exe_path(install_dir: Path, exe_name: str) -> Path:
    return Path(install_dir) / exe_name


def windows_exe_path(install_dir: Path, exe_name: str) -> Path:
    return Path(install_dir) / WineUtils.windows_exe_name(exe_name)


def is_installed(install_dir: Path, exe_name: str, platform: Platform) -> bool:
    install_dir = Path(install_dir)
    native_exists = platform == Platform.LINUX and native_exe_path(install_dir, exe_name).is_file()
    compat_exists = (platform in (Platform.WINDOWS, Platform.LINUX)
                     and windows_exe_path(install_dir, exe_name).is_file())
    return install_dir.is_dir() and (native_exists or compat_exists)


class InstallStateService:
    """Install probing bound to the launcher's versions root and platform."""

    def __init__(self, paths: LauncherPaths, platform: Platform):
        self.paths = paths
        self.platform = platform

    def install_dir(self, engine_id: str, version: str) -> Path:
        return self.paths.install_dir(engine_id, version)

    def check_install_status(self, engine_id: str, version: str, exe_name: str) -> bool:
        try:
            install_dir = self.install_dir(engine_id, version)
        except InvalidInstallPathError as e:
            logger.warning(str(e))
            return False
        installed = is_installed(install_dir, exe_name, self.platform)
        logger.debug(f"Install status {engine_id}/{version} ({exe_name}): {installed}")
        return installed

    def check_install_status_async(self, engine_id: str, version: str, exe_name: str,
                                   callback: Callable[[bool], None]) -> threading.Thread:
        """
        Probe in a background thread and hand the result to callback.
        Probe errors are logged and reported as not installed.
        """
        def probe_worker():
            try:
                result = self.check_install_status(engine_id, version, exe_name)
            except Exception as e:
                logger.error(f"Error probing install {engine_id}/{version}: {e}")
                result = False
            callback(result)

        thread = threading.Thread(target=probe_worker, daemon=True)
        thread.start()
        return thread

    def installed_versions(self, engine_id: str, exe_name: str) -> list:
        """Version folders of an engine that hold a runnable build."""
        engine_dir = self.paths.versions_root / engine_id
        if not engine_dir.is_dir():
            return []
        return [
            child.name for child in engine_dir.iterdir()
            if child.is_dir() and is_installed(child, exe_name, self.platform)
        ]
