"""
Process Launcher Service

Starts an installed build and keeps the host window hidden while it runs.

Executable resolution order:
    1. Linux: native <exe>
    2. Linux: <exe>.exe through wine
    3. Windows: <exe>.exe
"""

import logging
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Tuple

from genesis.backend.handlers.filesystem_handler import FileSystemHandler
from genesis.backend.handlers.subprocess_utils import get_clean_subprocess_env
from genesis.backend.handlers.wine_utils import WineUtils
from genesis.backend.models.configuration import SystemInfo
from genesis.backend.models.errors import LaunchError
from genesis.backend.models.launch import HostWindow, NullHostWindow, Platform
from genesis.backend.services.install_state_service import native_exe_path, windows_exe_path

logger = logging.getLogger(__name__)


@contextmanager
def hidden_host_window(host_window: HostWindow):
    """Hide the host window for the duration of the block; always restore it."""
    bounds = host_window.get_bounds()
    host_window.hide()
    try:
        yield bounds
    finally:
        try:
            host_window.restore(bounds)
        except Exception as e:
            logger.error(f"Failed to restore host window: {e}")


class ProcessLauncherService:

    def __init__(self, system_info: SystemInfo, host_window: Optional[HostWindow] = None):
        self.system_info = system_info
        self.host_window = host_window or NullHostWindow()

    def resolve_executable(self, install_dir: Path, exe_name: str) -> Tuple[Path, bool]:
        """
        Returns:
            (executable path, runs through wine)

        Raises:
            LaunchError: no executable for this platform (hint ``not_found``)
        """
        platform = self.system_info.platform
        native = native_exe_path(install_dir, exe_name)
        windows = windows_exe_path(install_dir, exe_name)

        if platform == Platform.LINUX and native.is_file():
            return native, False
        if platform == Platform.LINUX and windows.is_file():
            return windows, True
        if platform == Platform.WINDOWS and windows.is_file():
            return windows, False
        raise LaunchError(f"Executable not found in: {install_dir}", hint=LaunchError.NOT_FOUND)

    def build_command(self, exe_path: Path, use_wine: bool) -> List[str]:
        if use_wine:
            wine = str(self.system_info.compat_layer_path) if self.system_info.compat_layer_path else None
            return WineUtils.wine_command(exe_path, wine)
        return [str(exe_path)]

    def launch(self, install_dir: Path, exe_name: str) -> int:
        """
        Run the game with its install directory as working directory and
        wait for it to exit.

        Returns:
            The child's exit code

        Raises:
            LaunchError: executable missing or the process could not be spawned
        """
        install_dir = Path(install_dir)
        exe_path, use_wine = self.resolve_executable(install_dir, exe_name)

        if self.system_info.platform == Platform.LINUX and not use_wine:
            FileSystemHandler.set_executable(exe_path)

        cmd = self.build_command(exe_path, use_wine)
        logger.info(f"Launching {cmd} in {install_dir}")

        with hidden_host_window(self.host_window):
            try:
                proc = subprocess.Popen(cmd, cwd=str(install_dir), env=get_clean_subprocess_env())
            except OSError as e:
                if use_wine:
                    logger.error(f"Failed to start with wine: {e}")
                    raise LaunchError(f"Error starting with Wine (is it installed?): {e}",
                                      hint=LaunchError.COMPAT_MISSING) from e
                logger.error(f"Failed to start {exe_path}: {e}")
                raise LaunchError(f"Error starting game: {e}", hint=LaunchError.SPAWN_FAILED) from e

            exit_code = proc.wait()

        if exit_code != 0:
            logger.warning(f"Game exited with code {exit_code}")
        else:
            logger.info("Game exited normally")
        return exit_code
