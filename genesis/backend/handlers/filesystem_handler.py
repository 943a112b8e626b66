"""
FileSystemHandler module for managing file system operations.
This module handles directory creation, copying, removal and permissions.
"""

import logging
import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path

# Initialize logger for the module
logger = logging.getLogger(__name__)


class FileSystemHandler:

    @staticmethod
    def copy_directory(source: Path, destination: Path, dirs_exist_ok: bool = False) -> None:
        """
        Copy a directory and its contents.

        Raises:
            NotADirectoryError: source is not a directory
            OSError: the copy failed
        """
        source = Path(source)
        destination = Path(destination)
        if not source.is_dir():
            raise NotADirectoryError(f"Source is not a directory: {source}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, destination, dirs_exist_ok=dirs_exist_ok)
        logger.info(f"Copied directory {source} to {destination}")

    @staticmethod
    def delete_directory(path: Path) -> bool:
        """
        Delete a directory tree. Returns False if it did not exist.

        Raises:
            OSError: the tree exists but could not be removed
        """
        path = Path(path)
        if not path.exists() and not path.is_symlink():
            return False
        if path.is_symlink():
            path.unlink()
        else:
            shutil.rmtree(path)
        logger.info(f"Deleted {path}")
        return True

    @staticmethod
    def set_executable(path: Path) -> bool:
        """Add execute bits (u+x, g+x, o+x). Failures are logged and ignored."""
        try:
            mode = os.stat(path).st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            return True
        except Exception as e:
            logger.warning(f"Could not set execute permission on {path}: {e}")
            return False

    @staticmethod
    def open_in_file_manager(path: Path) -> None:
        """
        Open a directory in the desktop file manager.

        Raises:
            OSError: no file manager could be started
        """
        path = Path(path)
        if sys.platform == 'win32':
            os.startfile(str(path))  # type: ignore[attr-defined]
            return
        opener = 'open' if sys.platform == 'darwin' else 'xdg-open'
        if not shutil.which(opener):
            raise FileNotFoundError(f"{opener} not found")
        subprocess.Popen([opener, str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
