#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Wine Utilities Module
Locates the compatibility layer used to run Windows builds on Linux
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional

# Initialize logger
logger = logging.getLogger(__name__)

WINE_ENV_OVERRIDE = "GENESIS_WINE"
WINDOWS_EXE_SUFFIX = ".exe"


class WineUtils:
    """
    Utilities for wine-related operations
    """

    @staticmethod
    def find_wine_binary() -> Optional[str]:
        """
        Find the wine executable.

        $GENESIS_WINE wins, then wine/wine64 on PATH, then common install locations.
        Returns the path, or None if not found.
        """
        override = os.environ.get(WINE_ENV_OVERRIDE)
        if override:
            if Path(override).is_file() or shutil.which(override):
                return override
            logger.warning(f"{WINE_ENV_OVERRIDE}={override} does not point to an executable")

        for name in ("wine", "wine64"):
            found = shutil.which(name)
            if found:
                logger.debug(f"Found wine on PATH: {found}")
                return found

        for candidate in WineUtils._common_wine_locations():
            if candidate.is_file():
                logger.debug(f"Found wine at {candidate}")
                return str(candidate)

        logger.debug("No wine binary found")
        return None

    @staticmethod
    def _common_wine_locations() -> List[Path]:
        return [
            Path("/usr/bin/wine"),
            Path("/usr/local/bin/wine"),
            Path("/opt/wine-stable/bin/wine"),
            Path("/opt/wine-staging/bin/wine"),
            Path.home() / ".local/bin/wine",
        ]

    @staticmethod
    def wine_command(exe_path: Path, wine_binary: Optional[str] = None) -> List[str]:
        """argv that runs a Windows executable through wine."""
        return [wine_binary or WineUtils.find_wine_binary() or "wine", str(exe_path)]

    @staticmethod
    def windows_exe_name(exe_name: str) -> str:
        """Executable name with the Windows suffix appended."""
        return f"{exe_name}{WINDOWS_EXE_SUFFIX}"
