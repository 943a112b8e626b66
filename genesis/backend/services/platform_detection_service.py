#!/usr/bin/env python3
"""
Platform Detection Service

Centralizes platform detection logic to be performed once at application startup
and shared across all components.
"""

import logging
import sys
from pathlib import Path

from genesis.backend.models.launch import Platform

logger = logging.getLogger(__name__)


def platform_from_sys(sys_platform: str) -> Platform:
    if sys_platform == "win32":
        return Platform.WINDOWS
    if sys_platform.startswith("linux"):
        return Platform.LINUX
    return Platform.OTHER


class PlatformDetectionService:
    """
    Service for detecting platform-specific information once at startup
    """

    _instance = None
    _platform = None

    def __new__(cls):
        """Singleton pattern to ensure only one instance"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize platform detection if not already done"""
        if self._platform is None:
            self._detect_platform()

    def _detect_platform(self):
        """Perform platform detection once"""
        PlatformDetectionService._platform = platform_from_sys(sys.platform)
        logger.debug(f"Platform detection complete: platform={self._platform.value}")

    @property
    def platform(self) -> Platform:
        if self._platform is None:
            self._detect_platform()
        return self._platform

    def get_system_info(self):
        """SystemInfo for the backend services, with the compatibility layer located on Linux."""
        from genesis.backend.handlers.wine_utils import WineUtils
        from genesis.backend.models.configuration import SystemInfo

        wine = WineUtils.find_wine_binary() if self.platform == Platform.LINUX else None
        return SystemInfo(
            platform=self.platform,
            compat_layer_path=Path(wine) if wine else None,
        )

    @classmethod
    def get_instance(cls):
        """Get the singleton instance"""
        return cls()
