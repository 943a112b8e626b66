#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration Handler Module
Handles the launcher settings store (settings.json)
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

# Initialize logger
logger = logging.getLogger(__name__)

CONFIG_VERSION = "0.3.0"

DEFAULT_SETTINGS = {
    "version": CONFIG_VERSION,
    "theme": "funkin",
    "language": "es",
    "autoLaunch": True,
    "soundEffects": True,
    "customCursor": True,
    "modVisibility": {},
}


class ConfigHandler:
    """
    Handles application configuration and settings
    Singleton pattern ensures all code shares the same instance
    """
    _instance = None
    _initialized = False
    # Serializes read-modify-write cycles on the settings file
    _write_lock = threading.RLock()

    def __new__(cls, config_file: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super(ConfigHandler, cls).__new__(cls)
        return cls._instance

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration handler with default settings"""
        if ConfigHandler._initialized:
            return
        ConfigHandler._initialized = True

        if config_file is None:
            from genesis.shared.paths import get_settings_file
            config_file = get_settings_file()
        self.config_file = Path(config_file)
        self.config_dir = self.config_file.parent
        self.settings = copy.deepcopy(DEFAULT_SETTINGS)

        self._load_config()
        self._migrate_config()

    @classmethod
    def reset_instance(cls):
        """Drop the shared instance so the next call re-reads its paths."""
        with cls._write_lock:
            cls._instance = None
            cls._initialized = False

    def _load_config(self):
        """Load configuration from file and update in-memory cache."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    saved_config = json.load(f)
                if isinstance(saved_config, dict):
                    self.settings.update(saved_config)
                    logger.debug("Loaded configuration from file")
                else:
                    logger.error("Settings file is not a JSON object, using defaults")
            else:
                logger.debug("No configuration file found, using defaults")
                self._create_config_dir()
        except Exception as e:
            logger.error(f"Error loading configuration: {e}")

    def _migrate_config(self):
        """
        Migrate configuration between versions
        Handles breaking changes and data format updates
        """
        current_version = str(self.settings.get("version") or "0.0.0")
        if current_version == CONFIG_VERSION:
            return

        from packaging import version
        try:
            outdated = version.parse(current_version) < version.parse(CONFIG_VERSION)
        except version.InvalidVersion:
            logger.warning(f"Unparseable config version '{current_version}', resetting it")
            outdated = True

        if not outdated:
            return

        logger.info(f"Migrating config from {current_version} to {CONFIG_VERSION}")

        # Settings written before per-mod visibility existed may hold a
        # non-dict value here
        if not isinstance(self.settings.get("modVisibility"), dict):
            self.settings["modVisibility"] = {}

        obsolete_keys = ["modsLinked", "lastNews"]
        removed_count = 0
        for key in obsolete_keys:
            if key in self.settings:
                del self.settings[key]
                removed_count += 1
        if removed_count > 0:
            logger.info(f"Removed {removed_count} obsolete config keys")

        self.settings["version"] = CONFIG_VERSION
        if self.config_file.exists():
            self.save_config()
        logger.info("Config migration completed")

    def _read_config_from_disk(self) -> Dict:
        """
        Read configuration directly from disk without caching.
        Returns merged config (defaults + saved values).
        """
        try:
            config = copy.deepcopy(self.settings)
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    saved_config = json.load(f)
                if isinstance(saved_config, dict):
                    config.update(saved_config)
            return config
        except Exception as e:
            logger.error(f"Error reading configuration from disk: {e}")
            return copy.deepcopy(self.settings)

    def _create_config_dir(self):
        """Create configuration directory if it doesn't exist"""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            logger.debug(f"Created configuration directory: {self.config_dir}")
        except Exception as e:
            logger.error(f"Error creating configuration directory: {e}")

    def save_config(self) -> bool:
        """Save current configuration to file"""
        with self._write_lock:
            try:
                self._create_config_dir()
                tmp_file = self.config_file.with_suffix(self.config_file.suffix + ".tmp")
                with open(tmp_file, 'w', encoding='utf-8') as f:
                    json.dump(self.settings, f, indent=2)
                os.replace(tmp_file, self.config_file)
                logger.debug("Saved configuration to file")
                return True
            except Exception as e:
                logger.error(f"Error saving configuration: {e}")
                return False

    def get(self, key, default=None):
        """
        Get a configuration value by key.
        Always reads fresh from disk to avoid stale data.
        """
        config = self._read_config_from_disk()
        return config.get(key, default)

    def get_all(self) -> Dict:
        """Full settings blob (defaults merged with saved values)."""
        return self._read_config_from_disk()

    def set(self, key, value):
        """Set a configuration value"""
        with self._write_lock:
            self.settings[key] = value
        return True

    def get_mod_visibility(self) -> Dict[str, bool]:
        """
        Current per-mod visibility map. Missing entries mean visible.
        """
        visibility = self.get("modVisibility", {})
        if not isinstance(visibility, dict):
            logger.warning("modVisibility in settings is not a mapping, ignoring it")
            return {}
        return dict(visibility)

    def set_mod_visible(self, folder_name: str, visible: bool) -> bool:
        """Persist one mod's visibility flag."""
        with self._write_lock:
            self.settings = self._read_config_from_disk()
            visibility = self.settings.get("modVisibility")
            if not isinstance(visibility, dict):
                visibility = {}
            visibility[folder_name] = bool(visible)
            self.settings["modVisibility"] = visibility
            return self.save_config()

    def forget_mod(self, folder_name: str) -> bool:
        """Drop a mod's visibility entry (after the mod is deleted)."""
        with self._write_lock:
            self.settings = self._read_config_from_disk()
            visibility = self.settings.get("modVisibility")
            if not isinstance(visibility, dict) or folder_name not in visibility:
                return True
            del visibility[folder_name]
            return self.save_config()
