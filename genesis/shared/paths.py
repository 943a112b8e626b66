"""
Launcher data directory layout.

    <data_dir>/versions/<engine>/<version>/   extracted engine builds
    <data_dir>/mods/<mod folder>/             canonical mod library
    <data_dir>/logs/                          log files
    <data_dir>/settings.json                  settings store
"""

import os
import sys
from pathlib import Path

DATA_DIR_ENV = "GENESIS_DATA_DIR"
LAUNCHER_DIR_NAME = "genesislauncher"


def get_data_dir() -> Path:
    """Return the launcher data directory (not created)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / LAUNCHER_DIR_NAME


def get_versions_dir() -> Path:
    return get_data_dir() / "versions"


def get_mods_dir() -> Path:
    return get_data_dir() / "mods"


def get_logs_dir() -> Path:
    return get_data_dir() / "logs"


def get_settings_file() -> Path:
    return get_data_dir() / "settings.json"
