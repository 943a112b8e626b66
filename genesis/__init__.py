"""
Genesis Launcher

Installs, mods and launches Friday Night Funkin' engine builds.
"""

__version__ = "0.3.0"
