"""
CLI frontend for the Genesis Launcher
"""
