#!/usr/bin/env python3
"""
Entry point for the Genesis Launcher

Usage: python -m genesis
"""

import sys

from genesis.frontends.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
