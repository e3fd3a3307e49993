"""
Main entry point for the tilemap package.

Allows running: python -m tilemap <command>
"""

import sys
from tilemap.cli import main

if __name__ == "__main__":
    sys.exit(main())
