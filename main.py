#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py export --rows 20 --cols 30 --no-adjacent

Or use the full CLI:

    python -m tile_mosaic.cli export --help
    python -m tile_mosaic.cli split tiles-source.jpg -o tiles
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
