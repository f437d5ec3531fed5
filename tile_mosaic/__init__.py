"""
Tile Mosaic
===========

Lay out a grid of up to eight tile images and export it as one JPEG,
with proportional grout lines between the tiles.

- **Grid generator**: random fill, optionally avoiding equal neighbours
- **Compositor**: pixel-exact tiling, capped at 8000 px per side
"""

__version__ = "1.0.0"

from tile_mosaic.compositor import (
    MosaicLayout,
    compute_layout,
    export_mosaic,
    mosaic_filename,
    render_mosaic,
    save_mosaic,
)
from tile_mosaic.config import TILE_COUNT, TileMosaicConfig
from tile_mosaic.errors import EncodingFailedError, NoValidTilesError, TileMosaicError
from tile_mosaic.grid import cycle_next, generate_grid
from tile_mosaic.image_io import RasterCanvas, load_image
from tile_mosaic.palette import TilePalette, resolve_tiles

__all__ = [
    "TILE_COUNT",
    "EncodingFailedError",
    "MosaicLayout",
    "NoValidTilesError",
    "RasterCanvas",
    "TileMosaicConfig",
    "TileMosaicError",
    "TilePalette",
    "compute_layout",
    "cycle_next",
    "export_mosaic",
    "generate_grid",
    "load_image",
    "mosaic_filename",
    "render_mosaic",
    "resolve_tiles",
    "save_mosaic",
]
