"""Export compositor: tiles, grout and downscaling into one raster."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from tile_mosaic.config import TileMosaicConfig
from tile_mosaic.errors import EncodingFailedError, NoValidTilesError
from tile_mosaic.image_io import RasterCanvas, TileSource
from tile_mosaic.palette import TilePalette, resolve_tiles

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class MosaicLayout:
    """Pixel geometry of an exported mosaic."""

    tile_w: int
    tile_h: int
    grout_px: int
    width: int
    height: int
    scale: float
    grout_ratio: float


@dataclass(frozen=True)
class MosaicRender:
    image: Image.Image
    layout: MosaicLayout


def compute_layout(
    tile_w: int,
    tile_h: int,
    rows: int,
    cols: int,
    tile_width_cm: float,
    grout_mm: float,
    max_canvas_dimension: int,
) -> MosaicLayout:
    """Work out tile, grout and canvas sizes in pixels.

    Grout is a fraction of the physical tile width, so its pixel size
    follows the tile pixel width. When the natural canvas exceeds
    *max_canvas_dimension* on either axis, tiles shrink uniformly and the
    grout is recomputed from the shrunken tile width.
    """
    grout_ratio = (grout_mm / 10) / tile_width_cm

    total_w = cols * tile_w + (cols - 1) * round_half_up(tile_w * grout_ratio)
    total_h = rows * tile_h + (rows - 1) * round_half_up(tile_h * grout_ratio)

    scale = min(1.0, max_canvas_dimension / max(total_w, total_h))
    if scale < 1:
        tile_w = max(1, round_half_up(tile_w * scale))
        tile_h = max(1, round_half_up(tile_h * scale))

    grout_px = round_half_up(tile_w * grout_ratio)

    return MosaicLayout(
        tile_w=tile_w,
        tile_h=tile_h,
        grout_px=grout_px,
        width=cols * tile_w + (cols - 1) * grout_px,
        height=rows * tile_h + (rows - 1) * grout_px,
        scale=scale,
        grout_ratio=grout_ratio,
    )


def tile_origin(layout: MosaicLayout, row: int, col: int) -> tuple[int, int]:
    """Top-left pixel of the cell at ``(row, col)``."""
    return col * (layout.tile_w + layout.grout_px), row * (layout.tile_h + layout.grout_px)


def render_mosaic(
    grid: np.ndarray,
    palette: TilePalette,
    config: TileMosaicConfig,
    defaults: Sequence[TileSource | None] | None = None,
) -> MosaicRender:
    """Draw the full mosaic onto a grout-coloured canvas.

    Args:
        grid:     (rows, cols) tile indices.
        palette:  Tile overrides; empty slots use *defaults*.
        config:   Tile size, grout and canvas ceiling.
        defaults: Default tile sources (``None`` = built-in tile set).

    Returns:
        The canvas image and the layout used to draw it.

    Raises:
        NoValidTilesError: No palette slot could be loaded.
    """
    images = resolve_tiles(palette, defaults)
    valid = [img for img in images if img is not None]
    if not valid:
        raise NoValidTilesError(len(images))

    rows, cols = grid.shape
    base_w, base_h = valid[0].size
    layout = compute_layout(
        base_w, base_h, rows, cols,
        config.tile_width_cm, config.grout_mm, config.max_canvas_dimension,
    )
    logger.info(
        "Canvas %dx%d  | tile %dx%d  grout=%d px  scale=%.3f",
        layout.width, layout.height, layout.tile_w, layout.tile_h,
        layout.grout_px, layout.scale,
    )

    t0 = time.perf_counter()
    canvas = RasterCanvas.create(layout.width, layout.height)
    canvas.fill(config.grout_color)

    # Resize each tile once rather than once per cell
    scaled: dict[int, Image.Image] = {}
    for (r, c), value in np.ndenumerate(grid):
        index = int(value)
        img = images[index]
        if img is None:
            continue
        if index not in scaled:
            scaled[index] = img.resize((layout.tile_w, layout.tile_h), Image.LANCZOS)
        x, y = tile_origin(layout, r, c)
        canvas.draw_image_into(scaled[index], x, y, layout.tile_w, layout.tile_h)

    logger.info("Tiles drawn  (%.1f s)", time.perf_counter() - t0)
    return MosaicRender(image=canvas.image, layout=layout)


def export_mosaic(
    grid: np.ndarray,
    palette: TilePalette,
    config: TileMosaicConfig,
    defaults: Sequence[TileSource | None] | None = None,
) -> bytes:
    """Render the mosaic and encode it as JPEG.

    Raises:
        NoValidTilesError: No palette slot could be loaded.
        EncodingFailedError: The encoder returned no data.
    """
    render = render_mosaic(grid, palette, config, defaults)
    canvas = RasterCanvas(render.image)
    data = canvas.encode("JPEG", quality=config.jpeg_quality)
    if data is None:
        raise EncodingFailedError(render.layout.width, render.layout.height)
    logger.info("Encoded %s bytes", f"{len(data):,}")
    return data


def mosaic_filename(rows: int, cols: int) -> str:
    return f"mosaic_{cols}x{rows}.jpg"


def save_mosaic(data: bytes, output_dir: str | Path, rows: int, cols: int) -> Path:
    """Write encoded mosaic bytes under the conventional file name."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / mosaic_filename(rows, cols)
    path.write_bytes(data)
    logger.info("Mosaic saved: %s", path)
    return path
