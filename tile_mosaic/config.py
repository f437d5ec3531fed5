"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path

from PIL import ImageColor

TILE_COUNT = 8
MAX_CANVAS_DIMENSION = 8000

GRID_BOUNDS = (1, 50)
TILE_CM_BOUNDS = (5, 60)
GROUT_MM_BOUNDS = (0, 10)
QUALITY_BOUNDS = (1, 100)

Color = str | tuple[int, int, int]


@dataclass(frozen=True)
class TileMosaicConfig:
    """All tuneable parameters for a mosaic export.

    Attributes:
        rows:                   Number of tile rows in the grid.
        cols:                   Number of tile columns in the grid.
        tile_width_cm:          Physical tile width; grout is sized relative to it.
        tile_height_cm:         Physical tile height.
        grout_mm:               Grout line thickness in millimetres.
        grout_color:            Grout colour, any Pillow colour string or RGB tuple.
        no_adjacent_duplicates: Forbid equal neighbouring tiles.
        seed:                   Random seed for grid generation (None = non-deterministic).
        max_canvas_dimension:   Hard ceiling on output width and height in pixels.
        jpeg_quality:           JPEG quality for the exported mosaic.
        output_dir:             Folder for exported mosaics.
    """

    # Grid
    rows: int = 16
    cols: int = 16
    no_adjacent_duplicates: bool = False
    seed: int | None = None

    # Physical tile size
    tile_width_cm: int = 10
    tile_height_cm: int = 10

    # Grout
    grout_mm: float = 2
    grout_color: Color = "#808080"

    # Output
    max_canvas_dimension: int = MAX_CANVAS_DIMENSION
    jpeg_quality: int = 95
    output_dir: Path = field(default_factory=lambda: Path("output"))

    def validate(self) -> TileMosaicConfig:
        """Check every bounded field, raising ``ValueError`` on the first miss."""
        bounds = {
            "rows": GRID_BOUNDS,
            "cols": GRID_BOUNDS,
            "tile_width_cm": TILE_CM_BOUNDS,
            "tile_height_cm": TILE_CM_BOUNDS,
            "grout_mm": GROUT_MM_BOUNDS,
            "jpeg_quality": QUALITY_BOUNDS,
        }
        for f in fields(self):
            if f.name not in bounds:
                continue
            lo, hi = bounds[f.name]
            value = getattr(self, f.name)
            if not lo <= value <= hi:
                msg = f"{f.name}={value} is outside [{lo}, {hi}]"
                raise ValueError(msg)

        if self.max_canvas_dimension < 1:
            msg = f"max_canvas_dimension must be positive, got {self.max_canvas_dimension}"
            raise ValueError(msg)

        if isinstance(self.grout_color, str):
            # raises ValueError for unknown colour names
            ImageColor.getrgb(self.grout_color)
        return self
