"""Tile palette: eight slots of user overrides over a default tile set."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from PIL import Image

from tile_mosaic.config import TILE_COUNT
from tile_mosaic.image_io import TileSource, default_tiles, load_image

logger = logging.getLogger(__name__)


def _empty_slots() -> tuple[TileSource | None, ...]:
    return (None,) * TILE_COUNT


@dataclass(frozen=True)
class TilePalette:
    """User-assigned tile images, indexed by tile index.

    Slots left as ``None`` fall back to the default tile at the same index.
    The palette is immutable; :meth:`with_tile` returns an updated copy.
    """

    overrides: tuple[TileSource | None, ...] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        if len(self.overrides) != TILE_COUNT:
            msg = f"Palette needs {TILE_COUNT} slots, got {len(self.overrides)}"
            raise ValueError(msg)

    @classmethod
    def from_mapping(cls, overrides: dict[int, TileSource]) -> TilePalette:
        palette = cls()
        for index, source in overrides.items():
            palette = palette.with_tile(index, source)
        return palette

    def with_tile(self, index: int, source: TileSource | None) -> TilePalette:
        """Copy of this palette with slot *index* replaced."""
        if not 0 <= index < TILE_COUNT:
            msg = f"Tile index {index} outside [0, {TILE_COUNT})"
            raise IndexError(msg)
        slots = list(self.overrides)
        slots[index] = source
        return TilePalette(tuple(slots))

    def sources(
        self,
        defaults: Sequence[TileSource | None] | None = None,
    ) -> list[TileSource | None]:
        """Per-slot source: the override if set, else the default."""
        if defaults is None:
            defaults = default_tiles()
        if len(defaults) != TILE_COUNT:
            msg = f"Default tile set needs {TILE_COUNT} entries, got {len(defaults)}"
            raise ValueError(msg)
        return [
            override if override is not None else default
            for override, default in zip(self.overrides, defaults, strict=True)
        ]


def resolve_tiles(
    palette: TilePalette,
    defaults: Sequence[TileSource | None] | None = None,
) -> list[Image.Image | None]:
    """Load an image for every slot, including slots no cell uses.

    A slot that fails to load becomes ``None``; failures are logged, not raised.
    """
    images = [load_image(src) for src in palette.sources(defaults)]
    failed = [i for i, img in enumerate(images) if img is None]
    if failed:
        logger.warning("Tile slots failed to load: %s", failed)
    return images
