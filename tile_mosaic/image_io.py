"""Image loading, the off-screen canvas, and tile-set helpers."""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path

from PIL import Image, ImageDraw, ImageOps

from tile_mosaic.config import TILE_COUNT, Color

logger = logging.getLogger(__name__)

TileSource = bytes | str | Path | Image.Image

DEFAULT_TILE_SIZE = 100

# Glaze colours for the built-in tile set, one per tile index
DEFAULT_TILE_COLORS = [
    "#1F4E79",
    "#C0504D",
    "#E8E2D0",
    "#2E7D5B",
    "#D89A2B",
    "#5B3A72",
    "#3A3A3A",
    "#7FA7C9",
]

_DECODE_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    struct.error,
    IndexError,
    TypeError,
    Image.DecompressionBombError,
)


def _to_canvas_mode(img: Image.Image) -> Image.Image:
    """RGBA when the image carries transparency, RGB otherwise."""
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def load_image(source: TileSource | None) -> Image.Image | None:
    """Decode *source* into an RGB or RGBA image.

    Accepts encoded bytes, a file path, or an already decoded image.
    Decoded files are turned upright according to their EXIF orientation.
    Unreadable or corrupt data yields ``None``; this never raises.
    """
    if source is None:
        return None
    if isinstance(source, Image.Image):
        return _to_canvas_mode(source)

    fp = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        with Image.open(fp) as img:
            img.load()
            return _to_canvas_mode(ImageOps.exif_transpose(img))
    except _DECODE_ERRORS as exc:
        label = f"{len(source)} bytes" if isinstance(source, bytes) else str(source)
        logger.warning("Failed to load tile image (%s): %s", label, exc)
        return None


class RasterCanvas:
    """Minimal drawing surface backed by a Pillow image."""

    def __init__(self, image: Image.Image) -> None:
        self.image = image

    @classmethod
    def create(cls, width: int, height: int) -> RasterCanvas:
        return cls(Image.new("RGB", (width, height)))

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def fill(self, color: Color) -> None:
        """Paint the whole surface with *color*."""
        w, h = self.image.size
        ImageDraw.Draw(self.image).rectangle((0, 0, w - 1, h - 1), fill=color)

    def draw_image_into(
        self,
        img: Image.Image,
        x: int,
        y: int,
        width: int,
        height: int,
    ) -> None:
        """Draw *img* stretched to exactly ``width x height`` at ``(x, y)``."""
        if img.size != (width, height):
            img = img.resize((width, height), Image.LANCZOS)
        # transparent areas let the grout fill show through
        mask = img if img.mode == "RGBA" else None
        self.image.paste(img, (x, y), mask)

    def encode(self, fmt: str = "JPEG", quality: int = 95) -> bytes | None:
        """Encode the surface, or return ``None`` if the encoder gives up."""
        buf = io.BytesIO()
        try:
            self.image.save(buf, format=fmt, quality=quality)
        except (OSError, ValueError) as exc:
            logger.error(
                "%s encoding of %dx%d canvas failed: %s",
                fmt, self.image.width, self.image.height, exc,
            )
            return None
        return buf.getvalue() or None


# -- Default tile set --------------------------------------------------


def render_default_tile(index: int, size: int = DEFAULT_TILE_SIZE) -> Image.Image:
    """Built-in tile for *index*: a glazed field with a lighter bevel."""
    base = DEFAULT_TILE_COLORS[index % len(DEFAULT_TILE_COLORS)]
    img = Image.new("RGB", (size, size), base)
    draw = ImageDraw.Draw(img)

    r, g, b = img.getpixel((0, 0))
    bevel = (min(255, r + 40), min(255, g + 40), min(255, b + 40))
    width = max(1, size // 20)
    draw.rectangle((0, 0, size - 1, size - 1), outline=bevel, width=width)
    return img


def default_tiles(size: int = DEFAULT_TILE_SIZE) -> list[Image.Image]:
    """The full built-in tile set, indexed by tile index."""
    return [render_default_tile(i, size) for i in range(TILE_COUNT)]


def load_tile_dir(folder: str | Path) -> list[Path | None]:
    """Map ``tile-1.jpg`` ... ``tile-8.jpg`` in *folder* to the tile slots."""
    folder = Path(folder)
    slots: list[Path | None] = []
    for i in range(TILE_COUNT):
        path = folder / f"tile-{i + 1}.jpg"
        slots.append(path if path.is_file() else None)
    logger.debug(
        "Tile dir %s: %d of %d slots present",
        folder, sum(p is not None for p in slots), TILE_COUNT,
    )
    return slots


# -- Tile sheets -------------------------------------------------------


def split_tile_sheet(
    sheet: TileSource,
    cols: int = 4,
    rows: int = 2,
    sheet_rows: int = 3,
) -> list[Image.Image]:
    """Cut a photographed sheet of tiles into equal cells.

    The sheet is divided into *cols* x *sheet_rows* cells; the top *rows*
    rows are returned in reading order.
    """
    img = load_image(sheet)
    if img is None:
        msg = f"Cannot read tile sheet {sheet!r}"
        raise ValueError(msg)

    tile_w = img.width // cols
    tile_h = img.height // sheet_rows
    logger.info("Sheet %dx%d, tile size %dx%d", img.width, img.height, tile_w, tile_h)

    tiles = []
    for row in range(rows):
        for col in range(cols):
            box = (col * tile_w, row * tile_h, (col + 1) * tile_w, (row + 1) * tile_h)
            tiles.append(img.crop(box))
    return tiles


def save_tiles(
    tiles: list[Image.Image],
    output_dir: str | Path,
    quality: int = 90,
) -> list[Path]:
    """Write tiles as ``tile-1.jpg``, ``tile-2.jpg``, ..."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for i, tile in enumerate(tiles, 1):
        path = output_dir / f"tile-{i}.jpg"
        tile.convert("RGB").save(path, format="JPEG", quality=quality)
        logger.info("Created: %s", path.name)
        paths.append(path)
    return paths
