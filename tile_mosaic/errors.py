"""Terminal failures of a mosaic export."""

from __future__ import annotations


class TileMosaicError(Exception):
    """Base class for errors surfaced to the caller of an export."""


class NoValidTilesError(TileMosaicError):
    """None of the palette slots could be loaded."""

    def __init__(self, slots: int) -> None:
        super().__init__(f"Failed to load images: none of the {slots} tile slots decoded")
        self.slots = slots


class EncodingFailedError(TileMosaicError):
    """The canvas was built but encoding it produced no data."""

    def __init__(self, width: int, height: int, fmt: str = "JPEG") -> None:
        super().__init__(
            f"Failed to generate image: {fmt} encoding of a {width}x{height} "
            "canvas returned no data (canvas may be too large)"
        )
        self.width = width
        self.height = height
