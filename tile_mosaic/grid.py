"""Grid generation and single-cell edits.

A grid is a ``(rows, cols)`` uint8 array of tile indices in
``[0, TILE_COUNT)``.  Nothing here mutates its input: every operation
returns a fresh array and the caller decides when to swap it in.
"""

from __future__ import annotations

import logging

import numpy as np

from tile_mosaic.config import TILE_COUNT

logger = logging.getLogger(__name__)

_TILES = np.arange(TILE_COUNT, dtype=np.uint8)


def neighbour_values(
    grid: np.ndarray,
    row: int,
    col: int,
    full: bool = True,
) -> set[int]:
    """Values of the orthogonal neighbours of ``(row, col)`` that exist.

    With ``full=False`` only the top and left neighbours are considered,
    i.e. the cells already placed during a row-major fill.
    """
    rows, cols = grid.shape
    found = set()
    if row > 0:
        found.add(int(grid[row - 1, col]))
    if col > 0:
        found.add(int(grid[row, col - 1]))
    if full:
        if row < rows - 1:
            found.add(int(grid[row + 1, col]))
        if col < cols - 1:
            found.add(int(grid[row, col + 1]))
    return found


def generate_grid(
    rows: int,
    cols: int,
    no_adjacent_duplicates: bool = False,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Fill a ``rows x cols`` grid with random tile indices.

    Args:
        rows: Number of rows (positive).
        cols: Number of columns (positive).
        no_adjacent_duplicates: When set, each cell avoids the value of the
            cell above it and the cell to its left. Cells further right or
            below are not considered, so first-row and first-column cells
            are less constrained.
        seed: Reproducibility seed (``None`` = non-deterministic).
        rng: Explicit generator; takes precedence over *seed*.

    Returns:
        (rows, cols) uint8 array.
    """
    if rows < 1 or cols < 1:
        msg = f"Grid needs at least one row and column, got {rows}x{cols}"
        raise ValueError(msg)

    if rng is None:
        rng = np.random.default_rng(seed)

    if not no_adjacent_duplicates:
        return rng.integers(0, TILE_COUNT, size=(rows, cols), dtype=np.uint8)

    grid = np.zeros((rows, cols), dtype=np.uint8)
    for r in range(rows):
        for c in range(cols):
            excluded = neighbour_values(grid, r, c, full=False)
            # at most two exclusions out of eight, never empty
            available = [t for t in _TILES if int(t) not in excluded]
            grid[r, c] = available[rng.integers(0, len(available))]

    logger.debug("Generated %dx%d grid without adjacent duplicates", rows, cols)
    return grid


def cycle_next(
    grid: np.ndarray,
    row: int,
    col: int,
    no_adjacent_duplicates: bool = False,
) -> np.ndarray:
    """Advance one cell to the next tile index.

    In constrained mode the cell skips every value held by any of its
    four neighbours. If the search wraps back to the original value,
    that value is kept.
    """
    rows, cols = grid.shape
    if not (0 <= row < rows and 0 <= col < cols):
        msg = f"Cell ({row}, {col}) is outside a {rows}x{cols} grid"
        raise IndexError(msg)

    old = int(grid[row, col])
    nxt = (old + 1) % TILE_COUNT

    if no_adjacent_duplicates:
        excluded = neighbour_values(grid, row, col, full=True)
        while nxt in excluded and nxt != old:
            nxt = (nxt + 1) % TILE_COUNT

    new_grid = grid.copy()
    new_grid[row, col] = nxt
    return new_grid


def has_adjacent_duplicates(grid: np.ndarray) -> bool:
    """True if any horizontally or vertically adjacent pair matches."""
    horizontal = np.any(grid[:, 1:] == grid[:, :-1])
    vertical = np.any(grid[1:, :] == grid[:-1, :])
    return bool(horizontal or vertical)


def tile_counts(grid: np.ndarray) -> list[int]:
    """Number of cells using each tile index."""
    return np.bincount(grid.ravel(), minlength=TILE_COUNT).tolist()
