"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from tile_mosaic.compositor import export_mosaic, mosaic_filename, save_mosaic
from tile_mosaic.config import TILE_COUNT, TileMosaicConfig
from tile_mosaic.errors import TileMosaicError
from tile_mosaic.grid import cycle_next, generate_grid, has_adjacent_duplicates, tile_counts
from tile_mosaic.image_io import load_tile_dir, save_tiles, split_tile_sheet
from tile_mosaic.palette import TilePalette

app = typer.Typer(
    name="tile-mosaic",
    help="Lay out and export tile mosaics from a palette of eight tiles.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _parse_tile_overrides(values: list[str]) -> dict[int, Path]:
    """Parse ``N=PATH`` options; N is 1-based like the tile file names."""
    overrides = {}
    for value in values:
        slot, sep, path = value.partition("=")
        if not sep or not slot.strip().isdigit():
            msg = f"Expected N=PATH, got {value!r}"
            raise typer.BadParameter(msg, param_hint="--tile")
        n = int(slot)
        if not 1 <= n <= TILE_COUNT:
            msg = f"Tile number must be 1-{TILE_COUNT}, got {n}"
            raise typer.BadParameter(msg, param_hint="--tile")
        overrides[n - 1] = Path(path.strip())
    return overrides


def _parse_cells(values: list[str]) -> list[tuple[int, int]]:
    """Parse ``ROW,COL`` options (0-based)."""
    cells = []
    for value in values:
        parts = [p.strip() for p in value.split(",")]
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            msg = f"Expected ROW,COL, got {value!r}"
            raise typer.BadParameter(msg, param_hint="--cycle")
        cells.append((int(parts[0]), int(parts[1])))
    return cells


def _build_config(**kwargs: object) -> TileMosaicConfig:
    try:
        return TileMosaicConfig(**kwargs).validate()  # type: ignore[arg-type]
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _grid_table(grid: np.ndarray) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 1))
    for row in grid:
        table.add_row(*(str(int(v) + 1) for v in row))
    return table


# Defaults come from TileMosaicConfig - single source of truth
_DEFAULTS = TileMosaicConfig()


# -- export command ----------------------------------------------------

@app.command()
def export(
    rows: int = typer.Option(_DEFAULTS.rows, "--rows", "-r", help="Tile rows (1-50)"),
    cols: int = typer.Option(_DEFAULTS.cols, "--cols", "-c", help="Tile columns (1-50)"),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", "-s", help="Random seed (None = random)",
    ),
    no_adjacent: bool = typer.Option(
        _DEFAULTS.no_adjacent_duplicates, "--no-adjacent/--allow-adjacent",
        help="Avoid equal neighbouring tiles",
    ),
    cycle: list[str] | None = typer.Option(
        None, "--cycle", help="Cycle cell ROW,COL to its next tile (repeatable)",
    ),
    tile: list[str] | None = typer.Option(
        None, "--tile", "-t", help="Override tile N (1-8) with an image: N=PATH",
    ),
    tiles_dir: Path | None = typer.Option(
        None, "--tiles-dir", help="Folder with tile-1.jpg ... tile-8.jpg defaults",
    ),
    tile_width_cm: int = typer.Option(
        _DEFAULTS.tile_width_cm, "--tile-width", help="Tile width in cm (5-60)",
    ),
    tile_height_cm: int = typer.Option(
        _DEFAULTS.tile_height_cm, "--tile-height", help="Tile height in cm (5-60)",
    ),
    grout_mm: float = typer.Option(
        _DEFAULTS.grout_mm, "--grout", "-g", help="Grout thickness in mm (0-10)",
    ),
    grout_color: str = typer.Option(
        _DEFAULTS.grout_color, "--grout-color", help="Grout colour, e.g. '#808080'",
    ),
    quality: int = typer.Option(_DEFAULTS.jpeg_quality, "--quality", "-q"),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a random mosaic and export it as a JPEG."""
    _setup_logging(verbose)
    logger = logging.getLogger("tile_mosaic")

    cfg = _build_config(
        rows=rows,
        cols=cols,
        seed=seed,
        no_adjacent_duplicates=no_adjacent,
        tile_width_cm=tile_width_cm,
        tile_height_cm=tile_height_cm,
        grout_mm=grout_mm,
        grout_color=grout_color,
        jpeg_quality=quality,
        output_dir=output_dir,
    )
    overrides = _parse_tile_overrides(tile or [])
    cells = _parse_cells(cycle or [])

    console.print(Panel.fit(
        f"[bold]TILE MOSAIC[/bold]\n"
        f"Grid: {cfg.cols}x{cfg.rows}  |  Tile: {cfg.tile_width_cm}x{cfg.tile_height_cm} cm\n"
        f"Grout: {cfg.grout_mm} mm {cfg.grout_color}  |  "
        f"No adjacent duplicates: {cfg.no_adjacent_duplicates}",
        border_style="cyan",
    ))
    t_total = time.perf_counter()

    grid = generate_grid(cfg.rows, cfg.cols, cfg.no_adjacent_duplicates, seed=cfg.seed)
    for r, c in cells:
        try:
            grid = cycle_next(grid, r, c, cfg.no_adjacent_duplicates)
        except IndexError as exc:
            raise typer.BadParameter(str(exc), param_hint="--cycle") from exc
        logger.debug("Cycled (%d, %d) to tile %d", r, c, grid[r, c] + 1)

    palette = TilePalette.from_mapping(overrides)
    defaults = load_tile_dir(tiles_dir) if tiles_dir is not None else None

    try:
        data = export_mosaic(grid, palette, cfg, defaults)
    except TileMosaicError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1) from exc

    path = save_mosaic(data, cfg.output_dir, cfg.rows, cfg.cols)
    elapsed = time.perf_counter() - t_total

    usage = "  ".join(f"{i + 1}:{n}" for i, n in enumerate(tile_counts(grid)))
    console.print(
        f"  [green]✓[/green] {path.name}  "
        f"[dim]tiles {usage}  adjacent-duplicates={has_adjacent_duplicates(grid)}"
        f"  time={elapsed:.1f}s[/dim]"
    )


# -- grid preview command ----------------------------------------------

@app.command()
def grid(
    rows: int = typer.Option(_DEFAULTS.rows, "--rows", "-r"),
    cols: int = typer.Option(_DEFAULTS.cols, "--cols", "-c"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    no_adjacent: bool = typer.Option(
        _DEFAULTS.no_adjacent_duplicates, "--no-adjacent/--allow-adjacent",
    ),
) -> None:
    """Print a generated grid of tile numbers without rendering it."""
    cfg = _build_config(rows=rows, cols=cols, seed=seed, no_adjacent_duplicates=no_adjacent)
    layout = generate_grid(cfg.rows, cfg.cols, cfg.no_adjacent_duplicates, seed=cfg.seed)
    console.print(_grid_table(layout))
    console.print(f"[dim]{mosaic_filename(cfg.rows, cfg.cols)}[/dim]")


# -- tile sheet command ------------------------------------------------

@app.command()
def split(
    sheet: Path = typer.Argument(..., help="Photo of a sheet of tiles"),
    output_dir: Path = typer.Option(Path("tiles"), "--output", "-o"),
    cols: int = typer.Option(4, "--cols", help="Tiles per sheet row"),
    rows: int = typer.Option(2, "--rows", help="Sheet rows to keep"),
    sheet_rows: int = typer.Option(3, "--sheet-rows", help="Rows on the whole sheet"),
    quality: int = typer.Option(90, "--quality", "-q"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Cut a tile sheet into tile-1.jpg ... tile-N.jpg."""
    _setup_logging(verbose)

    try:
        tiles = split_tile_sheet(sheet, cols=cols, rows=rows, sheet_rows=sheet_rows)
    except ValueError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1) from exc

    paths = save_tiles(tiles, output_dir, quality=quality)
    console.print(
        f"[green]✓[/green] {len(paths)} tiles created in {output_dir}/"
    )


if __name__ == "__main__":
    app()
