"""Wallpaper montage built from every downloaded screenshot."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from PIL import Image

from .config import MontageConfig
from .images import ImageToolError, fit_onto, list_images, read_image

logger = logging.getLogger("jamshots")


@dataclass
class TileGrid:
    """Tile size and grid shape covering the wallpaper."""

    tile_width: int
    tile_height: int
    columns: int
    rows: int

    @property
    def cells(self) -> int:
        return self.columns * self.rows


def _grid_for_height(tile_height: int, aspect: float, config: MontageConfig) -> TileGrid:
    tile_width = max(1, math.floor(tile_height * aspect))
    return TileGrid(
        tile_width=tile_width,
        tile_height=tile_height,
        columns=math.ceil(config.width / tile_width),
        rows=math.ceil(config.height / tile_height),
    )


def compute_grid(count: int, config: MontageConfig) -> TileGrid:
    """Largest tile, at the configured aspect ratio, that fits ``count`` images."""
    if count < 1:
        raise ValueError("count must be positive")
    aspect = config.tile_width / config.tile_height
    # cols * rows >= count  =>  h <= sqrt(W * H / (aspect * count))
    tile_height = max(1, math.floor(math.sqrt(config.width * config.height / (aspect * count))))
    grid = _grid_for_height(tile_height, aspect, config)
    while grid.cells < count and grid.tile_height > 1:
        grid = _grid_for_height(grid.tile_height - 1, aspect, config)
    return grid


def plan_tiles(images: Sequence[Path], cells: int) -> List[Path]:
    """Every image once, then repeat from the start to fill leftover cells."""
    if not images:
        return []
    tiles = list(images)
    for index in range(max(0, cells - len(images))):
        tiles.append(images[index % len(images)])
    return tiles


def build_wallpaper(config: MontageConfig) -> Path:
    """Compose the montage and save it centre-cropped to the wallpaper size."""
    images = list_images(config.input_dir)
    if not images:
        raise ImageToolError(f"No images found in {config.input_dir}")

    grid = compute_grid(len(images), config)
    logger.info(
        "Tile size: %dx%d (scaled from %dx%d)",
        grid.tile_width,
        grid.tile_height,
        config.tile_width,
        config.tile_height,
    )
    logger.info("Grid: %d columns x %d rows = %d tiles", grid.columns, grid.rows, grid.cells)

    tiles = plan_tiles(images, grid.cells)
    if len(tiles) > len(images):
        logger.info(
            "Using all %d images + repeating %d to fill grid",
            len(images),
            len(tiles) - len(images),
        )

    tile_size = (grid.tile_width, grid.tile_height)
    canvas = Image.new(
        "RGB",
        (grid.columns * grid.tile_width, grid.rows * grid.tile_height),
        config.background,
    )
    for index, path in enumerate(tiles):
        row, column = divmod(index, grid.columns)
        tile = fit_onto(read_image(path), tile_size, config.background)
        canvas.paste(tile, (column * grid.tile_width, row * grid.tile_height))

    left = (canvas.width - config.width) // 2
    top = (canvas.height - config.height) // 2
    wallpaper = canvas.crop((left, top, left + config.width, top + config.height))

    config.output_file.parent.mkdir(parents=True, exist_ok=True)
    wallpaper.save(config.output_file)
    size_mb = config.output_file.stat().st_size / 1024 / 1024
    logger.info("Wallpaper created: %s (%.2f MB)", config.output_file, size_mb)
    return config.output_file
