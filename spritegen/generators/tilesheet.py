#!/usr/bin/env python3
"""
Tile Sheet Generator (tileSheet)

A square sheet split into grid x grid terrain tiles (grass, dirt, stone, sand,
water) for 2D games. grid must divide the sheet size exactly; 16 gives 64px
tiles on the default 1024px sheet.

Per tile, in order: type pick (1), base jitter (3), per-pixel noise (one draw
per pixel, row-major), then speckles (7 draws each: x, y, color pick, color
jitter x3, radius). The per-pixel and speckle runs are drawn in bulk with
Mulberry32.batch, which yields exactly the same numbers as drawing one at a
time.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from spritegen.core import get_logger
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import hex_to_rgb, jitter_rgb
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .params import TileSheetParams

log = get_logger("tilesheet")

SHEET_SIZE = 1024

PIXEL_NOISE = 10
BASE_JITTER = 12
SPECK_JITTER = 10
SPECK_DENSITY = 18
EDGE_DARKEN = 18
WATER_BANDS = 6
WATER_AMPLITUDE = 10
WATER_BLUE_LIFT = 8
GRID_LINE_ALPHA = 70


@dataclass(frozen=True)
class TileType:
    name: str
    base: str
    specks: Tuple[str, ...]


TILE_TYPES = (
    TileType("grass", "#3aa655", ("#2f7f43", "#5cd07a", "#2a6b38")),
    TileType("dirt", "#8b5a2b", ("#6e4422", "#a06a35", "#5b3a1c")),
    TileType("stone", "#7a7f86", ("#5f646a", "#9aa0a8", "#4b4f55")),
    TileType("sand", "#d8c27a", ("#c7b06a", "#ead692", "#b59d55")),
    TileType("water", "#2b6cff", ("#1e4fb8", "#3d86ff", "#1b3f8f")),
)


class GridDivisorError(ValueError):
    """grid does not split the sheet into whole tiles."""

    def __init__(self, grid: int, size: int = SHEET_SIZE):
        self.grid = grid
        self.size = size
        self.valid = valid_grids(size)
        super().__init__(
            f"grid ({grid}) must divide evenly into {size} "
            f"(valid values: {', '.join(str(d) for d in self.valid)})"
        )


def valid_grids(size: int = SHEET_SIZE) -> List[int]:
    return [d for d in range(1, size + 1) if size % d == 0]


def tile_size_for(grid: int, size: int = SHEET_SIZE) -> int:
    """
    Edge length of one tile.

    Raises:
        GridDivisorError: If grid is not a positive divisor of size
    """
    if grid <= 0 or size % grid != 0:
        raise GridDivisorError(grid, size)
    return size // grid


def generate_tile(tile_type: TileType, tile: int, prng: Mulberry32) -> np.ndarray:
    """Render one opaque tile as a (tile, tile, 4) uint8 array."""
    base = np.array(jitter_rgb(tile_type.base, prng, BASE_JITTER), dtype=np.float64)

    noise = prng.int_batch(tile * tile, -PIXEL_NOISE, PIXEL_NOISE).reshape(tile, tile)
    rgb = np.clip(base[None, None, :] + noise[..., None], 0, 255)

    if tile_type.name == "water":
        rows = np.arange(tile, dtype=np.float64)
        band = np.sin(rows / tile * math.pi * WATER_BANDS) * WATER_AMPLITUDE
        lift = np.array([0.0, 0.0, WATER_BLUE_LIFT])
        rgb = np.clip(rgb + band[:, None, None] + lift[None, None, :], 0, 255)

    out = np.empty((tile, tile, 4), dtype=np.uint8)
    out[..., :3] = np.trunc(rgb).astype(np.uint8)
    out[..., 3] = 255

    count = (tile * tile) // SPECK_DENSITY
    draws = prng.batch(count * 7).reshape(count, 7)
    n_specks = len(tile_type.specks)
    max_radius = 2 if tile_type.name == "stone" else 1
    min_radius = 1 if tile_type.name == "stone" else 0
    for r in draws:
        x = int(r[0] * tile)
        y = int(r[1] * tile)
        speck = hex_to_rgb(tile_type.specks[int(r[2] * n_specks)])
        color = [
            min(255, max(0, speck[i] + int(math.floor(r[3 + i] * (2 * SPECK_JITTER + 1))) - SPECK_JITTER))
            for i in range(3)
        ]
        radius = int(math.floor(r[6] * (max_radius - min_radius + 1))) + min_radius
        out[max(0, y - radius):y + radius + 1, max(0, x - radius):x + radius + 1, :3] = color

    edge = np.zeros((tile, tile), dtype=bool)
    edge[0, :] = edge[-1, :] = True
    edge[:, 0] = edge[:, -1] = True
    darkened = out[..., :3].astype(np.int16) - EDGE_DARKEN
    out[..., :3] = np.where(edge[..., None], np.clip(darkened, 0, 255), out[..., :3]).astype(np.uint8)
    return out


def grid_line_layer(grid: int, size: int) -> np.ndarray:
    tile = size // grid
    layer = np.zeros((size, size, 4), dtype=np.uint8)
    for i in range(grid + 1):
        p = i * tile
        if p >= size:
            continue
        layer[:, p, 3] = GRID_LINE_ALPHA
        layer[p, :, 3] = GRID_LINE_ALPHA
    return layer


def build_sheet(prng: Mulberry32, grid: int, size: int = SHEET_SIZE,
                grid_lines: bool = False):
    """
    Render a full sheet.

    Returns:
        (canvas, tile_names) with tile names listed row-major

    Raises:
        GridDivisorError: If grid does not divide size
    """
    tile = tile_size_for(grid, size)
    canvas = Canvas(size, size)
    names = []
    for ty in range(grid):
        for tx in range(grid):
            tile_type = prng.pick(TILE_TYPES)
            canvas.paste(generate_tile(tile_type, tile, prng), tx * tile, ty * tile)
            names.append(tile_type.name)
    if grid_lines:
        canvas.composite_layer(grid_line_layer(grid, size))
    return canvas, names


def generate(params=None, encode: bool = True) -> RenderResult:
    params = TileSheetParams.parse(params)
    try:
        tile = tile_size_for(params.grid)
    except GridDivisorError as e:
        log.error(f"[tilesheet] {e}")
        raise

    seed, ephemeral = resolve_seed(params.seed)
    prng = Mulberry32(seed)
    canvas, names = build_sheet(prng, params.grid, SHEET_SIZE, params.grid_lines)

    metadata = {
        "seed": seed,
        "ephemeral_seed": ephemeral,
        "grid": params.grid,
        "tileSize": tile,
        "gridLines": params.grid_lines,
        "tiles": {t.name: names.count(t.name) for t in TILE_TYPES},
    }
    result = finish(canvas, 1, metadata, encode=encode)
    log.info(f"[tilesheet] seed={seed} grid={params.grid} tile={tile}px draws={prng.draws}")
    return result
