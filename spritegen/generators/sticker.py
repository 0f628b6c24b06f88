#!/usr/bin/env python3
"""
Chibi Pixel Sticker Generator (chibiPixel)

A square sticker: two-stop sky gradient, a scatter of background motifs, one
creature assembled from the shared catalog, and a soft corner vignette.

The working grid is width / (scale * pixel_size) cells per side; every cell is
one "chunky" pixel of the final image. Draw order for a seed:

    theme -> character -> palette (13) -> motif -> motif cells -> traits
    -> shading / face draws
"""

import math

import numpy as np

from spritegen.core import get_logger
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import THEME_NAMES, hex_to_rgb, hex_to_rgba, theme_palette
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .creature import CHARACTER_NAMES, body_geometry, render_creature, resolve_traits
from .params import BACKGROUND_MOTIFS, StickerParams

log = get_logger("sticker")

MOTIF_DENSITY = 0.02
BODY_RADIUS = 0.16
BODY_CENTER_Y = 0.6

SPARKLE = ((0, 0), (1, 0), (-1, 0), (0, 1), (0, -1))
HEART = ((0, 0), (2, 0), (0, 1), (1, 1), (2, 1), (1, 2))

VIGNETTE_START = 0.6
VIGNETTE_STRENGTH = {"night": 0.35}
DEFAULT_VIGNETTE = 0.2


def motif_count(cols: int, rows: int, motif: str) -> int:
    base = int(math.floor(cols * rows * MOTIF_DENSITY))
    if motif == "sparkles":
        return base // 3
    if motif == "hearts":
        return base // 4
    return base


def draw_motifs(canvas: Canvas, motif: str, palette: dict, prng: Mulberry32) -> int:
    """
    Scatter background motifs. Every motif consumes 2 draws (x, y).

    Returns:
        Number of motifs placed
    """
    star = hex_to_rgba(palette["star"])
    count = motif_count(canvas.width, canvas.height, motif)
    for _ in range(count):
        x = prng.int_in_range(0, canvas.width - 1)
        y = prng.int_in_range(0, canvas.height - 1)
        if motif == "stars":
            canvas.set(x, y, star)
        elif motif == "sparkles":
            for dx, dy in SPARKLE:
                canvas.paint_over(x + dx, y + dy, hex_to_rgba(palette["star"], 170))
            canvas.set(x, y, hex_to_rgba("#ffffff"))
        elif motif == "hearts":
            for dx, dy in HEART:
                canvas.paint_over(x + dx, y + dy, hex_to_rgba(palette["blush"], 200))
        elif motif == "dots":
            canvas.paint_over(x, y, hex_to_rgba("#ffffff", 110))
        else:
            raise ValueError(f"Unknown background motif: {motif!r}")
    return count


def vignette_layer(width: int, height: int, strength: float) -> np.ndarray:
    """Black RGBA layer whose alpha ramps up toward the corners."""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    nx = (xs + 0.5) / width - 0.5
    ny = (ys + 0.5) / height - 0.5
    d = np.sqrt(nx * nx + ny * ny) / math.sqrt(0.5)
    ramp = np.clip((d - VIGNETTE_START) / (1.0 - VIGNETTE_START), 0.0, 1.0)
    layer = np.zeros((height, width, 4), dtype=np.uint8)
    layer[..., 3] = np.rint(ramp * strength * 255).astype(np.uint8)
    return layer


def generate(params=None, encode: bool = True) -> RenderResult:
    """
    Render one chibi sticker.

    Args:
        params: StickerParams or a plain option mapping
        encode: PNG-encode the result (False returns raw RGBA bytes)

    Returns:
        RenderResult whose metadata echoes every resolved style choice
    """
    params = StickerParams.parse(params)
    seed, ephemeral = resolve_seed(params.seed)
    prng = Mulberry32(seed)

    theme = params.theme or prng.pick(THEME_NAMES)
    character = params.character or prng.pick(CHARACTER_NAMES)
    palette = theme_palette(theme, prng)

    # one base pixel never outgrows the output
    factor = min(params.scale * params.pixel_size, params.width, params.height)
    cols = max(1, params.width // factor)
    rows = max(1, params.height // factor)
    canvas = Canvas(cols, rows)

    canvas.vertical_gradient(hex_to_rgb(palette["bg1"]), hex_to_rgb(palette["bg2"]))
    motif = params.motif or prng.pick(BACKGROUND_MOTIFS)
    placed = draw_motifs(canvas, motif, palette, prng)

    traits = resolve_traits(character, prng, params.explicit_styles())
    radius = min(cols, rows) * BODY_RADIUS
    geo = body_geometry(character, cols / 2.0, rows * BODY_CENTER_Y, radius)
    render_creature(canvas, traits, geo, palette, prng)

    strength = VIGNETTE_STRENGTH.get(theme, DEFAULT_VIGNETTE)
    canvas.composite_layer(vignette_layer(cols, rows, strength))

    metadata = {
        "seed": seed,
        "ephemeral_seed": ephemeral,
        "theme": theme,
        "motif": motif,
        "pixelSize": params.pixel_size,
        "scale": params.scale,
        **traits.to_metadata(),
    }
    result = finish(canvas, factor, metadata, encode=encode,
                    size=(params.width, params.height))
    log.info(
        f"[sticker] seed={seed} theme={theme} character={character} "
        f"grid={cols}x{rows} motifs={placed} -> {result.width}x{result.height}"
    )
    return result
