#!/usr/bin/env python3
"""
PersonaGen - code-only full-body pixel character on a flat backdrop.

Base canvas is 64x96 (192x288 at the default scale of 3). Same seed, same
character; the background color is a caller choice and consumes no draws.
"""

from spritegen.core import get_logger
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import THEME_NAMES, hex_to_rgba, theme_palette
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .creature import CHARACTER_NAMES, body_geometry, render_creature, resolve_traits
from .params import PersonaParams

log = get_logger("persona")

BASE_W = 64
BASE_H = 96

BODY_CX = 32
BODY_CY = 54
BODY_RADIUS = 17

DUST_COUNT = 40
FLOOR_SHADOW = hex_to_rgba("#000000", 60)


def draw_backdrop(canvas: Canvas, bg: str, prng: Mulberry32) -> None:
    """Flat fill plus a faint dust of light specks (2 draws per speck)."""
    canvas.fill_rect(0, 0, canvas.width, canvas.height, hex_to_rgba(bg))
    speck = hex_to_rgba("#ffffff", 14)
    for _ in range(DUST_COUNT):
        x = prng.int_in_range(0, canvas.width - 1)
        y = prng.int_in_range(0, canvas.height - 1)
        canvas.paint_over(x, y, speck)


def generate(params=None, encode: bool = True) -> RenderResult:
    params = PersonaParams.parse(params)
    seed, ephemeral = resolve_seed(params.seed)
    prng = Mulberry32(seed)

    theme = params.theme or prng.pick(THEME_NAMES)
    character = params.character or prng.pick(CHARACTER_NAMES)
    palette = theme_palette(theme, prng)

    canvas = Canvas(BASE_W, BASE_H)
    draw_backdrop(canvas, params.bg, prng)

    traits = resolve_traits(character, prng, params.explicit_styles())
    geo = body_geometry(character, BODY_CX, BODY_CY, BODY_RADIUS)

    floor_w = int(geo.rx * 2)
    canvas.dither_rect(int(geo.cx - geo.rx), geo.bottom + 3, floor_w, 3, FLOOR_SHADOW, step=2)
    render_creature(canvas, traits, geo, palette, prng)

    metadata = {
        "seed": seed,
        "ephemeral_seed": ephemeral,
        "bg": params.bg,
        "theme": theme,
        "scale": params.scale,
        **traits.to_metadata(),
    }
    result = finish(canvas, params.scale, metadata, encode=encode)
    log.info(f"[persona] seed={seed} character={character} theme={theme} -> {result.width}x{result.height}")
    return result
