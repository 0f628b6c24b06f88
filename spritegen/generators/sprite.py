#!/usr/bin/env python3
"""
2D Sprite Generator (spriteGen)

A 16x24 humanoid built from axis-aligned blocks: head, hair, face, shirt,
arms, pants, shoes, an optional accessory, and finally a translucent drop
outline around every painted cell.

Draw order: skin, hair, shirt, pants, hair style, eye color, two glints,
mouth, accessory.
"""

from spritegen.core import get_logger
from spritegen.raster import shapes
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import hex_to_rgb, shade, with_alpha
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .params import SpriteParams

log = get_logger("sprite")

W = 16
H = 24

SKIN = ("#f6d1b5", "#e7b98e", "#d9a27d", "#b97a56", "#8d5524")
HAIR = ("#2d1b12", "#4a2f1a", "#7a4a2a", "#d4a373", "#c0c0c0", "#b87333")
SHIRT = ("#3b82f6", "#22c55e", "#f97316", "#a855f7", "#ef4444", "#111827")
PANTS = ("#1f2937", "#334155", "#0f172a", "#3f3f46", "#7c3aed")

HAIR_STYLES = ("cap", "bangs", "part", "curlyTop")
EYE_COLORS = {
    "brown": (160, 110, 70),
    "blue": (90, 160, 255),
    "green": (80, 200, 120),
    "dark": (30, 30, 30),
}
MOUTHS = ("smile", "flat", "o")
ACCESSORIES = ("none", "glasses", "hat")

DROP_SHADOW = (0, 0, 0, 80)
GLINT = (255, 255, 255, 180)

HEAD = (5, 2, 6, 6)
BODY = (5, 8, 6, 7)
LEG_Y = 15


def _draw_hair(canvas: Canvas, style: str, hair) -> None:
    hx, hy, hw, _ = HEAD
    fill = with_alpha(hair)
    canvas.fill_rect(hx, hy, hw, 2, fill)
    if style == "cap":
        canvas.fill_rect(hx + 1, hy + 2, hw - 2, 1, fill)
    elif style == "bangs":
        canvas.fill_rect(hx, hy + 2, 2, 1, fill)
        canvas.fill_rect(hx + hw - 2, hy + 2, 2, 1, fill)
    elif style == "part":
        canvas.fill_rect(hx + 1, hy + 2, 2, 1, fill)
        canvas.fill_rect(hx + 3, hy + 2, 2, 1, with_alpha(shade(hair, 18)))
    elif style == "curlyTop":
        canvas.set(hx + 1, hy + 2, fill)
        canvas.set(hx + 3, hy + 2, fill)
        canvas.set(hx + 4, hy + 2, with_alpha(shade(hair, 18)))
    else:
        raise ValueError(f"Unknown hair style: {style!r}")


def _draw_mouth(canvas: Canvas, mouth: str, skin) -> None:
    hx, hy, _, _ = HEAD
    y = hy + 5
    ink = with_alpha(shade(skin, -55))
    canvas.set(hx + 2, y, ink)
    canvas.set(hx + 3, y, ink)
    if mouth == "smile":
        soft = with_alpha(shade(skin, -65), 200)
        canvas.paint_over(hx + 2, y - 1, soft)
        canvas.paint_over(hx + 3, y - 1, soft)
    elif mouth == "o":
        canvas.set(hx + 2, y - 1, ink)
        canvas.set(hx + 3, y - 1, ink)
    elif mouth != "flat":
        raise ValueError(f"Unknown mouth style: {mouth!r}")


def _draw_accessory(canvas: Canvas, accessory: str, hair) -> None:
    hx, hy, hw, _ = HEAD
    if accessory == "glasses":
        g = (20, 20, 20, 200)
        canvas.stroke_rect(hx, hy + 3, 3, 2, g, blend=True)
        canvas.stroke_rect(hx + 3, hy + 3, 3, 2, g, blend=True)
    elif accessory == "hat":
        canvas.fill_rect(hx - 1, hy - 1, hw + 2, 1, with_alpha(shade(hair, -20)))
        canvas.fill_rect(hx, hy - 2, hw, 1, with_alpha(hair))
    elif accessory != "none":
        raise ValueError(f"Unknown sprite accessory: {accessory!r}")


def build_sprite(prng: Mulberry32):
    """
    Paint one sprite at base resolution.

    Returns:
        (canvas, traits) where traits names every drawn choice
    """
    canvas = Canvas(W, H)

    skin_hex = prng.pick(SKIN)
    hair_hex = prng.pick(HAIR)
    shirt_hex = prng.pick(SHIRT)
    pants_hex = prng.pick(PANTS)
    skin, hair = hex_to_rgb(skin_hex), hex_to_rgb(hair_hex)
    shirt, pants = hex_to_rgb(shirt_hex), hex_to_rgb(pants_hex)

    hx, hy, hw, hh = HEAD
    canvas.fill_rect(hx, hy, hw, hh, with_alpha(skin))
    canvas.fill_rect(hx, hy + hh - 1, hw, 1, with_alpha(shade(skin, -18)))

    hair_style = prng.pick(HAIR_STYLES)
    _draw_hair(canvas, hair_style, hair)

    eye = prng.pick(tuple(EYE_COLORS))
    eye_rgba = with_alpha(EYE_COLORS[eye])
    canvas.set(hx + 1, hy + 3, eye_rgba)
    canvas.set(hx + 4, hy + 3, eye_rgba)
    if prng.chance(0.5):
        canvas.paint_over(hx + 1, hy + 2, GLINT)
    if prng.chance(0.5):
        canvas.paint_over(hx + 4, hy + 2, GLINT)

    mouth = prng.pick(MOUTHS)
    _draw_mouth(canvas, mouth, skin)

    bx, by, bw, bh = BODY
    canvas.fill_rect(bx, by, bw, bh, with_alpha(shirt))
    canvas.fill_rect(bx, by + bh - 1, bw, 1, with_alpha(shade(shirt, -20)))

    arm = with_alpha(shade(shirt, -10))
    canvas.fill_rect(bx - 1, by + 1, 1, 4, arm)
    canvas.fill_rect(bx + bw, by + 1, 1, 4, arm)
    canvas.fill_rect(bx - 1, by + 5, 1, 1, with_alpha(skin))
    canvas.fill_rect(bx + bw, by + 5, 1, 1, with_alpha(skin))

    canvas.fill_rect(bx, LEG_Y, bw, 4, with_alpha(pants))
    canvas.set(bx + 2, LEG_Y + 2, with_alpha(shade(pants, -15)))
    canvas.set(bx + 3, LEG_Y + 2, with_alpha(shade(pants, -15)))

    shoe = with_alpha(shade(pants, -40))
    canvas.fill_rect(bx, LEG_Y + 4, 2, 1, shoe)
    canvas.fill_rect(bx + bw - 2, LEG_Y + 4, 2, 1, shoe)

    accessory = prng.pick(ACCESSORIES)
    _draw_accessory(canvas, accessory, hair)

    # drop outline around every painted cell
    alpha = canvas.pixels[..., 3]
    solid = {(int(x), int(y)) for y, x in zip(*alpha.nonzero())}
    canvas.fill_cells(shapes.halo(solid), DROP_SHADOW)

    traits = {
        "skin": skin_hex,
        "hair": hair_hex,
        "shirt": shirt_hex,
        "pants": pants_hex,
        "hairStyle": hair_style,
        "eyes": eye,
        "mouth": mouth,
        "accessory": accessory,
    }
    return canvas, traits


def generate(params=None, encode: bool = True) -> RenderResult:
    params = SpriteParams.parse(params)
    seed, ephemeral = resolve_seed(params.seed)
    canvas, traits = build_sprite(Mulberry32(seed))

    metadata = {"seed": seed, "ephemeral_seed": ephemeral, "scale": params.scale, **traits}
    result = finish(canvas, params.scale, metadata, encode=encode)
    log.info(f"[sprite] seed={seed} accessory={traits['accessory']} -> {result.width}x{result.height}")
    return result
