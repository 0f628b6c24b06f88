#!/usr/bin/env python3
"""
Emotion Portrait Generator (emotionGen)

Head-and-shoulders portrait on a 64x96 base canvas whose face is driven by an
emotion profile (eye size, pupil offset, brow angle, mouth, blush, tears,
sweat, under-eye shadow), finished with an emotion-colored checker tint.

PRNG draw order:
    emotion (only if not given) -> skin -> hair -> iris -> background
    -> bangs / side locks -> emotion profile -> eyes -> mouth -> accessory
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Optional

import numpy as np

from spritegen.core import get_logger
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import hex_to_rgba
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .params import EMOTIONS, EmotionParams

log = get_logger("emotion")

BASE_W = 64
BASE_H = 96
CX = 32

BACKDROPS = ("#141a24", "#151517", "#1a1722", "#0f1b1a", "#1c1411")

SKIN_TONES = (
    ("#f6d2b8", "#e2b79d"),
    ("#efc39d", "#d9a983"),
    ("#d9a57a", "#c08b63"),
    ("#b97f57", "#a26b47"),
    ("#8f5a3a", "#784a31"),
)

HAIR_PALETTES = (
    ("#1c1b22", "#121118"),
    ("#3a2a1f", "#281c14"),
    ("#6a4b2c", "#4d351f"),
    ("#c2a27a", "#9c7f5c"),
    ("#6c78ff", "#4b54b5"),
    ("#ff6bb0", "#b84c80"),
)

IRIS = ("#2d7dff", "#2bd4c7", "#8d5bff", "#ffb84d", "#ff4d6d")

BANG_STYLES = ("straight", "parted", "messy", "curtain")
EYE_STYLES = ("round", "anime", "thin", "dot")
MOUTH_STYLES = ("smile", "flat", "o", "teeth", "grimace")
ACCESSORIES = ("none", "bandaid", "glasses", "scar", "halo")
ACCESSORY_CHANCE = 0.45

EMOTION_TINTS = MappingProxyType({
    "rage": ("#ff3b3b", 22),
    "shy": ("#ff7ad9", 18),
    "smug": ("#ffd27a", 16),
    "crying": ("#6bb8ff", 18),
    "sleepy": ("#b6a7ff", 16),
    "shocked": ("#ffffff", 14),
    "determined": ("#ffcf4d", 14),
    "unhinged": ("#a5ff6b", 14),
})
DEFAULT_TINT = ("#ffffff", 10)

# Tint window (x0, y0, x1, y1), exclusive upper bounds
TINT_BOX = (10, 18, 54, 82)


@dataclass(frozen=True)
class EmotionSpec:
    eye_y_offset: int = 0
    eye_spread: int = 9
    eye_w: int = 5
    eye_h: int = 4
    pupil_dx: int = 0
    pupil_dy: int = 0
    brow_y_offset: int = 0
    brow_angle: int = 0
    mouth_y_offset: int = 0
    blush: bool = False
    sweat: bool = False
    tears: bool = False
    under_eye_shadow: bool = False
    eye_style: Optional[str] = None
    mouth_style: Optional[str] = None


BASE_SPEC = EmotionSpec()


def emotion_spec(emotion: str, prng: Mulberry32) -> EmotionSpec:
    """
    Face profile for an emotion. Some profiles draw their mouth (and blush /
    sweat flags) from the stream; draws happen in field order as listed.
    """
    if emotion == "rage":
        return replace(BASE_SPEC, eye_h=3, pupil_dy=-1, brow_angle=2,
                       mouth_style=prng.pick(("teeth", "grimace")),
                       sweat=prng.chance(0.35))
    if emotion == "shy":
        return replace(BASE_SPEC, eye_w=6, eye_h=5, brow_angle=-1,
                       mouth_style=prng.pick(("smile", "flat")), blush=True, pupil_dy=1)
    if emotion == "smug":
        return replace(BASE_SPEC, eye_h=3, pupil_dx=1, brow_angle=-2, mouth_style="smile")
    if emotion == "crying":
        return replace(BASE_SPEC, eye_w=6, eye_h=5, pupil_dy=2, brow_angle=-1,
                       mouth_style=prng.pick(("o", "flat")), tears=True,
                       blush=prng.chance(0.25))
    if emotion == "sleepy":
        return replace(BASE_SPEC, eye_h=2, eye_style="thin",
                       mouth_style=prng.pick(("flat", "o")), under_eye_shadow=True, pupil_dy=2)
    if emotion == "shocked":
        return replace(BASE_SPEC, eye_w=7, eye_h=6, brow_angle=-2, mouth_style="o")
    if emotion == "determined":
        return replace(BASE_SPEC, eye_h=4, brow_angle=1,
                       mouth_style=prng.pick(("flat", "grimace")), pupil_dy=-1)
    if emotion == "unhinged":
        return replace(BASE_SPEC, eye_w=6, eye_h=5, brow_angle=1,
                       mouth_style=prng.pick(("smile", "grimace")), under_eye_shadow=True,
                       pupil_dx=prng.pick((-1, 1)), sweat=prng.chance(0.25))
    return BASE_SPEC


def _clamp(v, lo, hi):
    return max(lo, min(hi, v))


# ============================================================================
# PORTRAIT LAYERS
# ============================================================================


def draw_background(canvas: Canvas, prng: Mulberry32) -> str:
    bg = prng.pick(BACKDROPS)
    canvas.fill_rect(0, 0, canvas.width, canvas.height, hex_to_rgba(bg))

    speck = hex_to_rgba("#ffffff", 12)
    count = 70 + int(prng.next() * 60)
    for _ in range(count):
        x = int(prng.next() * canvas.width)
        y = int(prng.next() * canvas.height)
        if prng.chance(0.7):
            canvas.paint_over(x, y, speck)

    haze = hex_to_rgba("#ffffff", 18)
    band = 10 + int(prng.next() * 12)
    for y in range(band, band + 6):
        for x in range(canvas.width):
            if prng.chance(0.25):
                canvas.paint_over(x, y, haze)
    return bg


def draw_neck_and_shoulders(canvas: Canvas, colors: dict) -> None:
    canvas.fill_ellipse(32, 78, 22, 12, colors["skin"], colors["outline"])
    canvas.fill_ellipse(32, 64, 8, 10, colors["skin"], colors["outline"])
    canvas.fill_rect(22, 82, 20, 6, hex_to_rgba("#0b0d12"))
    canvas.dither_rect(22, 82, 20, 6, hex_to_rgba("#000000", 40), step=2)


def draw_hair_back(canvas: Canvas, colors: dict) -> None:
    canvas.fill_ellipse(32, 33, 22, 18, colors["hair"], colors["outline"])


def draw_head(canvas: Canvas, colors: dict) -> None:
    canvas.fill_ellipse(32, 44, 18, 20, colors["skin"], colors["outline"])
    canvas.dither_rect(19, 45, 26, 18, colors["skin_shade"], step=3)


def _bang_column(canvas: Canvas, x: int, top: int, drop: int, color) -> None:
    for y in range(top, top + drop):
        canvas.set(x, y, color)


def draw_bangs(canvas: Canvas, prng: Mulberry32, colors: dict) -> str:
    """Fringe across the forehead plus side locks framing the face."""
    hair = colors["hair"]
    shade = colors["hair_shade"]
    style = prng.pick(BANG_STYLES)

    # crown of the hair mass, painted over the top of the head
    for x in range(15, 50):
        for y in range(24, 35):
            if (x - 32) ** 2 / 18.0 ** 2 + (y - 33) ** 2 / 11.0 ** 2 <= 1:
                canvas.set(x, y, hair)

    if style == "straight":
        for x in range(16, 49):
            _bang_column(canvas, x, 35, 1 + int(prng.next() * 4), shade)
    elif style == "parted":
        for x in range(16, 33):
            _bang_column(canvas, x, 35, 2 + int(prng.next() * 4), shade)
        for x in range(33, 49):
            _bang_column(canvas, x, 35, 1 + int(prng.next() * 3), shade)
    elif style == "messy":
        for x in range(14, 51):
            drop = 1 + int(prng.next() * 6)
            if prng.chance(0.85):
                _bang_column(canvas, x, 34, drop, shade)
    elif style == "curtain":
        for x in range(16, 49):
            drop = int(_clamp(7 - abs(x - CX) / 3.0, 1, 6))
            if prng.chance(0.9):
                _bang_column(canvas, x, 34, drop, shade)
    else:
        raise ValueError(f"Unknown bang style: {style!r}")

    for y in range(38, 59):
        if prng.chance(0.8):
            canvas.set(15, y, shade)
        if prng.chance(0.8):
            canvas.set(49, y, shade)
    return style


def _draw_eye(canvas: Canvas, prng: Mulberry32, spec: EmotionSpec, style: str,
              cx: int, cy: int, flip: int, colors: dict) -> None:
    outline = colors["outline"]
    if style == "dot":
        canvas.set(cx, cy, outline)
        canvas.set(cx, cy + 1, outline)
        return
    if style not in EYE_STYLES:
        raise ValueError(f"Unknown eye style: {style!r}")

    eye_h = max(1, spec.eye_h // 2) if style == "thin" else spec.eye_h
    canvas.fill_ellipse(cx, cy, spec.eye_w, eye_h, colors["eye_white"])

    pupil_rx = max(1, spec.eye_w // 2)
    pupil_ry = max(1, eye_h // 2)
    dx = _clamp(int(prng.next() * 3) - 1 + spec.pupil_dx * flip, -2, 2)
    dy = _clamp(int(prng.next() * 3) - 1 + spec.pupil_dy, -2, 2)
    canvas.fill_ellipse(cx + dx, cy + dy, pupil_rx, pupil_ry, colors["iris"])

    if prng.chance(0.85):
        canvas.paint_over(cx - 1, cy - 1, hex_to_rgba("#ffffff", 180))

    for x in range(cx - spec.eye_w - 1, cx + spec.eye_w + 2):
        if prng.chance(0.9):
            canvas.set(x, cy - eye_h - 1, outline)


def _draw_mouth(canvas: Canvas, prng: Mulberry32, style: str, y: int, colors: dict) -> None:
    outline = colors["outline"]
    if style == "smile":
        for x in range(26, 39):
            canvas.set(x, y, outline)
        canvas.set(26, y - 1, outline)
        canvas.set(38, y - 1, outline)
    elif style == "flat":
        for x in range(27, 38):
            canvas.set(x, y, outline)
    elif style == "o":
        canvas.fill_ellipse(32, y, 4, 3, colors["mouth"], outline)
    elif style == "teeth":
        canvas.fill_rect(27, y - 1, 11, 4, hex_to_rgba("#ffffff"))
        for x in range(26, 39):
            canvas.set(x, y - 2, outline)
            canvas.set(x, y + 2, outline)
        for yy in range(y - 1, y + 2):
            canvas.set(26, yy, outline)
            canvas.set(38, yy, outline)
        for x in range(29, 37, 3):
            for yy in range(y - 1, y + 2):
                canvas.set(x, yy, hex_to_rgba("#d7d7d7"))
    elif style == "grimace":
        for x in range(27, 38):
            canvas.set(x, y, outline)
        for x in range(28, 37):
            if prng.chance(0.6):
                canvas.set(x, y + 1, outline)
    else:
        raise ValueError(f"Unknown mouth style: {style!r}")


def draw_face(canvas: Canvas, prng: Mulberry32, spec: EmotionSpec, colors: dict) -> dict:
    """Eyes, brows, mouth and the emotion extras. Returns the resolved styles."""
    outline = colors["outline"]
    eye_y = 44 + spec.eye_y_offset
    left_x = CX - spec.eye_spread
    right_x = CX + spec.eye_spread

    eye_style = spec.eye_style or prng.pick(EYE_STYLES)
    _draw_eye(canvas, prng, spec, eye_style, left_x, eye_y, -1, colors)
    _draw_eye(canvas, prng, spec, eye_style, right_x, eye_y, 1, colors)

    brow_y = eye_y - 10 + spec.brow_y_offset
    for i in range(-6, 7):
        canvas.set(left_x + i, int(brow_y + i * spec.brow_angle / 6.0), outline)
        canvas.set(right_x + i, int(brow_y - i * spec.brow_angle / 6.0), outline)

    mouth = spec.mouth_style or prng.pick(MOUTH_STYLES)
    _draw_mouth(canvas, prng, mouth, 58 + spec.mouth_y_offset, colors)

    if spec.blush:
        for bx in (19, 39):
            canvas.fill_rect(bx, 56, 6, 3, colors["blush"], blend=True)
            canvas.dither_rect(bx, 56, 6, 3, hex_to_rgba("#000000", 18), step=2)

    if spec.sweat:
        for x, y in ((48, 49), (49, 50), (48, 51)):
            canvas.paint_over(x, y, colors["sweat"])

    if spec.tears:
        for x in (left_x - 1, right_x + 1):
            canvas.paint_over(x, eye_y + 6, colors["tear"])
            canvas.paint_over(x, eye_y + 7, colors["tear"])

    if spec.under_eye_shadow:
        canvas.dither_rect(18, eye_y + 6, 28, 6, colors["shadow"], step=2)

    return {"eyeStyle": eye_style, "mouth": mouth}


def draw_accessory(canvas: Canvas, prng: Mulberry32, colors: dict) -> str:
    outline = colors["outline"]
    accessory = prng.pick(ACCESSORIES)

    if accessory == "bandaid":
        canvas.fill_rect(41, 53, 8, 4, hex_to_rgba("#e9d7b8"))
        for x in range(42, 48, 2):
            canvas.set(x, 55, hex_to_rgba("#d2c1a5"))
        for x in range(41, 49):
            canvas.set(x, 53, outline)
            canvas.set(x, 56, outline)
        for y in (54, 55):
            canvas.set(41, y, outline)
            canvas.set(48, y, outline)
    elif accessory == "glasses":
        for x in range(17, 48):
            canvas.set(x, 44, outline)
        canvas.stroke_ellipse(22, 46, 6, 5, outline)
        canvas.stroke_ellipse(42, 46, 6, 5, outline)
        for x in (31, 32, 33):
            canvas.set(x, 46, outline)
    elif accessory == "scar":
        for i in range(7):
            canvas.set(40 + i, 42 + i, outline)
            if prng.chance(0.6):
                canvas.set(40 + i, 43 + i, outline)
    elif accessory == "halo":
        halo = hex_to_rgba("#ffe07a", 210)
        for x in range(22, 43):
            canvas.paint_over(x, 18, halo)
            canvas.paint_over(x, 19, halo)
        canvas.paint_over(21, 19, halo)
        canvas.paint_over(43, 19, halo)
    elif accessory != "none":
        raise ValueError(f"Unknown portrait accessory: {accessory!r}")
    return accessory


def apply_emotion_tint(canvas: Canvas, emotion: str) -> None:
    """Checkerboard wash of the emotion color over painted cells in the tint box."""
    hex_color, alpha = EMOTION_TINTS.get(emotion, DEFAULT_TINT)
    x0, y0, x1, y1 = TINT_BOX
    ys, xs = np.mgrid[y0:y1, x0:x1]
    painted = canvas.pixels[y0:y1, x0:x1, 3] > 0
    checker = (xs + ys) % 2 == 0

    layer = np.zeros((y1 - y0, x1 - x0, 4), dtype=np.uint8)
    layer[..., :3] = hex_to_rgba(hex_color)[:3]
    layer[..., 3] = np.where(painted & checker, alpha, 0)
    canvas.composite_layer(layer, x0, y0)


# ============================================================================
# GENERATOR
# ============================================================================


def build_portrait(prng: Mulberry32, emotion: Optional[str] = None):
    """
    Paint a portrait at base resolution.

    Returns:
        (canvas, metadata) with every resolved choice
    """
    if emotion not in EMOTIONS:
        emotion = prng.pick(EMOTIONS)

    skin, skin_shade = prng.pick(SKIN_TONES)
    hair_main, hair_shade = prng.pick(HAIR_PALETTES)
    colors = {
        "outline": hex_to_rgba("#0b0d12"),
        "skin": hex_to_rgba(skin),
        "skin_shade": hex_to_rgba(skin_shade, 70),
        "hair": hex_to_rgba(hair_main),
        "hair_shade": hex_to_rgba(hair_shade),
        "eye_white": hex_to_rgba("#f2f4ff"),
        "iris": hex_to_rgba(prng.pick(IRIS)),
        "mouth": hex_to_rgba("#3a1f24"),
        "blush": hex_to_rgba("#ff6b9a", 90),
        "sweat": hex_to_rgba("#9fe6ff", 170),
        "tear": hex_to_rgba("#6bb8ff", 170),
        "shadow": hex_to_rgba("#000000", 70),
    }

    canvas = Canvas(BASE_W, BASE_H)
    backdrop = draw_background(canvas, prng)
    draw_neck_and_shoulders(canvas, colors)
    draw_hair_back(canvas, colors)
    draw_head(canvas, colors)
    bangs = draw_bangs(canvas, prng, colors)

    spec = emotion_spec(emotion, prng)
    face = draw_face(canvas, prng, spec, colors)

    accessory = draw_accessory(canvas, prng, colors) if prng.chance(ACCESSORY_CHANCE) else "none"
    apply_emotion_tint(canvas, emotion)

    metadata = {
        "emotion": emotion,
        "accessory": accessory,
        "skin": skin,
        "hair": hair_main,
        "bangs": bangs,
        "backdrop": backdrop,
        **face,
    }
    return canvas, metadata


def generate(params=None, encode: bool = True) -> RenderResult:
    params = EmotionParams.parse(params)
    seed, ephemeral = resolve_seed(params.seed)
    canvas, traits = build_portrait(Mulberry32(seed), params.emotion)

    metadata = {"seed": seed, "ephemeral_seed": ephemeral, "scale": params.scale, **traits}
    result = finish(canvas, params.scale, metadata, encode=encode)
    log.info(
        f"[emotion] seed={seed} emotion={traits['emotion']} "
        f"accessory={traits['accessory']} -> {result.width}x{result.height}"
    )
    return result
