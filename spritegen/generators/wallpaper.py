#!/usr/bin/env python3
"""
Wallpaper Generator (wallpaper)

Procedural abstract 1024x1024 wallpaper: a three-stop linear gradient, a set
of soft blurred color blobs, one translucent rounded bar, a fine grain
texture and a radial vignette. Unlike the pixel-art generators it is rendered
directly at full resolution (upscale factor 1).

Layers are composed with numpy; blurs and the rounded bar go through Pillow.
"""

from typing import List, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

from spritegen.core import get_logger
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import hsl_to_rgb, rgb_to_hex
from spritegen.raster.output import RenderResult, finish
from spritegen.raster.prng import Mulberry32, resolve_seed

from .params import WallpaperParams

log = get_logger("wallpaper")

SIZE = 1024

PALETTE_MODES = ("analogous", "complement", "triad")
HUE_OFFSETS = {
    "analogous": (0, 25, -25, 55),
    "complement": (0, 180, 30, 210),
    "triad": (0, 120, 240, 60),
}

VIGNETTE_RADIUS = 0.7
VIGNETTE_INNER = 0.55
TEXTURE_ALPHA = 0.6


def make_palette(prng: Mulberry32) -> Tuple[str, List[Tuple[int, int, int]]]:
    """
    Four colors around a random base hue (5 draws).

    Even slots take the darker lightness, odd slots the lighter one, with a
    small saturation split between them.
    """
    base = prng.next() * 360
    mode = prng.pick(PALETTE_MODES)
    sat = 55 + prng.next() * 25
    light_a = 35 + prng.next() * 15
    light_b = 60 + prng.next() * 18

    colors = []
    for i, offset in enumerate(HUE_OFFSETS[mode]):
        h = round((base + offset + 360) % 360) % 360
        s = round(sat + (6 if i % 2 else -6))
        l = round(light_b if i % 2 else light_a)
        colors.append(hsl_to_rgb(h, s, l))
    return mode, colors


def linear_gradient(size: int, p1, p2, stops) -> np.ndarray:
    """
    (size, size, 3) float gradient between two points given in percent.

    stops is a list of (offset, rgb). A zero-length vector paints the last stop.
    """
    x1, y1 = p1[0] / 100.0 * size, p1[1] / 100.0 * size
    x2, y2 = p2[0] / 100.0 * size, p2[1] / 100.0 * size
    dx, dy = x2 - x1, y2 - y1
    denom = dx * dx + dy * dy

    out = np.empty((size, size, 3), dtype=np.float64)
    if denom == 0:
        out[:, :] = stops[-1][1]
        return out

    ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
    t = np.clip(((xs + 0.5 - x1) * dx + (ys + 0.5 - y1) * dy) / denom, 0.0, 1.0)

    offsets = np.array([s[0] for s in stops])
    for c in range(3):
        channel = np.array([s[1][c] for s in stops], dtype=np.float64)
        out[..., c] = np.interp(t, offsets, channel)
    return out


def _mask_layer(mask: Image.Image, rgb, opacity: float) -> np.ndarray:
    alpha = np.asarray(mask, dtype=np.float64) * opacity
    layer = np.empty((mask.height, mask.width, 4), dtype=np.uint8)
    layer[..., :3] = rgb
    layer[..., 3] = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)
    return layer


def blob_layer(size: int, cx: float, cy: float, r: float, rgb, opacity: float,
               blur: float) -> np.ndarray:
    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).ellipse((cx - r, cy - r, cx + r, cy + r), fill=255)
    mask = mask.filter(ImageFilter.GaussianBlur(radius=blur))
    return _mask_layer(mask, rgb, opacity)


def bar_layer(size: int, box, radius: float, rgb, opacity: float) -> np.ndarray:
    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).rounded_rectangle(box, radius=radius, fill=255)
    return _mask_layer(mask, rgb, opacity)


def texture_layer(size: int, seed: int, frequency: float, opacity: float) -> np.ndarray:
    """Gray grain: per-pixel noise mixed with a half-resolution octave."""
    rng = np.random.default_rng(seed)
    fine = rng.random((size, size))
    coarse = rng.random((size // 2 + 1, size // 2 + 1))
    coarse = np.repeat(np.repeat(coarse, 2, axis=0), 2, axis=1)[:size, :size]
    weight = 1.0 / frequency
    grain = (fine + coarse * weight) / (1.0 + weight)

    layer = np.empty((size, size, 4), dtype=np.uint8)
    gray = np.rint(grain * 255).astype(np.uint8)
    layer[..., 0] = layer[..., 1] = layer[..., 2] = gray
    layer[..., 3] = int(round(TEXTURE_ALPHA * opacity * 255))
    return layer


def vignette_layer(size: int, opacity: float) -> np.ndarray:
    ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
    nx = (xs + 0.5) / size - 0.5
    ny = (ys + 0.5) / size - 0.5
    d = np.sqrt(nx * nx + ny * ny) / VIGNETTE_RADIUS
    ramp = np.clip((d - VIGNETTE_INNER) / (1.0 - VIGNETTE_INNER), 0.0, 1.0)
    layer = np.zeros((size, size, 4), dtype=np.uint8)
    layer[..., 3] = np.rint(ramp * opacity * 255).astype(np.uint8)
    return layer


def build_wallpaper(seed: int, size: int = SIZE):
    """
    Render the wallpaper for a canonical seed.

    Returns:
        (canvas, metadata)
    """
    prng = Mulberry32(seed)
    mode, (c1, c2, c3, c4) = make_palette(prng)

    p1 = (round(prng.next() * 100), round(prng.next() * 100))
    p2 = (round(prng.next() * 100), round(prng.next() * 100))

    blobs = 6 + int(prng.next() * 6)
    max_r = size * (0.18 + prng.next() * 0.12)
    blob_specs = []
    for _ in range(blobs):
        cx = prng.next() * size
        cy = prng.next() * size
        r = max_r * (0.5 + prng.next())
        fill = prng.pick((c1, c2, c3, c4))
        opacity = 0.18 + prng.next() * 0.22
        blur = 20 + prng.next() * 40
        blob_specs.append((cx, cy, r, fill, opacity, blur))

    texture_opacity = 0.07 + prng.next() * 0.06
    vignette_opacity = 0.12 + prng.next() * 0.1
    frequency = 0.8 + prng.next() * 0.6

    bar_opacity = 0.1 + prng.next() * 0.14
    bx = size * (0.05 + prng.next() * 0.15)
    by = size * (0.05 + prng.next() * 0.15)
    bw = size * (0.55 + prng.next() * 0.25)
    bh = size * (0.08 + prng.next() * 0.08)
    bar_radius = 18 + prng.next() * 28

    gradient = linear_gradient(size, p1, p2, [(0.0, c1), (0.5, c2), (1.0, c3)])
    pixels = np.empty((size, size, 4), dtype=np.uint8)
    pixels[..., :3] = np.clip(np.rint(gradient), 0, 255).astype(np.uint8)
    pixels[..., 3] = 255
    canvas = Canvas.from_array(pixels)

    for cx, cy, r, fill, opacity, blur in blob_specs:
        canvas.composite_layer(blob_layer(size, cx, cy, r, fill, opacity, blur))
    canvas.composite_layer(bar_layer(size, (bx, by, bx + bw, by + bh), bar_radius, c4, bar_opacity))
    canvas.composite_layer(texture_layer(size, seed, frequency, texture_opacity))
    canvas.composite_layer(vignette_layer(size, vignette_opacity))

    metadata = {
        "paletteMode": mode,
        "blobs": blobs,
        "palette": [rgb_to_hex(*c) for c in (c1, c2, c3, c4)],
    }
    log.debug(f"[wallpaper] mode={mode} blobs={blobs} draws={prng.draws}")
    return canvas, metadata


def generate(params=None, encode: bool = True) -> RenderResult:
    params = WallpaperParams.parse(params)
    seed, ephemeral = resolve_seed(params.seed)
    canvas, traits = build_wallpaper(seed)

    metadata = {"seed": seed, "ephemeral_seed": ephemeral, **traits}
    result = finish(canvas, 1, metadata, encode=encode)
    log.info(f"[wallpaper] seed={seed} mode={traits['paletteMode']} -> {result.width}x{result.height}")
    return result
