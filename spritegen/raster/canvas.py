#!/usr/bin/env python3
"""
RGBA canvas with bounds-clipped pixel access and source-over compositing.

The buffer is a (height, width, 4) uint8 numpy array. Scalar helpers
(set/paint_over) and the vectorized composite_layer share one blend formula
and one rounding rule so a layer composited in bulk matches the same layer
painted pixel by pixel.
"""

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from . import shapes
from .color_engine import mix

RGBA = Tuple[int, int, int, int]
TRANSPARENT: RGBA = (0, 0, 0, 0)


def _to_byte(v: float) -> int:
    return min(255, max(0, int(round(v))))


def blend_over(dst: Sequence[int], src: Sequence[int]) -> RGBA:
    """
    Porter-Duff source-over of src onto dst.

    outA = sa + da(1 - sa); channel = (src*sa + dst*da*(1 - sa)) / outA.
    A fully transparent result collapses to transparent black.
    """
    sa = src[3] / 255.0
    da = dst[3] / 255.0
    out_a = sa + da * (1 - sa)
    if out_a <= 0:
        return TRANSPARENT
    r = (src[0] * sa + dst[0] * da * (1 - sa)) / out_a
    g = (src[1] * sa + dst[1] * da * (1 - sa)) / out_a
    b = (src[2] * sa + dst[2] * da * (1 - sa)) / out_a
    return (_to_byte(r), _to_byte(g), _to_byte(b), _to_byte(out_a * 255))


class Canvas:
    """Mutable RGBA pixel grid owned by a single generation call."""

    def __init__(self, width: int, height: int, fill: RGBA = TRANSPARENT):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.pixels[:, :] = fill

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Canvas":
        h, w = array.shape[:2]
        canvas = cls(w, h)
        canvas.pixels[:, :, :] = array
        return canvas

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def get(self, x: int, y: int) -> RGBA:
        if not self.in_bounds(x, y):
            return TRANSPARENT
        p = self.pixels[y, x]
        return (int(p[0]), int(p[1]), int(p[2]), int(p[3]))

    def set(self, x: int, y: int, rgba: Sequence[int]) -> None:
        if not self.in_bounds(x, y):
            return
        self.pixels[y, x] = rgba

    def paint_over(self, x: int, y: int, rgba: Sequence[int]) -> None:
        if not self.in_bounds(x, y):
            return
        self.pixels[y, x] = blend_over(self.get(x, y), rgba)

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    def fill_rect(self, x0: int, y0: int, w: int, h: int, rgba: Sequence[int],
                  blend: bool = False) -> None:
        xa, xb = max(0, x0), min(self.width, x0 + w)
        ya, yb = max(0, y0), min(self.height, y0 + h)
        if xa >= xb or ya >= yb:
            return
        if blend:
            layer = np.empty((yb - ya, xb - xa, 4), dtype=np.uint8)
            layer[:, :] = rgba
            self.composite_layer(layer, xa, ya)
            return
        self.pixels[ya:yb, xa:xb] = rgba

    def stroke_rect(self, x0: int, y0: int, w: int, h: int, rgba: Sequence[int],
                    blend: bool = False) -> None:
        border = {(x, y) for x in range(x0, x0 + w) for y in (y0, y0 + h - 1)}
        border |= {(x, y) for y in range(y0, y0 + h) for x in (x0, x0 + w - 1)}
        self.fill_cells(border, rgba, blend=blend)

    def fill_cells(self, cells: Iterable[Tuple[int, int]], rgba: Sequence[int],
                   blend: bool = False) -> None:
        paint = self.paint_over if blend else self.set
        for x, y in shapes.sorted_cells(cells):
            paint(x, y, rgba)

    def fill_ellipse(self, cx: float, cy: float, rx: float, ry: float,
                     fill: Sequence[int], outline: Optional[Sequence[int]] = None) -> shapes.Mask:
        """Fill an ellipse; optionally draw its 4-neighbour outline on top."""
        mask = shapes.ellipse_mask(cx, cy, rx, ry)
        self.fill_cells(mask, fill)
        if outline is not None:
            self.fill_cells(shapes.outline(mask), outline)
        return mask

    def stroke_ellipse(self, cx: float, cy: float, rx: float, ry: float,
                       rgba: Sequence[int]) -> None:
        """Outline only; the interior is left untouched."""
        self.fill_cells(shapes.outline(shapes.ellipse_mask(cx, cy, rx, ry)), rgba)

    def dither_rect(self, x0: int, y0: int, w: int, h: int, rgba: Sequence[int],
                    step: int = 2) -> None:
        """Checkerboard-masked paint_over: cells where (x + y) % step == 0."""
        for y in range(y0, y0 + h):
            for x in range(x0, x0 + w):
                if (x + y) % step == 0:
                    self.paint_over(x, y, rgba)

    def vertical_gradient(self, top: Sequence[int], bottom: Sequence[int],
                          alpha: int = 255) -> None:
        denom = max(1, self.height - 1)
        for y in range(self.height):
            r, g, b = mix(top, bottom, y / denom)
            self.pixels[y, :] = (r, g, b, alpha)

    def paste(self, block: np.ndarray, left: int, top: int) -> None:
        """Overwrite a block of pixels (clipped to the canvas)."""
        h, w = block.shape[:2]
        xa, xb = max(0, left), min(self.width, left + w)
        ya, yb = max(0, top), min(self.height, top + h)
        if xa >= xb or ya >= yb:
            return
        self.pixels[ya:yb, xa:xb] = block[ya - top:yb - top, xa - left:xb - left]

    def composite_layer(self, layer: np.ndarray, left: int = 0, top: int = 0) -> None:
        """Vectorized source-over of an RGBA layer using the blend_over formula."""
        h, w = layer.shape[:2]
        xa, xb = max(0, left), min(self.width, left + w)
        ya, yb = max(0, top), min(self.height, top + h)
        if xa >= xb or ya >= yb:
            return
        src = layer[ya - top:yb - top, xa - left:xb - left].astype(np.float64)
        dst = self.pixels[ya:yb, xa:xb].astype(np.float64)

        sa = src[..., 3:4] / 255.0
        da = dst[..., 3:4] / 255.0
        out_a = sa + da * (1 - sa)
        safe_a = np.where(out_a > 0, out_a, 1.0)
        rgb = (src[..., :3] * sa + dst[..., :3] * da * (1 - sa)) / safe_a

        out = np.empty(src.shape, dtype=np.float64)
        out[..., :3] = rgb
        out[..., 3:4] = out_a * 255
        out = np.clip(np.rint(out), 0, 255)
        out[(out_a <= 0)[..., 0]] = 0
        self.pixels[ya:yb, xa:xb] = out.astype(np.uint8)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()
