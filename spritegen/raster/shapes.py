#!/usr/bin/env python3
"""
Shape Rasterizer

Implicit-function tests that turn a parametric silhouette into a set of filled
grid cells, attachment templates unioned onto that set, and the read-only
passes (outline, halo, shading, highlight) that run over the finished mask.

Masks are plain sets of (x, y) tuples. Any pass that consumes PRNG draws walks
the mask in row-major sorted order so set iteration order never leaks into the
output.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Set, Tuple

from .prng import Mulberry32

Cell = Tuple[int, int]
Mask = Set[Cell]

ROUND_THRESHOLD = 1.1
SQUIRCLE_EXPONENT = 3.4
SQUIRCLE_THRESHOLD = 1.05
DROPLET_SHIFT = 0.18
DROPLET_TAPER = 0.35
DROPLET_CUTOFF = 0.9

SILHOUETTES = ("round", "squircle", "droplet")

NEIGHBORS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))


# ============================================================================
# IMPLICIT TESTS
# ============================================================================


def inside_round(dx: float, dy: float, rx: float, ry: float,
                 threshold: float = ROUND_THRESHOLD) -> bool:
    nx = dx / rx
    ny = dy / ry
    return nx * nx + ny * ny <= threshold


def inside_squircle(dx: float, dy: float, rx: float, ry: float) -> bool:
    return (abs(dx / rx) ** SQUIRCLE_EXPONENT
            + abs(dy / ry) ** SQUIRCLE_EXPONENT) <= SQUIRCLE_THRESHOLD


def inside_droplet(dx: float, dy: float, rx: float, ry: float) -> bool:
    """
    Ellipse test with the centre pushed down so the bottom bulges, a width
    taper toward the top, and a flat cutoff line under the bulge.
    """
    if dy > DROPLET_CUTOFF * ry:
        return False
    ny = dy / ry - DROPLET_SHIFT
    width = 1.0 + DROPLET_TAPER * max(-1.0, min(1.0, ny))
    nx = dx / (rx * width)
    return nx * nx + ny * ny <= 1.05


_TESTS = MappingProxyType({
    "round": inside_round,
    "squircle": inside_squircle,
    "droplet": inside_droplet,
})


def _bbox(cx: float, cy: float, rx: float, ry: float, pad: int = 1):
    return (
        int(math.floor(cx - rx)) - pad,
        int(math.ceil(cx + rx)) + pad,
        int(math.floor(cy - ry)) - pad,
        int(math.ceil(cy + ry)) + pad,
    )


def rasterize(kind: str, cx: float, cy: float, rx: float, ry: float) -> Mask:
    """
    Classify grid cells inside a silhouette.

    Args:
        kind: One of SILHOUETTES
        cx, cy: Centre in grid units
        rx, ry: Horizontal / vertical radius in grid units

    Raises:
        ValueError: If kind is not a known silhouette
    """
    try:
        test = _TESTS[kind]
    except KeyError:
        raise ValueError(f"Unknown silhouette kind: {kind!r} (expected one of {SILHOUETTES})")

    x0, x1, y0, y1 = _bbox(cx, cy, rx, ry)
    cells = set()
    for y in range(y0, y1 + 1):
        for x in range(x0, x1 + 1):
            if test(x - cx, y - cy, rx, ry):
                cells.add((x, y))
    return cells


def ellipse_mask(cx: float, cy: float, rx: float, ry: float) -> Mask:
    """Plain unit ellipse, used by canvas fill/stroke helpers."""
    x0, x1, y0, y1 = _bbox(cx, cy, rx, ry, pad=0)
    return {
        (x, y)
        for y in range(y0, y1 + 1)
        for x in range(x0, x1 + 1)
        if inside_round(x - cx, y - cy, rx, ry, threshold=1.0)
    }


# ============================================================================
# ATTACHMENTS
# ============================================================================


@dataclass(frozen=True)
class Geometry:
    """Bounding geometry of a silhouette, in grid cells."""
    cx: float
    cy: float
    rx: float
    ry: float

    @property
    def top(self) -> int:
        return int(math.floor(self.cy - self.ry))

    @property
    def bottom(self) -> int:
        return int(math.ceil(self.cy + self.ry))


# Offsets are written for the right-hand attachment, origin at the anchor,
# negative dy pointing up. The left-hand copy is mirrored on x.
EAR_TEMPLATES: Mapping[str, Tuple[Cell, ...]] = MappingProxyType({
    "cat": ((0, 0), (1, 0), (2, 0), (0, -1), (1, -1), (2, -1), (1, -2), (2, -2), (2, -3)),
    "bunny": ((0, 0), (1, 0), (0, -1), (1, -1), (0, -2), (1, -2), (0, -3), (1, -3),
              (0, -4), (1, -4), (1, -5)),
    "bear": ((0, 0), (1, 0), (2, 0), (0, -1), (1, -1), (2, -1), (1, -2)),
    "floppy": ((0, 0), (1, 0), (2, 0), (2, 1), (3, 1), (3, 2), (3, 3)),
})

HORN_TEMPLATES: Mapping[str, Tuple[Cell, ...]] = MappingProxyType({
    "nub": ((0, 0), (0, -1), (1, -1)),
    "curved": ((0, 0), (1, 0), (1, -1), (2, -1), (2, -2), (3, -2), (3, -3)),
    "unicorn": ((0, 0), (1, 0), (0, -1), (1, -1), (0, -2), (0, -3), (0, -4)),
})

ARM_TEMPLATES: Mapping[str, Tuple[Cell, ...]] = MappingProxyType({
    "stub": ((0, 0), (1, 0), (0, 1), (1, 1)),
    "raised": ((0, 0), (1, 0), (1, -1), (2, -1), (2, -2), (2, -3)),
    "wave": ((0, 0), (1, 0), (2, 0), (2, -1), (3, -1), (3, -2)),
})

LEG_TEMPLATES: Mapping[str, Tuple[Cell, ...]] = MappingProxyType({
    "stub": ((0, 0), (1, 0), (0, 1), (1, 1)),
    "feet": ((0, 0), (1, 0), (0, 1), (1, 1), (2, 1)),
    "tall": ((0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2), (0, 3), (1, 3), (2, 3)),
})

ATTACHMENT_TEMPLATES = MappingProxyType({
    "ears": EAR_TEMPLATES,
    "horns": HORN_TEMPLATES,
    "arms": ARM_TEMPLATES,
    "legs": LEG_TEMPLATES,
})


def _anchors(kind: str, geo: Geometry) -> Tuple[Cell, Cell]:
    """Right / left anchor cells for an attachment class."""
    if kind == "ears":
        dx, y = geo.rx * 0.55, geo.top + 1
    elif kind == "horns":
        dx, y = geo.rx * 0.3, geo.top + 1
    elif kind == "arms":
        dx, y = geo.rx - 0.5, geo.cy + geo.ry * 0.2
    elif kind == "legs":
        dx, y = geo.rx * 0.4, geo.bottom - 1
    else:
        raise ValueError(f"Unknown attachment class: {kind!r}")
    right = (int(round(geo.cx + dx)), int(round(y)))
    left = (int(round(geo.cx - dx)), int(round(y)))
    return right, left


def place_attachment(kind: str, style: str, geo: Geometry) -> Mask:
    """
    Cells for one attachment class in a given style, mirrored left/right.

    The unicorn horn is the one single, centred template.

    Raises:
        ValueError: If kind or style is not in the catalog
    """
    templates = ATTACHMENT_TEMPLATES.get(kind)
    if templates is None:
        raise ValueError(f"Unknown attachment class: {kind!r}")
    if style not in templates:
        raise ValueError(f"Unknown {kind} style: {style!r} (expected one of {tuple(templates)})")
    offsets = templates[style]

    if kind == "horns" and style == "unicorn":
        ax, ay = int(round(geo.cx)), geo.top + 1
        return {(ax + dx, ay + dy) for dx, dy in offsets}

    (rx_, ry_), (lx_, ly_) = _anchors(kind, geo)
    cells = set()
    for dx, dy in offsets:
        cells.add((rx_ + dx, ry_ + dy))
        cells.add((lx_ - dx, ly_ + dy))
    return cells


# ============================================================================
# MASK PASSES
# ============================================================================


def sorted_cells(mask: Iterable[Cell]) -> List[Cell]:
    """Row-major order: y first, then x."""
    return sorted(mask, key=lambda c: (c[1], c[0]))


def outline(mask: Mask) -> Mask:
    """Filled cells with at least one unfilled 4-neighbour."""
    return {
        (x, y)
        for (x, y) in mask
        if any((x + dx, y + dy) not in mask for dx, dy in NEIGHBORS_4)
    }


def halo(mask: Mask) -> Mask:
    """Unfilled cells 4-adjacent to the mask."""
    ring = set()
    for (x, y) in mask:
        for dx, dy in NEIGHBORS_4:
            n = (x + dx, y + dy)
            if n not in mask:
                ring.add(n)
    return ring


def shade_cells(mask: Mask, cx: float, cy: float, prng: Mulberry32, p: float = 0.55) -> Mask:
    """
    Lower-right quadrant cells picked with probability p.

    Every quadrant cell consumes exactly one draw, in sorted order.
    """
    picked = set()
    for (x, y) in sorted_cells(mask):
        if x > cx and y > cy and prng.chance(p):
            picked.add((x, y))
    return picked


HIGHLIGHT_CLUSTER = ((0, 0), (1, 0), (0, 1))


def highlight_cells(mask: Mask, cx: float, cy: float, rx: float, ry: float) -> Mask:
    """Fixed small cluster toward the upper-left, clipped to the mask."""
    ox = int(round(cx - rx * 0.45))
    oy = int(round(cy - ry * 0.45))
    return {(ox + dx, oy + dy) for dx, dy in HIGHLIGHT_CLUSTER if (ox + dx, oy + dy) in mask}


def bounds(mask: Mask) -> Tuple[int, int, int, int]:
    """(min_x, min_y, max_x, max_y) of a non-empty mask."""
    xs = [c[0] for c in mask]
    ys = [c[1] for c in mask]
    return min(xs), min(ys), max(xs), max(ys)
