#!/usr/bin/env python3
"""
Color Engine for Procedural Pixel Art

Provides hex/RGB/HSL conversion, per-channel mixing, bounded jitter and the
theme tables palettes are derived from. Palettes are rebuilt on every call from
fresh PRNG draws; nothing here caches across calls.
"""

from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

from .prng import Mulberry32

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]
HSL = Tuple[float, float, float]


def _clamp(v, lo, hi):
    return max(lo, min(hi, v))


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert #rgb or #rrggbb to an RGB tuple."""
    h = hex_color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c + c for c in h)
    if len(h) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))


def hex_to_rgba(hex_color: str, alpha: int = 255) -> RGBA:
    """Convert hex color plus an alpha byte to an RGBA tuple."""
    r, g, b = hex_to_rgb(hex_color)
    return (r, g, b, alpha)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB tuple to hex color."""
    return f"#{r:02x}{g:02x}{b:02x}"


def is_hex_color(value: str) -> bool:
    try:
        hex_to_rgb(value)
    except (ValueError, AttributeError):
        return False
    return value.strip().startswith("#")


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """
    Convert HSL to RGB using the chroma / hue-sector decomposition.

    Args:
        h: Hue in degrees [0, 360)
        s: Saturation in percent [0, 100]
        l: Lightness in percent [0, 100]

    Returns:
        RGB tuple with 0-255 channels
    """
    s /= 100.0
    l /= 100.0
    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs(((h / 60.0) % 2) - 1))
    m = l - c / 2

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    # round half up
    return tuple(_clamp(int((v + m) * 255 + 0.5), 0, 255) for v in (r, g, b))


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """Convert HSL (degrees, percent, percent) to hex color."""
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


def hex_to_hsl(hex_color: str) -> HSL:
    """Convert hex color to HSL (degrees, percent, percent)."""
    r, g, b = hex_to_rgb(hex_color)
    r, g, b = r / 255.0, g / 255.0, b / 255.0

    max_val = max(r, g, b)
    min_val = min(r, g, b)
    delta = max_val - min_val

    # Lightness
    l = (max_val + min_val) / 2.0

    if delta == 0:
        h = s = 0.0
    else:
        # Saturation
        s = delta / (2.0 - max_val - min_val) if l > 0.5 else delta / (max_val + min_val)

        # Hue
        if max_val == r:
            h = (g - b) / delta + (6 if g < b else 0)
        elif max_val == g:
            h = (b - r) / delta + 2
        else:
            h = (r - g) / delta + 4
        h /= 6.0

    return (h * 360.0, s * 100.0, l * 100.0)


def tint(hex_color: str, amount: float) -> str:
    """
    Create a lighter (positive amount) or darker (negative) version of a color.

    Args:
        hex_color: Base color in hex format
        amount: Lightness offset in percent points (-50 to +50)

    Returns:
        Tinted color in hex format
    """
    if not -50 <= amount <= 50:
        raise ValueError("Tint amount must be between -50 and +50")

    h, s, l = hex_to_hsl(hex_color)
    return hsl_to_hex(h % 360, s, _clamp(l + amount, 0.0, 100.0))


def mix(a: Sequence[int], b: Sequence[int], t: float) -> RGB:
    """Linear per-channel interpolation from a (t=0) to b (t=1)."""
    return tuple(int(round(a[i] + (b[i] - a[i]) * t)) for i in range(3))


def shade(rgb: Sequence[int], amount: int) -> RGB:
    """Add a constant offset to every channel, clamped to 0-255."""
    return tuple(_clamp(int(rgb[i]) + amount, 0, 255) for i in range(3))


def with_alpha(rgb: Sequence[int], alpha: int = 255) -> RGBA:
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), alpha)


def jitter_hsl(base: HSL, amounts: Tuple[float, float, float], prng: Mulberry32) -> HSL:
    """
    Jitter an HSL triple by signed PRNG offsets (3 draws: h, s, l).

    Hue wraps modulo 360; saturation and lightness clamp to [0, 100].
    """
    h, s, l = base
    dh, ds, dl = amounts
    h = (h + prng.signed(dh) + 360) % 360
    s = _clamp(s + prng.signed(ds), 0.0, 100.0)
    l = _clamp(l + prng.signed(dl), 0.0, 100.0)
    return (h, s, l)


def jitter_rgb(hex_color: str, prng: Mulberry32, amount: int = 18) -> RGB:
    """Jitter each RGB channel by an integer in [-amount, amount] (3 draws)."""
    r, g, b = hex_to_rgb(hex_color)
    return tuple(
        _clamp(v + prng.int_in_range(-amount, amount), 0, 255) for v in (r, g, b)
    )


# ============================================================================
# THEME TABLES
# ============================================================================

# Base (h, s, l) triples per named theme. Read-only after import.
THEMES: Mapping[str, Mapping[str, HSL]] = MappingProxyType({
    "sky": MappingProxyType({
        "bg_a": (200, 70, 78),
        "bg_b": (260, 65, 82),
        "accent": (320, 75, 75),
        "star": (55, 90, 85),
    }),
    "sakura": MappingProxyType({
        "bg_a": (330, 75, 85),
        "bg_b": (210, 65, 85),
        "accent": (350, 80, 78),
        "star": (50, 95, 88),
    }),
    "mint": MappingProxyType({
        "bg_a": (160, 55, 82),
        "bg_b": (210, 60, 84),
        "accent": (290, 60, 80),
        "star": (55, 90, 88),
    }),
    "night": MappingProxyType({
        "bg_a": (230, 55, 25),
        "bg_b": (270, 55, 22),
        "accent": (320, 60, 45),
        "star": (55, 90, 80),
    }),
})

THEME_NAMES = tuple(THEMES.keys())

# Jitter bounds (hue degrees, saturation points, lightness points)
THEME_JITTER = (12.0, 10.0, 8.0)

OUTLINES = MappingProxyType({"night": "#0b1020"})
DEFAULT_OUTLINE = "#2b2b35"

IRIS_COLORS = ("#2d7dff", "#2bd4c7", "#8d5bff", "#ffb84d", "#ff4d6d")


def theme_palette(theme: str, prng: Mulberry32) -> dict:
    """
    Derive a named palette for a theme.

    Consumes 12 draws (bg1, bg2, accent, star; h/s/l each) plus 1 draw for the
    iris pick. Shade, highlight and blush are derived from the jittered accent
    without further draws.

    Raises:
        KeyError: If theme is not one of THEME_NAMES
    """
    base = THEMES[theme]
    bg1 = hsl_to_hex(*jitter_hsl(base["bg_a"], THEME_JITTER, prng))
    bg2 = hsl_to_hex(*jitter_hsl(base["bg_b"], THEME_JITTER, prng))
    accent_hsl = jitter_hsl(base["accent"], THEME_JITTER, prng)
    star = hsl_to_hex(*jitter_hsl(base["star"], THEME_JITTER, prng))

    ah, as_, al = accent_hsl
    return {
        "bg1": bg1,
        "bg2": bg2,
        "accent": hsl_to_hex(ah, as_, al),
        "shade": hsl_to_hex(ah, _clamp(as_ + 6, 0, 100), _clamp(al - 16, 0, 100)),
        "highlight": hsl_to_hex(ah, _clamp(as_ - 10, 0, 100), _clamp(al + 14, 0, 100)),
        "blush": hsl_to_hex((ah + 340) % 360, 85, 72),
        "star": star,
        "outline": OUTLINES.get(theme, DEFAULT_OUTLINE),
        "iris": prng.pick(IRIS_COLORS),
    }
