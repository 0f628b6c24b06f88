"""
Raster core - seeded PRNG, RGBA canvas, shape rasterizer, palette engine and
output stage shared by every generator.
"""

from .canvas import Canvas, blend_over
from .color_engine import hex_to_rgb, hex_to_rgba, hsl_to_hex, hsl_to_rgb, jitter_hsl, mix
from .output import EncodeError, RenderResult, encode_png, finish, upscale_nearest
from .prng import Mulberry32, hash_string_to_seed, resolve_seed
from .shapes import halo, outline, rasterize

__all__ = [
    "Canvas",
    "blend_over",
    "hex_to_rgb",
    "hex_to_rgba",
    "hsl_to_hex",
    "hsl_to_rgb",
    "jitter_hsl",
    "mix",
    "EncodeError",
    "RenderResult",
    "encode_png",
    "finish",
    "upscale_nearest",
    "Mulberry32",
    "hash_string_to_seed",
    "resolve_seed",
    "halo",
    "outline",
    "rasterize",
]
