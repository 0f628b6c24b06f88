#!/usr/bin/env python3
"""
Output Stage

Nearest-neighbour upscaling of a base-resolution canvas and the handoff to
Pillow for PNG encoding. Upscaling never interpolates: every source pixel
becomes a flat factor x factor block.
"""

import asyncio
import functools
import io
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np
from PIL import Image

from spritegen.core import OutputCfg, get_logger, load_config

from .canvas import Canvas

log = get_logger("output")


class EncodeError(RuntimeError):
    """Raised when the pixel buffer cannot be encoded."""


@dataclass
class RenderResult:
    buffer: bytes
    width: int
    height: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    pixels: Optional[np.ndarray] = None
    mime: str = "image/png"

    @property
    def seed(self) -> Optional[int]:
        return self.metadata.get("seed")


def upscale_nearest(pixels: np.ndarray, factor: int) -> np.ndarray:
    """
    Integer nearest-neighbour upscale.

    Args:
        pixels: (h, w, 4) uint8 array
        factor: Positive integer scale

    Returns:
        (h*factor, w*factor, 4) array made of uniform factor x factor blocks
    """
    if factor < 1:
        raise ValueError(f"Scale factor must be >= 1, got {factor}")
    if factor == 1:
        return pixels.copy()
    return np.repeat(np.repeat(pixels, factor, axis=0), factor, axis=1)


def resize_nearest(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize to an explicit target size with Pillow's NEAREST kernel."""
    img = Image.fromarray(pixels)
    return np.asarray(img.resize((width, height), Image.NEAREST)).copy()


@functools.lru_cache(maxsize=1)
def output_settings() -> OutputCfg:
    """PNG settings from the config file, read once per process."""
    return load_config().output


def encode_png(pixels: np.ndarray, compress_level: Optional[int] = None) -> bytes:
    """
    Encode an RGBA array to PNG bytes.

    Raises:
        EncodeError: If Pillow rejects the buffer
    """
    output_cfg = output_settings()
    if compress_level is None:
        compress_level = output_cfg.png_compress_level
    try:
        img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
        buf = io.BytesIO()
        img.save(buf, format="PNG", compress_level=compress_level,
                 optimize=output_cfg.optimize)
    except (ValueError, TypeError, OSError) as e:
        log.error(f"[output] PNG encode failed: {e}")
        raise EncodeError(f"PNG encode failed: {e}") from e
    return buf.getvalue()


async def encode_png_async(pixels: np.ndarray, compress_level: Optional[int] = None) -> bytes:
    return await asyncio.to_thread(encode_png, pixels, compress_level)


def finish(canvas: Canvas, factor: int, metadata: Dict[str, Any],
           encode: bool = True, size: Optional[Tuple[int, int]] = None) -> RenderResult:
    """
    Upscale a finished canvas and wrap it in a RenderResult.

    Args:
        canvas: Base-resolution canvas
        factor: Integer upscale factor
        metadata: Resolved style choices, including the seed
        encode: PNG-encode the buffer (True) or return raw RGBA bytes
        size: Optional (width, height) target; applied with a NEAREST resize
            when the integer upscale does not land on it exactly

    Returns:
        RenderResult
    """
    if size is not None and (canvas.width * factor > size[0] or canvas.height * factor > size[1]):
        # never materialize an upscale larger than the requested size
        scaled = resize_nearest(canvas.pixels, size[0], size[1])
    else:
        scaled = upscale_nearest(canvas.pixels, factor)
        if size is not None and (scaled.shape[1], scaled.shape[0]) != tuple(size):
            scaled = resize_nearest(scaled, size[0], size[1])
    height, width = scaled.shape[:2]
    buffer = encode_png(scaled) if encode else scaled.tobytes()
    log.debug(f"[output] {canvas.width}x{canvas.height} x{factor} -> {width}x{height}")
    return RenderResult(
        buffer=buffer,
        width=width,
        height=height,
        metadata=dict(metadata),
        pixels=scaled,
        mime="image/png" if encode else "application/octet-stream",
    )
