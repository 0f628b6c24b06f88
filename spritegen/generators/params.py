"""
Typed parameter models for every generator.

Callers hand in loose option bags (JSON bodies, CLI dicts). These models turn
them into named optional fields with the permissive coercion rules below;
nothing here raises on a malformed value, it falls back to the default.

- seed: kept raw; canonicalized later by prng.resolve_seed
- scale / grid / pixel_size: numeric text accepted, floored, clamped >= 1,
  non-finite or garbage -> default
- theme / character / emotion / style axes: trimmed, lower-cased, unknown -> None
  (None means "draw it from the seed")
- bg: #rrggbb (3-digit and bare forms are expanded), invalid -> default
- gridLines: True only for True / 1 / "1"
"""

import math
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from spritegen.raster.color_engine import THEME_NAMES, hex_to_rgb, is_hex_color, rgb_to_hex

from .creature import CHARACTER_NAMES, STYLE_AXES

MAX_OUTPUT_PX = 4096
MAX_PORTRAIT_SCALE = 20

EMOTIONS = (
    "rage",
    "shy",
    "smug",
    "crying",
    "sleepy",
    "shocked",
    "determined",
    "unhinged",
)

DEFAULT_PERSONA_BG = "#191c28"

BACKGROUND_MOTIFS = ("stars", "sparkles", "hearts", "dots")


def coerce_positive_int(value: Any, default: int, cap: Optional[int] = None) -> int:
    """Floor a numeric-ish value and clamp it to [1, cap]; garbage -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    result = max(1, int(math.floor(number)))
    if cap is not None:
        result = min(result, cap)
    return result


def normalize_choice(value: Any, allowed) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value if value in allowed else None


def normalize_hex(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if value and not value.startswith("#"):
        value = "#" + value
    if not is_hex_color(value):
        return None
    return rgb_to_hex(*hex_to_rgb(value))


class GenParams(BaseModel):
    """Common base: raw seed plus lenient parsing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    seed: Any = None

    @classmethod
    def parse(cls, value=None):
        if isinstance(value, cls):
            return value
        return cls.model_validate(dict(value or {}))

    @field_validator("seed", mode="before")
    @classmethod
    def blank_seed(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class _ScaledParams(GenParams):
    scale_cap: ClassVar[Optional[int]] = None

    @field_validator("scale", mode="before", check_fields=False)
    @classmethod
    def coerce_scale(cls, v, info: ValidationInfo):
        field = cls.model_fields[info.field_name]
        return coerce_positive_int(v, field.default, cls.scale_cap)


class _CreatureStyleParams(_ScaledParams):
    theme: Optional[str] = None
    character: Optional[str] = None
    silhouette: Optional[str] = None
    horns: Optional[str] = None
    ears: Optional[str] = None
    arms: Optional[str] = None
    legs: Optional[str] = None
    eyes: Optional[str] = None
    mouth: Optional[str] = None
    accessory: Optional[str] = None

    @field_validator("theme", mode="before")
    @classmethod
    def coerce_theme(cls, v):
        return normalize_choice(v, THEME_NAMES)

    @field_validator("character", mode="before")
    @classmethod
    def coerce_character(cls, v):
        return normalize_choice(v, CHARACTER_NAMES)

    @field_validator("silhouette", "horns", "ears", "arms", "legs", "eyes", "mouth",
                     "accessory", mode="before")
    @classmethod
    def coerce_style(cls, v, info: ValidationInfo):
        return normalize_choice(v, STYLE_AXES[info.field_name])

    def explicit_styles(self) -> dict:
        return {axis: getattr(self, axis) for axis in STYLE_AXES}


class StickerParams(_CreatureStyleParams):
    """chibiPixel: full-canvas sticker with a gradient sky and one creature."""

    scale_cap: ClassVar[Optional[int]] = MAX_OUTPUT_PX

    scale: int = 2
    pixel_size: int = Field(default=8, alias="pixelSize")
    width: int = 1024
    height: int = 1024
    motif: Optional[str] = None

    @field_validator("pixel_size", mode="before")
    @classmethod
    def coerce_pixel_size(cls, v):
        return coerce_positive_int(v, 8, MAX_OUTPUT_PX)

    @field_validator("width", "height", mode="before")
    @classmethod
    def coerce_dimension(cls, v):
        return coerce_positive_int(v, 1024, MAX_OUTPUT_PX)

    @field_validator("motif", mode="before")
    @classmethod
    def coerce_motif(cls, v):
        return normalize_choice(v, BACKGROUND_MOTIFS)


class PersonaParams(_CreatureStyleParams):
    scale_cap: ClassVar[Optional[int]] = MAX_PORTRAIT_SCALE

    scale: int = 3
    bg: str = DEFAULT_PERSONA_BG

    @field_validator("bg", mode="before")
    @classmethod
    def coerce_bg(cls, v):
        return normalize_hex(v) or DEFAULT_PERSONA_BG


class SpriteParams(_ScaledParams):
    scale_cap: ClassVar[Optional[int]] = MAX_OUTPUT_PX // 24

    scale: int = 12


class EmotionParams(_ScaledParams):
    scale_cap: ClassVar[Optional[int]] = MAX_PORTRAIT_SCALE

    scale: int = 3
    emotion: Optional[str] = None

    @field_validator("emotion", mode="before")
    @classmethod
    def coerce_emotion(cls, v):
        return normalize_choice(v, EMOTIONS)


class WallpaperParams(GenParams):
    pass


class TileSheetParams(GenParams):
    grid: int = 16
    grid_lines: bool = Field(default=False, alias="gridLines")

    @field_validator("grid", mode="before")
    @classmethod
    def coerce_grid(cls, v):
        return coerce_positive_int(v, 16)

    @field_validator("grid_lines", mode="before")
    @classmethod
    def coerce_grid_lines(cls, v):
        if isinstance(v, str):
            return v.strip() == "1"
        return v is True or (not isinstance(v, bool) and v == 1)
