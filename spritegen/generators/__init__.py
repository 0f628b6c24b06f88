"""
Generator registry.

Maps the public method names to their handler, parameter model and the
capability card the dispatch layer publishes.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Type

from . import emotion, persona, sprite, sticker, tilesheet, wallpaper
from .params import (
    EmotionParams,
    GenParams,
    PersonaParams,
    SpriteParams,
    StickerParams,
    TileSheetParams,
    WallpaperParams,
)


@dataclass(frozen=True)
class GeneratorSpec:
    name: str
    description: str
    handler: Callable[..., Any]
    params_model: Type[GenParams]
    fields: Mapping[str, Dict[str, Any]] = field(default_factory=dict)
    intent: str = "image_generate"
    credits: float = 0.1

    def card(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "intent": self.intent,
            "credits": self.credits,
            "fields": {k: dict(v) for k, v in self.fields.items()},
        }


def _field(label: str, type_: str, description: str, required: bool = False) -> Dict[str, Any]:
    return {"label": label, "required": required, "type": type_, "description": description}


SEED_FIELD = _field("Seed", "string", "Optional. Same seed = same image. Leave blank for random.")

GENERATORS: Mapping[str, GeneratorSpec] = MappingProxyType({
    "chibiPixel": GeneratorSpec(
        name="Chibi Pixel Art",
        description="Generates a 1024x1024 image with a chibi-style pixel art character",
        handler=sticker.generate,
        params_model=StickerParams,
        fields={
            "seed": SEED_FIELD,
            "theme": _field("Theme", "string", "Optional. One of: sky, sakura, mint, night."),
            "character": _field("Character", "string",
                                "Optional. One of: catblob, slime, bunny, imp, bear, ghost, frog, dragon."),
        },
    ),
    "spriteGen": GeneratorSpec(
        name="2D Sprite Generator",
        description="Generates a simple 2D pixel character sprite",
        handler=sprite.generate,
        params_model=SpriteParams,
        fields={
            "seed": _field("Seed", "number", "Seed for deterministic sprite generation"),
            "scale": _field("Scale", "number", "Pixel scale factor (default 12)"),
        },
    ),
    "personaGen": GeneratorSpec(
        name="PersonaGen",
        description="Random code-only pixel character (192x288). No PNG assets.",
        handler=persona.generate,
        params_model=PersonaParams,
        fields={
            "seed": SEED_FIELD,
            "bg": _field("Background Color", "string",
                         'Optional hex color like "#191C28". Leave blank for default.'),
        },
    ),
    "emotionGen": GeneratorSpec(
        name="Emotion Portrait Generator",
        description="Procedural pixel emotion portrait (base 64x96, scaled to 192x288 by default). "
                    "No PNG assets.",
        handler=emotion.generate,
        params_model=EmotionParams,
        fields={
            "seed": SEED_FIELD,
            "emotion": _field("Emotion", "string",
                              "Optional. One of: rage, shy, smug, crying, sleepy, shocked, "
                              "determined, unhinged. Leave blank for random."),
            "scale": _field("Scale", "number",
                            "Optional. Pixel scale factor. Default 3 (64x96 -> 192x288)."),
        },
    ),
    "wallpaper": GeneratorSpec(
        name="Wallpaper Generator",
        description="Generates a procedural abstract wallpaper PNG (random each time).",
        handler=wallpaper.generate,
        params_model=WallpaperParams,
    ),
    "tileSheet": GeneratorSpec(
        name="Tile Sheet Generator",
        description="Generates a 1024x1024 tileset PNG split into an even grid (tiles for 2D games).",
        handler=tilesheet.generate,
        params_model=TileSheetParams,
        fields={
            "grid": _field("Grid", "number",
                           "Tiles per row/column (must divide 1024). Example: 16 => 64px tiles."),
            "seed": _field("Seed", "string", "Optional. Same seed = same tileset."),
            "gridLines": _field("Grid Lines", "number", "Optional. 1 = show grid lines, 0 = off."),
        },
    ),
})


def get_generator(method: str) -> GeneratorSpec:
    """
    Raises:
        KeyError: If method is not registered
    """
    return GENERATORS[method]


def generate(method: str, args=None, encode: bool = True):
    """Run a registered generator by method name."""
    spec = get_generator(method)
    return spec.handler(spec.params_model.parse(args), encode=encode)


def capabilities() -> Dict[str, Dict[str, Any]]:
    return {name: spec.card() for name, spec in GENERATORS.items()}


__all__ = ["GENERATORS", "GeneratorSpec", "capabilities", "generate", "get_generator"]
