#!/usr/bin/env python3
"""
Creature feature-assembly pipeline shared by the sticker and persona
generators.

Trait resolution order (part of the determinism contract; an explicit value
skips the draw it replaces):

1. silhouette        pick(kind.silhouettes)
2. horns             chance(kind.horn_p), then pick(HORN_STYLES)
3. ears              chance(kind.ear_p, lowered when horns are present), then pick
4. arms              chance(kind.arm_p), then pick(ARM_STYLES)
5. legs              chance(kind.leg_p), then pick(LEG_STYLES)
6. eyes              pick(EYE_STYLES)
7. mouth             pick(MOUTH_STYLES)
8. blush             chance(kind.blush_p)
9. accessory         pick(ACCESSORIES)

Render stages after that: outline, fill, shading, highlight, face,
accessory. Shading and the grimace mouth consume draws while rendering.
"""

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from spritegen.core import get_logger
from spritegen.raster import shapes
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import hex_to_rgba, tint
from spritegen.raster.prng import Mulberry32

log = get_logger("creature")

NONE = "none"

HORN_STYLES = tuple(shapes.HORN_TEMPLATES)
EAR_STYLES = tuple(shapes.EAR_TEMPLATES)
ARM_STYLES = tuple(shapes.ARM_TEMPLATES)
LEG_STYLES = tuple(shapes.LEG_TEMPLATES)
EYE_STYLES = ("dot", "round", "happy", "sparkle", "sleepy")
MOUTH_STYLES = ("smile", "flat", "o", "teeth", "grimace")
ACCESSORIES = ("none", "bow", "flower", "crown", "scarf", "glasses", "halo")

# Horns lower, but never remove, the chance of ears.
EARS_WITH_HORNS_FACTOR = 0.35


@dataclass(frozen=True)
class CreatureKind:
    name: str
    silhouettes: Tuple[str, ...]
    rx: float
    ry: float
    horn_p: float
    ear_p: float
    arm_p: float
    leg_p: float
    blush_p: float = 0.5
    ear_styles: Tuple[str, ...] = EAR_STYLES
    horn_styles: Tuple[str, ...] = HORN_STYLES


CHARACTERS: Mapping[str, CreatureKind] = MappingProxyType({
    "catblob": CreatureKind("catblob", ("round", "squircle"), 1.0, 0.9,
                            horn_p=0.05, ear_p=0.95, arm_p=0.4, leg_p=0.5,
                            ear_styles=("cat",)),
    "slime": CreatureKind("slime", ("droplet",), 1.0, 1.0,
                          horn_p=0.1, ear_p=0.1, arm_p=0.3, leg_p=0.0, blush_p=0.7),
    "bunny": CreatureKind("bunny", ("round",), 0.9, 0.95,
                          horn_p=0.0, ear_p=0.98, arm_p=0.5, leg_p=0.6,
                          ear_styles=("bunny", "floppy")),
    "imp": CreatureKind("imp", ("squircle", "round"), 0.95, 0.9,
                        horn_p=0.85, ear_p=0.5, arm_p=0.7, leg_p=0.6,
                        horn_styles=("nub", "curved")),
    "bear": CreatureKind("bear", ("squircle", "round"), 1.05, 0.9,
                         horn_p=0.0, ear_p=0.95, arm_p=0.6, leg_p=0.7,
                         ear_styles=("bear",)),
    "ghost": CreatureKind("ghost", ("droplet", "round"), 0.9, 1.05,
                          horn_p=0.05, ear_p=0.05, arm_p=0.8, leg_p=0.0),
    "frog": CreatureKind("frog", ("squircle",), 1.15, 0.8,
                         horn_p=0.0, ear_p=0.15, arm_p=0.5, leg_p=0.9),
    "dragon": CreatureKind("dragon", ("round", "squircle"), 1.0, 0.95,
                           horn_p=0.75, ear_p=0.4, arm_p=0.6, leg_p=0.6,
                           horn_styles=("curved", "unicorn", "nub")),
})

CHARACTER_NAMES = tuple(CHARACTERS.keys())

STYLE_AXES = MappingProxyType({
    "silhouette": shapes.SILHOUETTES,
    "horns": (NONE,) + HORN_STYLES,
    "ears": (NONE,) + EAR_STYLES,
    "arms": (NONE,) + ARM_STYLES,
    "legs": (NONE,) + LEG_STYLES,
    "eyes": EYE_STYLES,
    "mouth": MOUTH_STYLES,
    "accessory": ACCESSORIES,
})


@dataclass(frozen=True)
class Traits:
    character: str
    silhouette: str
    horns: str
    ears: str
    arms: str
    legs: str
    eyes: str
    mouth: str
    blush: bool
    accessory: str

    def to_metadata(self) -> Dict[str, object]:
        return asdict(self)


def _gate(prng: Mulberry32, explicit: Optional[str], p: float, styles: Tuple[str, ...]) -> str:
    if explicit is not None:
        return explicit
    if not prng.chance(p):
        return NONE
    return prng.pick(styles)


def resolve_traits(character: str, prng: Mulberry32,
                   explicit: Optional[Mapping[str, Optional[str]]] = None) -> Traits:
    """
    Resolve every creature style axis in the documented order.

    Args:
        character: Key of CHARACTERS
        prng: The call's stream
        explicit: Caller-supplied axis values (None entries are drawn)

    Raises:
        KeyError: If character is unknown
    """
    kind = CHARACTERS[character]
    explicit = dict(explicit or {})

    silhouette = explicit.get("silhouette") or prng.pick(kind.silhouettes)
    horns = _gate(prng, explicit.get("horns"), kind.horn_p, kind.horn_styles)
    ear_p = kind.ear_p * (EARS_WITH_HORNS_FACTOR if horns != NONE else 1.0)
    ears = _gate(prng, explicit.get("ears"), ear_p, kind.ear_styles)
    arms = _gate(prng, explicit.get("arms"), kind.arm_p, ARM_STYLES)
    legs = _gate(prng, explicit.get("legs"), kind.leg_p, LEG_STYLES)
    eyes = explicit.get("eyes") or prng.pick(EYE_STYLES)
    mouth = explicit.get("mouth") or prng.pick(MOUTH_STYLES)
    blush = prng.chance(kind.blush_p)
    accessory = explicit.get("accessory") or prng.pick(ACCESSORIES)

    traits = Traits(character, silhouette, horns, ears, arms, legs, eyes, mouth, blush, accessory)
    log.debug(f"[creature] resolved traits {traits}")
    return traits


def body_geometry(character: str, cx: float, cy: float, radius: float) -> shapes.Geometry:
    kind = CHARACTERS[character]
    return shapes.Geometry(cx, cy, radius * kind.rx, radius * kind.ry)


def build_mask(traits: Traits, geo: shapes.Geometry) -> shapes.Mask:
    """Silhouette with every selected attachment unioned in."""
    mask = shapes.rasterize(traits.silhouette, geo.cx, geo.cy, geo.rx, geo.ry)
    for kind in ("horns", "ears", "arms", "legs"):
        style = getattr(traits, kind)
        if style != NONE:
            mask |= shapes.place_attachment(kind, style, geo)
    return mask


# ============================================================================
# FACE
# ============================================================================


def _face_anchor(geo: shapes.Geometry):
    spread = max(3, int(round(geo.rx * 0.4)))
    eye_y = int(round(geo.cy - geo.ry * 0.1))
    mouth_y = int(round(geo.cy + geo.ry * 0.3))
    return int(round(geo.cx)), spread, eye_y, mouth_y


def draw_eye(canvas: Canvas, style: str, x: int, y: int, colors: dict) -> None:
    ink = colors["ink"]
    if style == "dot":
        canvas.set(x, y, ink)
        canvas.set(x, y + 1, ink)
    elif style == "round":
        canvas.fill_rect(x - 1, y - 1, 2, 3, ink)
        canvas.paint_over(x - 1, y - 1, colors["glint"])
    elif style == "happy":
        canvas.set(x - 1, y, ink)
        canvas.set(x, y - 1, ink)
        canvas.set(x + 1, y, ink)
    elif style == "sparkle":
        canvas.fill_rect(x - 1, y - 1, 3, 3, colors["iris"])
        canvas.paint_over(x - 1, y - 1, colors["glint"])
        for xx in range(x - 1, x + 2):
            canvas.set(xx, y - 2, ink)
    elif style == "sleepy":
        for xx in range(x - 1, x + 2):
            canvas.set(xx, y, ink)
    else:
        raise ValueError(f"Unknown eye style: {style!r}")


def draw_mouth(canvas: Canvas, style: str, cx: int, y: int, colors: dict,
               prng: Mulberry32) -> None:
    ink = colors["ink"]
    if style == "smile":
        for x in range(cx - 2, cx + 3):
            canvas.set(x, y, ink)
        canvas.set(cx - 3, y - 1, ink)
        canvas.set(cx + 3, y - 1, ink)
    elif style == "flat":
        for x in range(cx - 2, cx + 3):
            canvas.set(x, y, ink)
    elif style == "o":
        canvas.fill_rect(cx - 1, y - 1, 3, 3, ink)
        canvas.set(cx, y, colors["mouth"])
    elif style == "teeth":
        canvas.fill_rect(cx - 2, y - 1, 5, 2, colors["teeth"])
        canvas.stroke_rect(cx - 3, y - 2, 7, 4, ink)
    elif style == "grimace":
        for x in range(cx - 2, cx + 3):
            canvas.set(x, y, ink)
        for x in range(cx - 2, cx + 3):
            if prng.chance(0.6):
                canvas.set(x, y + 1, ink)
    else:
        raise ValueError(f"Unknown mouth style: {style!r}")


def draw_face(canvas: Canvas, traits: Traits, geo: shapes.Geometry, colors: dict,
              prng: Mulberry32) -> None:
    cx, spread, eye_y, mouth_y = _face_anchor(geo)
    draw_eye(canvas, traits.eyes, cx - spread, eye_y, colors)
    draw_eye(canvas, traits.eyes, cx + spread, eye_y, colors)
    draw_mouth(canvas, traits.mouth, cx, mouth_y, colors, prng)
    if traits.blush:
        for bx in (cx - spread - 2, cx + spread + 1):
            canvas.paint_over(bx, eye_y + 2, colors["blush"])
            canvas.paint_over(bx + 1, eye_y + 2, colors["blush"])


# ============================================================================
# ACCESSORIES
# ============================================================================


def draw_accessory(canvas: Canvas, accessory: str, geo: shapes.Geometry, mask: shapes.Mask,
                   colors: dict) -> None:
    if accessory == NONE:
        return
    cx, spread, eye_y, _ = _face_anchor(geo)
    top = geo.top
    ink = colors["ink"]

    if accessory == "bow":
        bx, by = cx + spread + 2, top + 1
        for dx, dy in ((-2, -1), (-2, 0), (-2, 1), (-1, 0), (0, 0), (1, 0), (2, -1), (2, 0), (2, 1)):
            canvas.set(bx + dx, by + dy, colors["bow"])
        canvas.set(bx, by, ink)
    elif accessory == "flower":
        fx, fy = cx - spread - 2, top + 1
        for dx, dy in ((0, -1), (-1, 0), (1, 0), (0, 1)):
            canvas.set(fx + dx, fy + dy, colors["petal"])
        canvas.set(fx, fy, colors["gold"])
    elif accessory == "crown":
        y = top - 1
        for x in range(cx - 3, cx + 4):
            canvas.set(x, y, colors["gold"])
        for x in (cx - 3, cx, cx + 3):
            canvas.set(x, y - 1, colors["gold"])
    elif accessory == "scarf":
        y = int(round(geo.cy + geo.ry * 0.6))
        for x in range(int(geo.cx - geo.rx) - 1, int(geo.cx + geo.rx) + 2):
            for yy in (y, y + 1):
                if (x, yy) in mask:
                    canvas.set(x, yy, colors["bow"])
    elif accessory == "glasses":
        for ex in (cx - spread, cx + spread):
            canvas.stroke_ellipse(ex, eye_y, 2.5, 2.0, ink)
        for x in range(cx - spread + 3, cx + spread - 2):
            canvas.set(x, eye_y - 1, ink)
    elif accessory == "halo":
        y = top - 2
        for x in range(cx - 4, cx + 5):
            canvas.paint_over(x, y, colors["halo"])
        canvas.paint_over(cx - 5, y + 1, colors["halo"])
        canvas.paint_over(cx + 5, y + 1, colors["halo"])
    else:
        raise ValueError(f"Unknown accessory: {accessory!r}")


# ============================================================================
# ASSEMBLY
# ============================================================================


def creature_colors(palette: dict) -> dict:
    """RGBA drawing colors derived from a theme palette."""
    return {
        "outline": hex_to_rgba(palette["outline"]),
        "body": hex_to_rgba(palette["accent"]),
        "shade": hex_to_rgba(palette["shade"]),
        "highlight": hex_to_rgba(palette["highlight"]),
        "ink": hex_to_rgba("#1b1b24"),
        "glint": hex_to_rgba("#ffffff", 220),
        "iris": hex_to_rgba(palette["iris"]),
        "mouth": hex_to_rgba(tint(palette["accent"], -30)),
        "teeth": hex_to_rgba("#ffffff"),
        "blush": hex_to_rgba(palette["blush"], 150),
        "bow": hex_to_rgba(palette["blush"]),
        "petal": hex_to_rgba("#ffffff"),
        "gold": hex_to_rgba("#ffd447"),
        "halo": hex_to_rgba("#ffe07a", 210),
    }


def render_creature(canvas: Canvas, traits: Traits, geo: shapes.Geometry, palette: dict,
                    prng: Mulberry32) -> shapes.Mask:
    """
    Paint a creature in stage order: outline, fill, shading, highlight, face,
    accessory. Returns the filled mask.
    """
    colors = creature_colors(palette)
    mask = build_mask(traits, geo)
    edge = shapes.outline(mask)
    interior = mask - edge

    canvas.fill_cells(edge, colors["outline"])
    canvas.fill_cells(interior, colors["body"])
    canvas.fill_cells(shapes.shade_cells(interior, geo.cx, geo.cy, prng), colors["shade"])
    canvas.fill_cells(shapes.highlight_cells(interior, geo.cx, geo.cy, geo.rx, geo.ry),
                      colors["highlight"])

    draw_face(canvas, traits, geo, colors, prng)
    draw_accessory(canvas, traits.accessory, geo, mask, colors)
    log.debug(f"[creature] painted {len(mask)} cells ({len(edge)} outline)")
    return mask
