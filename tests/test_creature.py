# tests/test_creature.py
from dataclasses import FrozenInstanceError, replace

import pytest

from spritegen.generators import creature
from spritegen.raster import shapes
from spritegen.raster.canvas import Canvas
from spritegen.raster.color_engine import theme_palette
from spritegen.raster.prng import Mulberry32


def _render(traits, seed=3):
    prng = Mulberry32(seed)
    palette = theme_palette("sky", prng)
    canvas = Canvas(48, 48)
    geo = creature.body_geometry(traits.character, 24, 28, 9)
    mask = creature.render_creature(canvas, traits, geo, palette, prng)
    return canvas, mask


def test_catalogs_are_immutable():
    with pytest.raises(TypeError):
        creature.CHARACTERS["newt"] = creature.CHARACTERS["frog"]
    with pytest.raises(FrozenInstanceError):
        creature.CHARACTERS["frog"].horn_p = 1.0


def test_resolve_traits_is_deterministic():
    a = creature.resolve_traits("imp", Mulberry32(10))
    b = creature.resolve_traits("imp", Mulberry32(10))
    assert a == b


def test_explicit_axes_skip_their_draws():
    explicit = {"silhouette": "round", "horns": "none", "ears": "bear", "arms": "none",
                "legs": "none", "eyes": "dot", "mouth": "flat", "accessory": "crown"}
    p = Mulberry32(2)
    traits = creature.resolve_traits("bear", p, explicit)
    assert traits.silhouette == "round"
    assert traits.horns == "none"
    assert traits.ears == "bear"
    assert traits.eyes == "dot"
    assert traits.accessory == "crown"
    # only the blush coin is left to draw
    assert p.draws == 1


def test_character_rules_are_respected():
    for seed in range(60):
        bunny = creature.resolve_traits("bunny", Mulberry32(seed))
        assert bunny.horns == "none"
        assert bunny.ears in ("none", "bunny", "floppy")
        assert bunny.silhouette == "round"

        cat = creature.resolve_traits("catblob", Mulberry32(seed))
        assert cat.ears in ("none", "cat")

        slime = creature.resolve_traits("slime", Mulberry32(seed))
        assert slime.legs == "none"
        assert slime.silhouette == "droplet"


def test_traits_vary_across_seeds():
    seen = {creature.resolve_traits("dragon", Mulberry32(s)) for s in range(40)}
    assert len(seen) > 10


def test_unknown_character_raises():
    with pytest.raises(KeyError):
        creature.resolve_traits("unicorn", Mulberry32(1))


def test_build_mask_includes_attachments():
    traits = creature.Traits("bunny", "round", "none", "bunny", "stub", "feet",
                             "dot", "smile", False, "none")
    geo = creature.body_geometry("bunny", 24, 28, 9)
    mask = creature.build_mask(traits, geo)
    body = shapes.rasterize("round", geo.cx, geo.cy, geo.rx, geo.ry)
    assert body < mask
    assert shapes.place_attachment("ears", "bunny", geo) <= mask


def test_render_paints_every_mask_cell_opaque():
    traits = creature.Traits("frog", "squircle", "none", "none", "wave", "tall",
                             "round", "teeth", True, "none")
    canvas, mask = _render(traits)
    assert all(canvas.get(x, y)[3] == 255 for x, y in mask)
    outside = [(x, y) for y in range(48) for x in range(48) if (x, y) not in mask]
    assert any(canvas.get(x, y)[3] == 0 for x, y in outside)


@pytest.mark.parametrize("accessory", creature.ACCESSORIES)
def test_every_accessory_renders(accessory):
    traits = creature.Traits("catblob", "round", "none", "cat", "none", "none",
                             "sparkle", "o", False, accessory)
    canvas, mask = _render(traits)
    assert all(canvas.get(x, y)[3] == 255 for x, y in mask)


def test_glasses_do_not_punch_holes():
    traits = creature.Traits("bear", "round", "none", "bear", "none", "none",
                             "happy", "smile", False, "glasses")
    canvas, mask = _render(traits)
    interior = mask - shapes.outline(mask)
    assert all(canvas.get(x, y)[3] == 255 for x, y in interior)


@pytest.mark.parametrize(
    "field,value",
    [("eyes", "laser"), ("mouth", "beak"), ("accessory", "cape")],
)
def test_unknown_style_tags_raise(field, value):
    traits = creature.Traits("slime", "droplet", "none", "none", "none", "none",
                             "dot", "smile", False, "none")
    with pytest.raises(ValueError):
        _render(replace(traits, **{field: value}))


def test_to_metadata_lists_every_axis():
    traits = creature.resolve_traits("ghost", Mulberry32(1))
    meta = traits.to_metadata()
    assert set(creature.STYLE_AXES) <= set(meta)
    assert meta["character"] == "ghost"
    assert isinstance(meta["blush"], bool)


class RecordingRng:
    """Stands in for Mulberry32: logs every chance() probability, always declines."""

    def __init__(self):
        self.chances = []

    def chance(self, p):
        self.chances.append(p)
        return False

    def pick(self, seq):
        return seq[0]


def test_horns_lower_the_ear_probability():
    kind = creature.CHARACTERS["imp"]
    rng = RecordingRng()
    creature.resolve_traits("imp", rng, {"horns": kind.horn_styles[0]})
    # horns were given explicitly, so the first gate drawn is ears
    assert rng.chances[0] == pytest.approx(kind.ear_p * creature.EARS_WITH_HORNS_FACTOR)
    assert creature.EARS_WITH_HORNS_FACTOR == pytest.approx(0.35)


def test_ear_probability_is_unchanged_without_horns():
    kind = creature.CHARACTERS["imp"]
    rng = RecordingRng()
    traits = creature.resolve_traits("imp", rng)
    assert traits.horns == creature.NONE
    assert rng.chances[:2] == [pytest.approx(kind.horn_p), pytest.approx(kind.ear_p)]


def test_drawn_horns_lower_ear_frequency():
    with_horns = without_horns = 0
    ears_with = ears_without = 0
    for seed in range(400):
        traits = creature.resolve_traits("dragon", Mulberry32(seed))
        if traits.horns != creature.NONE:
            with_horns += 1
            ears_with += traits.ears != creature.NONE
        else:
            without_horns += 1
            ears_without += traits.ears != creature.NONE
    assert with_horns and without_horns
    assert ears_with / with_horns < ears_without / without_horns
