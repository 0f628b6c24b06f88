# tests/test_color_engine.py
import pytest

from spritegen.raster import color_engine as ce
from spritegen.raster.prng import Mulberry32


def test_hex_parsing():
    assert ce.hex_to_rgb("#ff8000") == (255, 128, 0)
    assert ce.hex_to_rgb("#fff") == (255, 255, 255)
    assert ce.hex_to_rgba("#000000", 40) == (0, 0, 0, 40)
    with pytest.raises(ValueError):
        ce.hex_to_rgb("#12345")


def test_is_hex_color():
    assert ce.is_hex_color("#191c28")
    assert not ce.is_hex_color("191c28")
    assert not ce.is_hex_color("#zzzzzz")
    assert not ce.is_hex_color(None)


@pytest.mark.parametrize(
    "hsl,rgb",
    [
        ((0, 100, 50), (255, 0, 0)),
        ((120, 100, 50), (0, 255, 0)),
        ((240, 100, 50), (0, 0, 255)),
        ((0, 0, 100), (255, 255, 255)),
        ((0, 0, 0), (0, 0, 0)),
        # 127.5 rounds half up
        ((0, 0, 50), (128, 128, 128)),
    ],
)
def test_hsl_to_rgb(hsl, rgb):
    assert ce.hsl_to_rgb(*hsl) == rgb


def test_hex_to_hsl():
    assert ce.hex_to_hsl("#ff0000") == (0.0, 100.0, 50.0)
    h, s, l = ce.hex_to_hsl("#808080")
    assert s == 0.0 and round(l) == 50


def test_tint_bounds():
    assert ce.tint("#808080", 10) != "#808080"
    with pytest.raises(ValueError):
        ce.tint("#808080", 60)


def test_mix_and_shade():
    assert ce.mix((0, 0, 0), (100, 200, 50), 0.5) == (50, 100, 25)
    assert ce.shade((250, 5, 100), 10) == (255, 15, 110)
    assert ce.shade((250, 5, 100), -10) == (240, 0, 90)


def test_jitter_hsl_wraps_and_clamps():
    p = Mulberry32(1)
    h, s, l = ce.jitter_hsl((359.0, 99.0, 1.0), (30.0, 30.0, 30.0), p)
    assert 0 <= h < 360
    assert 0 <= s <= 100 and 0 <= l <= 100
    assert p.draws == 3


def test_theme_palette_shape_and_draws():
    for theme in ce.THEME_NAMES:
        p = Mulberry32(5)
        palette = ce.theme_palette(theme, p)
        assert p.draws == 13
        assert set(palette) == {
            "bg1", "bg2", "accent", "shade", "highlight", "blush", "star", "outline", "iris",
        }
        assert all(ce.is_hex_color(v) for v in palette.values())


def test_night_uses_its_own_outline():
    assert ce.theme_palette("night", Mulberry32(1))["outline"] == "#0b1020"
    assert ce.theme_palette("sky", Mulberry32(1))["outline"] == ce.DEFAULT_OUTLINE


def test_theme_palette_is_deterministic():
    assert ce.theme_palette("mint", Mulberry32(9)) == ce.theme_palette("mint", Mulberry32(9))


def test_unknown_theme_raises():
    with pytest.raises(KeyError):
        ce.theme_palette("desert", Mulberry32(1))
