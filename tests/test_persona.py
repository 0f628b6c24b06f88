# tests/test_persona.py
from spritegen.generators import persona


def test_default_size_and_determinism():
    a = persona.generate({"seed": 2024}, encode=False)
    b = persona.generate({"seed": 2024}, encode=False)
    assert (a.width, a.height) == (192, 288)
    assert a.buffer == b.buffer
    assert a.metadata == b.metadata


def test_bg_is_echoed_and_consumes_no_draws():
    a = persona.generate({"seed": 9, "bg": "#FF0000"}, encode=False)
    b = persona.generate({"seed": 9, "bg": "#00ff00"}, encode=False)
    assert a.metadata["bg"] == "#ff0000"
    assert b.metadata["bg"] == "#00ff00"
    assert a.metadata["character"] == b.metadata["character"]
    assert a.metadata["eyes"] == b.metadata["eyes"]


def test_invalid_bg_falls_back():
    result = persona.generate({"seed": 1, "bg": "rainbow"}, encode=False)
    assert result.metadata["bg"] == persona.PersonaParams().bg


def test_backdrop_is_opaque():
    result = persona.generate({"seed": 31, "scale": 1}, encode=False)
    assert (result.width, result.height) == (persona.BASE_W, persona.BASE_H)
    assert (result.pixels[..., 3] == 255).all()


def test_scale_is_capped():
    result = persona.generate({"seed": 1, "scale": 99}, encode=False)
    assert (result.width, result.height) == (64 * 20, 96 * 20)


def test_explicit_character_and_styles():
    result = persona.generate({"seed": 5, "character": "ghost", "accessory": "halo",
                               "eyes": "sleepy"}, encode=False)
    meta = result.metadata
    assert meta["character"] == "ghost"
    assert meta["accessory"] == "halo"
    assert meta["eyes"] == "sleepy"
