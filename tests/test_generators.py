# tests/test_generators.py
import pytest

from spritegen.generators import GENERATORS, capabilities, generate, get_generator


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        GENERATORS["extra"] = GENERATORS["wallpaper"]


def test_unknown_method_raises_key_error():
    with pytest.raises(KeyError):
        get_generator("paintGen")


def test_capability_cards():
    cards = capabilities()
    assert set(cards) == set(GENERATORS)
    for card in cards.values():
        assert {"name", "description", "intent", "credits", "fields"} <= set(card)
        for field in card["fields"].values():
            assert {"label", "required", "type", "description"} <= set(field)
    assert "emotion" in cards["emotionGen"]["fields"]
    assert "bg" in cards["personaGen"]["fields"]


@pytest.mark.parametrize("method", ["spriteGen", "emotionGen", "personaGen"])
def test_dispatch_is_deterministic(method):
    a = generate(method, {"seed": 314, "scale": 1}, encode=False)
    b = generate(method, {"seed": 314, "scale": 1}, encode=False)
    assert a.buffer == b.buffer
    assert a.seed == 314


def test_dispatch_accepts_no_args():
    result = generate("spriteGen")
    assert result.metadata["ephemeral_seed"] is True
    assert result.buffer[:4] == b"\x89PNG"
