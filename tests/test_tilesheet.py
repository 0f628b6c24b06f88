# tests/test_tilesheet.py
import numpy as np
import pytest

from spritegen.generators import tilesheet
from spritegen.raster.prng import Mulberry32


def test_grid_that_does_not_divide_raises():
    with pytest.raises(tilesheet.GridDivisorError) as exc:
        tilesheet.generate({"grid": 10})
    err = exc.value
    assert isinstance(err, ValueError)
    assert err.grid == 10
    assert "grid (10)" in str(err)
    assert "valid values" in str(err)
    assert 16 in err.valid and 10 not in err.valid


def test_tile_size_for_default_grid():
    assert tilesheet.tile_size_for(16) == 64
    assert tilesheet.tile_size_for(1) == 1024
    assert tilesheet.tile_size_for(1024) == 1


def test_valid_grids_are_powers_of_two_for_1024():
    assert tilesheet.valid_grids() == [2 ** i for i in range(11)]


def test_sheet_layout_and_determinism():
    canvas_a, names_a = tilesheet.build_sheet(Mulberry32(5), 4, size=32)
    canvas_b, names_b = tilesheet.build_sheet(Mulberry32(5), 4, size=32)
    assert (canvas_a.width, canvas_a.height) == (32, 32)
    assert len(names_a) == 16
    assert names_a == names_b
    np.testing.assert_array_equal(canvas_a.pixels, canvas_b.pixels)
    assert (canvas_a.pixels[..., 3] == 255).all()


def test_different_seeds_differ():
    a, _ = tilesheet.build_sheet(Mulberry32(1), 4, size=32)
    b, _ = tilesheet.build_sheet(Mulberry32(2), 4, size=32)
    assert not np.array_equal(a.pixels, b.pixels)


def test_tile_draw_count():
    """Jitter (3) + one per pixel + 7 per speckle."""
    tile = 12
    prng = Mulberry32(9)
    tilesheet.generate_tile(tilesheet.TILE_TYPES[0], tile, prng)
    specks = (tile * tile) // tilesheet.SPECK_DENSITY
    assert prng.draws == 3 + tile * tile + 7 * specks


def test_tile_edges_are_darkened():
    prng = Mulberry32(4)
    stone = next(t for t in tilesheet.TILE_TYPES if t.name == "stone")
    tile = tilesheet.generate_tile(stone, 16, prng)
    border = np.concatenate([tile[0, :, :3], tile[-1, :, :3], tile[:, 0, :3], tile[:, -1, :3]])
    inner = tile[2:-2, 2:-2, :3]
    assert border.mean() < inner.mean()


def test_grid_lines_change_the_sheet():
    plain, _ = tilesheet.build_sheet(Mulberry32(3), 2, size=16)
    lined, _ = tilesheet.build_sheet(Mulberry32(3), 2, size=16, grid_lines=True)
    assert not np.array_equal(plain.pixels[0], lined.pixels[0])
    np.testing.assert_array_equal(plain.pixels[3, 3], lined.pixels[3, 3])


def test_generate_metadata():
    result = tilesheet.generate({"grid": 4, "seed": "dungeon", "gridLines": "1"}, encode=False)
    meta = result.metadata
    assert (result.width, result.height) == (1024, 1024)
    assert meta["grid"] == 4
    assert meta["tileSize"] == 256
    assert meta["gridLines"] is True
    assert sum(meta["tiles"].values()) == 16


def test_full_default_sheet_with_grid_lines():
    plain = tilesheet.generate({"grid": 16, "seed": 77}, encode=False)
    lined = tilesheet.generate({"grid": 16, "seed": 77, "gridLines": True}, encode=False)

    assert (lined.width, lined.height) == (1024, 1024)
    assert lined.pixels.shape == (1024, 1024, 4)
    assert lined.metadata["tileSize"] == 64
    assert sum(lined.metadata["tiles"].values()) == 256
    assert (lined.pixels[..., 3] == 255).all()

    rgb_plain = plain.pixels[..., :3].astype(int)
    rgb_lined = lined.pixels[..., :3].astype(int)
    for p in range(0, 1024, 64):
        assert rgb_lined[:, p].sum() < rgb_plain[:, p].sum()
        assert rgb_lined[p, :].sum() < rgb_plain[p, :].sum()
    # off the lines the tiles are untouched
    np.testing.assert_array_equal(rgb_lined[1:64, 1:64], rgb_plain[1:64, 1:64])
    np.testing.assert_array_equal(rgb_lined[65:128, 65:128], rgb_plain[65:128, 65:128])
