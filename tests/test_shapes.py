# tests/test_shapes.py
import pytest

from spritegen.raster import shapes
from spritegen.raster.prng import Mulberry32


@pytest.mark.parametrize("kind", shapes.SILHOUETTES)
def test_outline_is_cells_with_an_open_neighbour(kind):
    mask = shapes.rasterize(kind, 12.0, 12.0, 7.0, 6.0)
    assert mask
    edge = shapes.outline(mask)
    for x, y in mask:
        open_side = any((x + dx, y + dy) not in mask for dx, dy in shapes.NEIGHBORS_4)
        assert ((x, y) in edge) == open_side


def test_halo_surrounds_the_mask():
    mask = shapes.rasterize("round", 10.0, 10.0, 5.0, 5.0)
    ring = shapes.halo(mask)
    assert ring.isdisjoint(mask)
    for x, y in ring:
        assert any((x + dx, y + dy) in mask for dx, dy in shapes.NEIGHBORS_4)


def test_unknown_silhouette_raises():
    with pytest.raises(ValueError, match="Unknown silhouette"):
        shapes.rasterize("hexagon", 0, 0, 3, 3)


def test_droplet_is_cut_flat_at_the_bottom():
    mask = shapes.rasterize("droplet", 20.0, 20.0, 8.0, 8.0)
    _, _, _, max_y = shapes.bounds(mask)
    assert max_y <= 20 + 0.9 * 8


def test_attachments_are_mirrored():
    geo = shapes.Geometry(10.0, 10.0, 6.0, 6.0)
    for kind, templates in shapes.ATTACHMENT_TEMPLATES.items():
        for style in templates:
            if kind == "horns" and style == "unicorn":
                continue
            cells = shapes.place_attachment(kind, style, geo)
            for x, y in cells:
                assert (20 - x, y) in cells, (kind, style)


def test_unicorn_horn_is_single_and_centred():
    geo = shapes.Geometry(10.0, 10.0, 6.0, 6.0)
    cells = shapes.place_attachment("horns", "unicorn", geo)
    assert {x for x, _ in cells} <= {10, 11}
    assert len(cells) == len(shapes.HORN_TEMPLATES["unicorn"])


def test_unknown_attachment_raises():
    geo = shapes.Geometry(10.0, 10.0, 6.0, 6.0)
    with pytest.raises(ValueError):
        shapes.place_attachment("tails", "fluffy", geo)
    with pytest.raises(ValueError):
        shapes.place_attachment("ears", "elf", geo)


def test_shade_cells_draws_once_per_lower_right_cell():
    mask = shapes.rasterize("round", 10.0, 10.0, 5.0, 5.0)
    quadrant = [c for c in mask if c[0] > 10.0 and c[1] > 10.0]
    p = Mulberry32(8)
    picked = shapes.shade_cells(mask, 10.0, 10.0, p)
    assert p.draws == len(quadrant)
    assert picked <= set(quadrant)


def test_shade_cells_is_order_independent():
    mask = shapes.rasterize("squircle", 10.0, 10.0, 6.0, 5.0)
    shuffled = set(sorted(mask, reverse=True))
    assert shapes.shade_cells(mask, 10, 10, Mulberry32(4)) == \
        shapes.shade_cells(shuffled, 10, 10, Mulberry32(4))


def test_highlight_stays_inside_mask():
    mask = shapes.rasterize("round", 10.0, 10.0, 5.0, 5.0)
    cells = shapes.highlight_cells(mask, 10.0, 10.0, 5.0, 5.0)
    assert cells and cells <= mask


def test_sorted_cells_row_major():
    assert shapes.sorted_cells({(2, 1), (0, 2), (1, 1)}) == [(1, 1), (2, 1), (0, 2)]
