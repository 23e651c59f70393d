import itertools

import pytest

from photo_frame.conversion_cache import ConversionCache
from photo_frame.models import (
    FrameParameters, ImageCollection, OutputDimensions,
    cover_placement, place_foreground, resolve_dimensions,
)
from photo_frame.ratios import ASPECT_RATIOS

SIZES = [1, 2, 37, 100, 999, 1080, 4095, 4096, 4097, 8000, 10000]


def test_square_source_keeps_its_size():
    assert resolve_dimensions(1080, 1080, 1, 1) == OutputDimensions(1080, 1080)


def test_long_side_is_capped():
    assert resolve_dimensions(8000, 8000, 1, 1, max_dimension=4096) == OutputDimensions(4096, 4096)


def test_landscape_and_portrait_targets():
    assert resolve_dimensions(4000, 3000, 16, 9) == OutputDimensions(4000, 2250)
    assert resolve_dimensions(3000, 4000, 9, 16) == OutputDimensions(2250, 4000)


def test_rounds_half_up():
    # 8 / (16/9) = 4.5
    assert resolve_dimensions(8, 8, 16, 9) == OutputDimensions(8, 5)


@pytest.mark.parametrize("spec", ASPECT_RATIOS, ids=lambda s: s.key)
def test_dimensions_stay_in_range_and_keep_ratio(spec):
    for w, h in itertools.product(SIZES, SIZES):
        dims = resolve_dimensions(w, h, spec.ratio_w, spec.ratio_h)
        assert 1 <= dims.width <= 4096
        assert 1 <= dims.height <= 4096
        if max(w, h) >= 100:
            assert abs(dims.width / dims.height - spec.ratio) < 0.01, (w, h)


def test_contain_placement_fits_inside_border_and_is_centered():
    for out_w, out_h, border, src_w, src_h in itertools.product(
        [50, 333, 1080], [50, 720, 1920], [0, 5, 20], [1, 17, 640, 5000], [1, 480, 3000],
    ):
        p = place_foreground(out_w, out_h, border, src_w, src_h)
        assert p.draw_w <= out_w - 2 * border + 1e-9
        assert p.draw_h <= out_h - 2 * border + 1e-9
        assert p.draw_x == (out_w - p.draw_w) / 2
        assert p.draw_y == (out_h - p.draw_h) / 2


def test_contain_placement_example():
    p = place_foreground(1000, 1000, 100, 400, 200)
    assert (p.draw_w, p.draw_h, p.draw_x, p.draw_y) == (800, 400, 100, 300)


def test_oversized_border_collapses_foreground():
    assert place_foreground(1000, 1000, 500, 400, 200).is_empty
    assert place_foreground(1000, 1000, 600, 400, 200).is_empty


def test_cover_placement_leaves_no_gaps():
    for out_w, out_h, src_w, src_h in itertools.product([1, 99, 1080], [1, 608, 1920], [1, 33, 4000], [1, 250, 3000]):
        p = cover_placement(out_w, out_h, src_w, src_h)
        assert p.draw_w >= out_w - 1e-9
        assert p.draw_h >= out_h - 1e-9
        assert p.draw_x == (out_w - p.draw_w) / 2


def test_normalized_clamps_numeric_fields():
    params = FrameParameters(border_px=500, blur_radius_px=1).normalized()
    assert params.border_px == 200
    assert params.blur_radius_px == 5


def test_collection_navigation(make_source):
    collection = ImageCollection()
    assert collection.current is None
    assert not collection.has_next

    collection.replace([make_source("a.jpg"), make_source("b.jpg"), make_source("c.jpg")])
    assert collection[1].name == "b.jpg"
    assert collection.current.name == "a.jpg"
    assert not collection.has_previous and collection.has_next

    collection.navigate(2)
    assert collection.current.name == "c.jpg"
    assert collection.has_previous and not collection.has_next

    with pytest.raises(IndexError):
        collection.navigate(3)
    assert collection.current_index == 2


def test_replace_resets_cursor_and_clear_drops_cache(make_source):
    cache = ConversionCache()
    collection = ImageCollection(conversion_cache=cache)
    collection.replace([make_source("a.jpg"), make_source("b.jpg")])
    collection.navigate(1)

    cache.store("x.heic", 10, b"jpeg")
    collection.replace([make_source("c.jpg")])
    assert collection.current_index == 0
    assert len(cache) == 1

    collection.clear()
    assert collection.is_empty
    assert len(cache) == 0
