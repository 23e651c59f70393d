import pytest

from photo_frame.errors import UnknownAspectRatioError
from photo_frame.ratios import ASPECT_RATIOS, get_ratio, grouped_ratios, is_known_ratio


def test_catalog_is_consistent():
    assert len(ASPECT_RATIOS) == 7
    assert len({spec.key for spec in ASPECT_RATIOS}) == 7
    assert len({spec.export_name for spec in ASPECT_RATIOS}) == 7
    for spec in ASPECT_RATIOS:
        assert spec.key == f"{spec.ratio_w}:{spec.ratio_h}"
        assert spec.ratio_h > 0


def test_lookup():
    assert get_ratio("1:1").export_name == "square"
    assert get_ratio("9:16").export_name == "vertical"
    assert is_known_ratio("4:5")
    assert not is_known_ratio("5:4")
    assert not is_known_ratio(None)


def test_unknown_key_fails_fast():
    with pytest.raises(UnknownAspectRatioError):
        get_ratio("7:5")
    with pytest.raises(KeyError):
        get_ratio("")


def test_grouping_for_option_lists():
    groups = grouped_ratios()
    assert [category for category, _ in groups] == [None, "Horizontal", "Vertical"]
    assert [spec.key for spec in groups[0][1]] == ["1:1"]
    assert [spec.key for spec in groups[1][1]] == ["3:2", "16:9", "4:3"]
    assert [spec.key for spec in groups[2][1]] == ["4:5", "9:16", "2:3"]
