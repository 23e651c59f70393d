import pytest

from photo_frame import loader
from photo_frame.conversion_cache import ConversionCache
from photo_frame.errors import ConversionError
from photo_frame.loader import load_files, load_paths


def test_keeps_input_order_and_skips_bad_files(png_bytes):
    files = [
        ("first.png", png_bytes(size=(10, 10))),
        ("broken.jpg", b"garbage"),
        ("second.png", png_bytes(size=(20, 10))),
        ("third.png", png_bytes(size=(30, 10))),
    ]
    result = load_files(files, ConversionCache(), max_workers=4)

    assert [s.name for s in result.sources] == ["first.png", "second.png", "third.png"]
    assert [s.width for s in result.sources] == [10, 20, 30]
    assert [name for name, _ in result.failures] == ["broken.jpg"]


def test_failed_conversion_falls_back_to_direct_decode(png_bytes, monkeypatch):
    def fail(data):
        raise ConversionError("no codec")

    monkeypatch.setattr(loader, "convert_heif", fail)
    result = load_files([("IMG_1.HEIC", png_bytes(size=(8, 6)))], ConversionCache())

    assert result.failures == []
    assert result.sources[0].name == "IMG_1.HEIC"
    assert result.sources[0].image.size == (8, 6)


def test_conversion_is_cached_by_name_and_size(png_bytes, monkeypatch):
    converted = png_bytes(size=(4, 4))
    calls = []

    def convert(data):
        calls.append(len(data))
        return converted

    monkeypatch.setattr(loader, "convert_heif", convert)
    cache = ConversionCache()
    heic = ("IMG_2.heic", b"x" * 100)

    load_files([heic], cache)
    load_files([heic], cache)
    load_files([("IMG_2.heic", b"y" * 101)], cache)

    assert calls == [100, 101]
    assert len(cache) == 2


def test_nothing_to_load():
    result = load_files([], ConversionCache())
    assert result.sources == [] and result.failures == []


def test_load_paths_reports_unreadable_files(tmp_path, png_bytes):
    good = tmp_path / "good.png"
    good.write_bytes(png_bytes())
    missing = tmp_path / "missing.png"

    result = load_paths([missing, good], ConversionCache())

    assert [s.name for s in result.sources] == ["good.png"]
    assert [name for name, _ in result.failures] == ["missing.png"]


@pytest.mark.parametrize("workers", [1, 3])
def test_worker_count_does_not_change_result(png_bytes, workers):
    files = [(f"{i}.png", png_bytes(size=(i + 1, 5))) for i in range(6)]
    result = load_files(files, ConversionCache(), max_workers=workers)
    assert [s.width for s in result.sources] == [1, 2, 3, 4, 5, 6]
