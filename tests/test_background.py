import pytest
from PIL import Image

from photo_frame.background import flatten, render_background, stack_blur
from photo_frame.models import BackgroundMode, OutputDimensions, SourceImage


def test_color_fill_covers_whole_raster():
    bg = render_background(BackgroundMode.COLOR, OutputDimensions(64, 48), color="#ff8000")
    assert bg.size == (64, 48)
    assert bg.mode == "RGB"
    assert bg.getcolors() == [(64 * 48, (255, 128, 0))]


def test_blur_without_source_is_rejected():
    with pytest.raises(ValueError):
        render_background(BackgroundMode.BLUR, OutputDimensions(10, 10), blur_radius=30)


def test_blur_covers_output_and_is_deterministic(make_source):
    source = make_source(size=(120, 40))
    source.image.paste((0, 0, 255), (60, 0, 120, 40))
    dims = OutputDimensions(90, 160)

    first = render_background(BackgroundMode.BLUR, dims, source=source, blur_radius=15)
    second = render_background(BackgroundMode.BLUR, dims, source=source, blur_radius=15)

    assert first.size == (90, 160)
    assert first.mode == "RGB"
    assert first.tobytes() == second.tobytes()


def test_blur_of_uniform_image_stays_uniform(make_source):
    bg = render_background(
        BackgroundMode.BLUR, OutputDimensions(50, 50),
        source=make_source(size=(30, 70), color=(10, 200, 90)), blur_radius=20,
    )
    for (low, high), expected in zip(bg.getextrema(), (10, 200, 90)):
        assert abs(low - expected) <= 2
        assert abs(high - expected) <= 2


def test_transparent_source_blurs_onto_black():
    source = SourceImage("clear.png", Image.new("RGBA", (20, 20), (255, 255, 255, 0)))
    bg = render_background(BackgroundMode.BLUR, OutputDimensions(40, 30), source=source, blur_radius=5)
    assert bg.getextrema() == ((0, 0), (0, 0), (0, 0))


def test_stack_blur_softens_edges():
    image = Image.new("L", (40, 10), 0)
    image.paste(255, (20, 0, 40, 10))

    blurred = stack_blur(image, 10)

    assert 0 < blurred.getpixel((19, 5)) < 255
    assert 0 < blurred.getpixel((20, 5)) < 255
    assert blurred.getpixel((0, 5)) < blurred.getpixel((39, 5))


def test_stack_blur_zero_radius_is_noop():
    image = Image.new("RGB", (5, 5), "white")
    assert stack_blur(image, 0) is image


def test_flatten_composites_alpha_onto_black():
    image = Image.new("RGBA", (4, 4), (255, 0, 0, 0))
    image.putpixel((0, 0), (255, 0, 0, 255))
    flat = flatten(image)
    assert flat.mode == "RGB"
    assert flat.getpixel((0, 0)) == (255, 0, 0)
    assert flat.getpixel((3, 3)) == (0, 0, 0)
