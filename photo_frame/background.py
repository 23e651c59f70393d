"""
Background rendering for the framed output (Qt-free).

Two strategies fill the full output raster before the photo is drawn on
top: a flat colour, or the photo itself cover-fitted to the output and
stack-blurred.  Safe to import in worker processes.
"""

from PIL import Image, ImageColor, ImageFilter

from photo_frame.config import BLUR_PASSES
from photo_frame.models import BackgroundMode, OutputDimensions, SourceImage, cover_placement

# Colour behind transparent pixels; the output raster is always opaque
_MATTE = (0, 0, 0)


def render_background(
    mode: BackgroundMode,
    dims: OutputDimensions,
    source: SourceImage | None = None,
    color: str | None = None,
    blur_radius: float | None = None,
) -> Image.Image:
    """Return an opaque RGB raster of exactly *dims* for the given background mode."""
    if mode == BackgroundMode.BLUR:
        if source is None:
            raise ValueError("blurred background needs a source image")
        return blurred_cover(source.image, dims, blur_radius or 0)
    return Image.new("RGB", (dims.width, dims.height), ImageColor.getrgb(color or "#000000"))


def blurred_cover(image: Image.Image, dims: OutputDimensions, radius: float) -> Image.Image:
    """Cover-fit *image* over *dims*, crop the overflow evenly, then stack-blur it."""
    src_w, src_h = image.size
    placement = cover_placement(dims.width, dims.height, src_w, src_h)
    scale = placement.draw_w / src_w

    # Visible part of the source, in source pixels
    left = -placement.draw_x / scale
    top = -placement.draw_y / scale
    box = (
        max(0.0, left),
        max(0.0, top),
        min(float(src_w), left + dims.width / scale),
        min(float(src_h), top + dims.height / scale),
    )

    covered = image.resize((dims.width, dims.height), Image.Resampling.LANCZOS, box=box)
    return stack_blur(flatten(covered), radius)


def stack_blur(image: Image.Image, radius: float) -> Image.Image:
    """
    Approximate a Gaussian blur with repeated box blurs.

    Each of the ``BLUR_PASSES`` passes uses a box of half-width
    ``radius / BLUR_PASSES``; two passes give the tent-shaped kernel of a
    stack blur with half-width *radius*.  A radius of zero is a no-op.
    """
    if radius <= 0:
        return image
    pass_radius = radius / BLUR_PASSES
    for _ in range(BLUR_PASSES):
        image = image.filter(ImageFilter.BoxBlur(pass_radius))
    return image


def flatten(image: Image.Image) -> Image.Image:
    """Drop any alpha channel by compositing onto the black matte."""
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        opaque = Image.new("RGB", rgba.size, _MATTE)
        opaque.paste(rgba, mask=rgba.getchannel("A"))
        return opaque
    return image.convert("RGB")
