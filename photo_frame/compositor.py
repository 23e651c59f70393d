"""
Frame compositing: one source image + frame parameters -> one output raster.

``compose`` resolves the output size from the selected aspect ratio,
renders the background, and draws the photo contain-fitted inside the
border.  It keeps no state between calls, so the same inputs always give
the same pixels.  Qt-free and safe for worker import.
"""

from PIL import Image

from photo_frame.background import render_background
from photo_frame.config import MAX_DIMENSION
from photo_frame.models import (
    FrameParameters, OutputDimensions, SourceImage,
    place_foreground, resolve_dimensions, round_half_up,
)
from photo_frame.ratios import get_ratio


def output_dimensions(
    source: SourceImage, params: FrameParameters, max_dimension: int = MAX_DIMENSION,
) -> OutputDimensions:
    spec = get_ratio(params.aspect_ratio_key)
    return resolve_dimensions(source.width, source.height, spec.ratio_w, spec.ratio_h, max_dimension)


def compose(
    source: SourceImage, params: FrameParameters, max_dimension: int = MAX_DIMENSION,
) -> Image.Image:
    """Return the framed RGB raster for *source* under *params*."""
    dims = output_dimensions(source, params, max_dimension)

    canvas = render_background(
        params.background_mode, dims,
        source=source,
        color=params.background_color,
        blur_radius=params.blur_radius_px,
    )

    placement = place_foreground(dims.width, dims.height, params.border_px, source.width, source.height)
    draw_w = round_half_up(placement.draw_w) if not placement.is_empty else 0
    draw_h = round_half_up(placement.draw_h) if not placement.is_empty else 0
    if draw_w < 1 or draw_h < 1:
        # Border swallows the whole output: background only
        return canvas

    foreground = source.image.resize((draw_w, draw_h), Image.Resampling.LANCZOS)
    offset = (round_half_up(placement.draw_x), round_half_up(placement.draw_y))
    if foreground.mode == "RGBA":
        canvas.paste(foreground, offset, foreground)
    else:
        canvas.paste(foreground.convert("RGB"), offset)
    return canvas


def describe(source: SourceImage, params: FrameParameters, max_dimension: int = MAX_DIMENSION) -> str:
    """Preview caption: ``"name · 4000×3000px → 4000×4000px"``."""
    dims = output_dimensions(source, params, max_dimension)
    return f"{source.name} · {source.width}×{source.height}px → {dims.width}×{dims.height}px"
