"""
Data models and frame-geometry utilities.

SourceImage, ImageCollection and FrameParameters are the core data
structures shared by the UI and the exporter.  The geometry helpers at
the bottom derive the output size for an aspect ratio and the contain/cover
placement of an image inside that output; they are pure functions of
their arguments.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator

from PIL import Image

from photo_frame.config import (
    MAX_DIMENSION, DEFAULT_ASPECT_RATIO,
    BORDER_MIN, BORDER_MAX, BORDER_DEFAULT,
    BACKGROUND_DEFAULT_TYPE, BACKGROUND_DEFAULT_COLOR,
    BLUR_MIN, BLUR_MAX, BLUR_DEFAULT,
)
from photo_frame.conversion_cache import ConversionCache


# =============================================================================
# Data classes
# =============================================================================
class BackgroundMode(str, Enum):
    COLOR = "color"
    BLUR = "blur"


@dataclass
class FrameParameters:
    """User-controlled frame settings; one live instance per window."""
    aspect_ratio_key: str = DEFAULT_ASPECT_RATIO
    border_px: int = BORDER_DEFAULT
    background_mode: BackgroundMode = BackgroundMode(BACKGROUND_DEFAULT_TYPE)
    background_color: str = BACKGROUND_DEFAULT_COLOR
    blur_radius_px: int = BLUR_DEFAULT

    def normalized(self) -> "FrameParameters":
        """Return a copy with border and blur radius clamped into range."""
        return replace(
            self,
            border_px=clamp(int(self.border_px), BORDER_MIN, BORDER_MAX),
            blur_radius_px=clamp(int(self.blur_radius_px), BLUR_MIN, BLUR_MAX),
        )


@dataclass(frozen=True)
class OutputDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class Placement:
    """Where an image is drawn inside the output raster (output coordinates)."""
    draw_w: float
    draw_h: float
    draw_x: float
    draw_y: float

    @property
    def is_empty(self) -> bool:
        return self.draw_w <= 0 or self.draw_h <= 0


@dataclass(frozen=True)
class SourceImage:
    """A decoded input image and the filename it was loaded from."""
    name: str
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass
class ImageCollection:
    """
    Ordered set of loaded images with a navigation cursor.

    ``current_index`` is only meaningful while the collection is non-empty.
    The HEIC conversion cache lives and dies with the collection: clearing
    the collection clears the cache too.
    """
    sources: list[SourceImage] = field(default_factory=list)
    current_index: int = 0
    conversion_cache: ConversionCache = field(default_factory=ConversionCache)

    def __len__(self) -> int:
        return len(self.sources)

    def __iter__(self) -> Iterator[SourceImage]:
        return iter(self.sources)

    def __getitem__(self, index: int) -> SourceImage:
        return self.sources[index]

    @property
    def is_empty(self) -> bool:
        return not self.sources

    @property
    def current(self) -> SourceImage | None:
        if not self.sources:
            return None
        return self.sources[self.current_index]

    @property
    def has_previous(self) -> bool:
        return bool(self.sources) and self.current_index > 0

    @property
    def has_next(self) -> bool:
        return bool(self.sources) and self.current_index < len(self.sources) - 1

    def navigate(self, index: int) -> SourceImage:
        """Move the cursor to *index* and return the image there."""
        if not 0 <= index < len(self.sources):
            raise IndexError(f"image index {index} out of range (0..{len(self.sources) - 1})")
        self.current_index = index
        return self.sources[index]

    def replace(self, sources: list[SourceImage]) -> None:
        """Swap in a new batch, releasing the previous images."""
        self._release()
        self.sources = list(sources)
        self.current_index = 0

    def clear(self) -> None:
        self._release()
        self.sources = []
        self.current_index = 0
        self.conversion_cache.clear()

    def _release(self) -> None:
        for source in self.sources:
            source.image.close()


# =============================================================================
# Geometry utilities
# =============================================================================
def clamp(value, low, high):
    return max(low, min(value, high))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def resolve_dimensions(
    source_w: int, source_h: int,
    ratio_w: int, ratio_h: int,
    max_dimension: int = MAX_DIMENSION,
) -> OutputDimensions:
    """
    Output raster size for a source image reframed to ``ratio_w:ratio_h``.

    The longer source side (capped at *max_dimension*) becomes the longer
    output side; the other side follows from the ratio.  Both sides end up
    in ``[1, max_dimension]``.
    """
    target_ratio = ratio_w / ratio_h
    base = min(max(source_w, source_h), max_dimension)

    if target_ratio >= 1:
        width = base
        height = round_half_up(width / target_ratio)
    else:
        height = base
        width = round_half_up(height * target_ratio)

    if width > max_dimension:
        width = max_dimension
        height = round_half_up(width / target_ratio)
    if height > max_dimension:
        height = max_dimension
        width = round_half_up(height * target_ratio)

    return OutputDimensions(max(1, width), max(1, height))


def place_foreground(
    output_w: int, output_h: int, border_px: int,
    source_w: int, source_h: int,
) -> Placement:
    """
    Contain-fit the source inside the output minus a border on every side.

    A border of half the output size or more leaves no room; the scale goes
    to zero or below and the placement is empty.
    """
    avail_w = output_w - 2 * border_px
    avail_h = output_h - 2 * border_px
    scale = min(avail_w / source_w, avail_h / source_h)
    return _centered(output_w, output_h, source_w * scale, source_h * scale)


def cover_placement(output_w: int, output_h: int, source_w: int, source_h: int) -> Placement:
    """Cover-fit the source over the whole output; overflow is cropped evenly."""
    scale = max(output_w / source_w, output_h / source_h)
    return _centered(output_w, output_h, source_w * scale, source_h * scale)


def _centered(output_w: int, output_h: int, draw_w: float, draw_h: float) -> Placement:
    return Placement(
        draw_w=draw_w,
        draw_h=draw_h,
        draw_x=(output_w - draw_w) / 2,
        draw_y=(output_h - draw_h) / 2,
    )
