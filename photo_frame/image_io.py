"""
Qt-free image I/O utilities.

Provides helpers to decode images from bytes (including PSD and HEIC),
encode composed rasters to PNG, derive export filenames, and generate
unique file paths.  Safe to import in worker processes.
"""

import io
import logging
import re
from pathlib import Path

from PIL import Image, ImageOps
from pillow_heif import register_heif_opener
from psd_tools import PSDImage

from photo_frame.config import HEIF_EXTENSIONS, HEIF_JPEG_QUALITY, PNG_COMPRESS_LEVEL, EXPORT_EXTENSION
from photo_frame.errors import ConversionError, DecodeError, EncodeError
from photo_frame.ratios import AspectRatioSpec

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None

register_heif_opener()

# Exceptions Pillow and its plugins raise for unreadable data
_DECODER_ERRORS = (OSError, ValueError, RuntimeError, SyntaxError, EOFError)

# Trailing ".ext" (at least one character after the dot)
_EXTENSION_RE = re.compile(r"\.[^.]+$")


def is_heif(name: str) -> bool:
    """True for HEIC/HEIF containers, detected by filename suffix."""
    return Path(name).suffix.lower() in HEIF_EXTENSIONS


def convert_heif(data: bytes) -> bytes:
    """Re-encode a HEIC/HEIF container as JPEG bytes the decoder can read directly."""
    try:
        with Image.open(io.BytesIO(data)) as heif:
            rgb = ImageOps.exif_transpose(heif).convert("RGB")
        out = io.BytesIO()
        rgb.save(out, "JPEG", quality=HEIF_JPEG_QUALITY)
    except _DECODER_ERRORS as exc:
        raise ConversionError(f"HEIC conversion failed: {exc}") from exc
    return out.getvalue()


def decode_image(name: str, data: bytes) -> Image.Image:
    """
    Decode *data* into a fully loaded RGB or RGBA image.

    PSD files are composited with psd-tools; everything else goes through
    Pillow.  EXIF orientation is applied so the pixels are upright.  Raises
    DecodeError for corrupt, unsupported, or zero-sized input.
    """
    try:
        if Path(name).suffix.lower() == ".psd":
            image = PSDImage.open(io.BytesIO(data)).composite()
            if image is None:
                raise DecodeError(f"{name}: PSD has no pixel data")
        else:
            image = Image.open(io.BytesIO(data))
            image.load()
        image = ImageOps.exif_transpose(image)
    except _DECODER_ERRORS as exc:
        raise DecodeError(f"{name}: {exc}") from exc

    if image.width < 1 or image.height < 1:
        raise DecodeError(f"{name}: image has zero dimensions")

    has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
    logger.debug("Decoded %s: %dx%d %s", name, image.width, image.height, image.mode)
    return image.convert("RGBA" if has_alpha else "RGB")


def encode_png(image: Image.Image) -> bytes:
    """Encode a raster losslessly as PNG bytes."""
    out = io.BytesIO()
    try:
        image.save(out, "PNG", compress_level=PNG_COMPRESS_LEVEL)
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG encoding failed: {exc}") from exc
    return out.getvalue()


def output_filename(original_name: str, ratio: AspectRatioSpec, extension: str = EXPORT_EXTENSION) -> str:
    """``"sunset.jpg"`` + square → ``"sunset_square.png"`` (only the last extension is dropped)."""
    base = _EXTENSION_RE.sub("", original_name)
    return f"{base}_{ratio.export_name}.{extension}"


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1
