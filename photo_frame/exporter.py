"""
Export of composed frames: single images and whole-batch ZIP archives.

``export_all`` renders every image of a collection in order and packs the
PNGs into one archive.  It is all-or-nothing: if any image fails to
compose or encode, or the export is cancelled, the half-built archive is
thrown away and the error propagates.  The collection's cursor is put back
where it was no matter how the export ends.

This module is Qt-free.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Callable, Protocol

from PIL import Image

from photo_frame.compositor import compose
from photo_frame.config import MAX_DIMENSION
from photo_frame.errors import ExportCancelled
from photo_frame.image_io import encode_png, output_filename, unique_path
from photo_frame.models import FrameParameters, ImageCollection, SourceImage
from photo_frame.ratios import get_ratio

logger = logging.getLogger(__name__)

Encoder = Callable[[Image.Image], bytes]
ProgressCallback = Callable[[int, int, SourceImage], None]


class Archive(Protocol):
    def add(self, name: str, data: bytes) -> None: ...
    def finalize(self) -> bytes: ...
    def discard(self) -> None: ...


class ZipArchive:
    """In-memory ZIP of named byte buffers.  PNG data is stored, not deflated."""

    def __init__(self):
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", compression=zipfile.ZIP_STORED)
        self.names: list[str] = []

    def add(self, name: str, data: bytes) -> None:
        self._zip.writestr(name, data)
        self.names.append(name)

    def finalize(self) -> bytes:
        self._zip.close()
        return self._buffer.getvalue()

    def discard(self) -> None:
        self._zip.close()
        self._buffer = io.BytesIO()
        self.names.clear()


# =============================================================================
# Batch export
# =============================================================================
def export_all(
    collection: ImageCollection,
    params: FrameParameters,
    encode: Encoder = encode_png,
    archive_factory: Callable[[], Archive] = ZipArchive,
    progress: ProgressCallback | None = None,
    should_cancel: Callable[[], bool] | None = None,
    max_dimension: int = MAX_DIMENSION,
) -> bytes:
    """
    Compose, encode and archive every image of *collection* in order.

    *progress* is called as ``progress(index, total, source)`` before each
    image; *should_cancel* is polled at the same point and raises
    ExportCancelled when it returns True.  Returns the finalized archive.
    """
    ratio = get_ratio(params.aspect_ratio_key)
    total = len(collection)
    original_index = collection.current_index
    archive = archive_factory()

    try:
        for index, source in enumerate(collection):
            if should_cancel is not None and should_cancel():
                raise ExportCancelled(f"export cancelled after {index} of {total} image(s)")
            if progress is not None:
                progress(index, total, source)

            data = encode(compose(source, params, max_dimension))
            archive.add(output_filename(source.name, ratio), data)
        archived = archive.finalize()
    except BaseException:
        archive.discard()
        logger.warning("Batch export aborted; archive discarded")
        raise
    finally:
        if not collection.is_empty:
            collection.current_index = original_index

    logger.info("Exported %d image(s) as %s (%d bytes)", total, ratio.export_name, len(archived))
    return archived


# =============================================================================
# Single image
# =============================================================================
def export_current(
    collection: ImageCollection,
    params: FrameParameters,
    encode: Encoder = encode_png,
    max_dimension: int = MAX_DIMENSION,
) -> tuple[str, bytes]:
    """Return ``(filename, encoded bytes)`` for the image under the cursor."""
    source = collection.current
    if source is None:
        raise IndexError("no image loaded")
    ratio = get_ratio(params.aspect_ratio_key)
    return output_filename(source.name, ratio), encode(compose(source, params, max_dimension))


def write_output(path: Path, data: bytes, overwrite: bool = False) -> Path:
    """
    Write *data* to *path*.  Unless *overwrite* is set, an existing file is
    kept and a ``-01``, ``-02``... suffixed path is used instead.  Returns
    the path actually written.
    """
    out_path = path if overwrite else unique_path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(data)
    logger.info("Wrote %s (%d bytes)", out_path, len(data))
    return out_path
