"""
Batch loading of dropped or selected files.

Files are read, converted (HEIC/HEIF) and decoded on a thread pool.  Each
file succeeds or fails on its own: a bad file is reported in
``LoadResult.failures`` and the rest of the batch still loads.  Results
keep the order the files were given in, whatever order the decodes finish.

This module is Qt-free.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from photo_frame.config import LOAD_WORKERS
from photo_frame.conversion_cache import ConversionCache
from photo_frame.errors import ConversionError, DecodeError
from photo_frame.image_io import convert_heif, decode_image, is_heif
from photo_frame.models import SourceImage

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    sources: list[SourceImage] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)  # (name, error message)


def load_source(name: str, data: bytes, cache: ConversionCache) -> SourceImage:
    """
    Decode one file, converting HEIC/HEIF containers first.

    A failed conversion is not fatal: the original bytes are handed to the
    decoder directly, which raises DecodeError if it cannot read them either.
    """
    payload = data
    if is_heif(name):
        try:
            payload = cache.get_or_convert(name, data, convert_heif)
        except ConversionError as exc:
            logger.warning("%s — falling back to direct decode", exc)
            payload = data
    return SourceImage(name=name, image=decode_image(name, payload))


def load_files(
    files: list[tuple[str, bytes]],
    cache: ConversionCache,
    max_workers: int = LOAD_WORKERS,
) -> LoadResult:
    """Decode ``(name, bytes)`` pairs concurrently, keeping input order."""

    def _load(item: tuple[str, bytes]):
        name, data = item
        try:
            return load_source(name, data, cache)
        except DecodeError as exc:
            return exc

    result = LoadResult()
    if not files:
        return result

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes = list(executor.map(_load, files))

    for (name, _), outcome in zip(files, outcomes):
        if isinstance(outcome, DecodeError):
            logger.warning("Skipping %s: %s", name, outcome)
            result.failures.append((name, str(outcome)))
        else:
            result.sources.append(outcome)

    logger.info("Loaded %d of %d image(s)", len(result.sources), len(files))
    return result


def load_paths(
    paths: list[Path],
    cache: ConversionCache,
    max_workers: int = LOAD_WORKERS,
) -> LoadResult:
    """Read *paths* from disk and decode them; unreadable files count as failures."""
    files: list[tuple[str, bytes]] = []
    unreadable: list[tuple[str, str]] = []
    for path in paths:
        try:
            files.append((path.name, path.read_bytes()))
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            unreadable.append((path.name, str(exc)))

    result = load_files(files, cache, max_workers=max_workers)
    result.failures = unreadable + result.failures
    return result
