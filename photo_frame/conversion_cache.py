"""
In-memory cache for HEIC/HEIF conversions.

Converting a HEIC file is slow, and the same file is often dropped more
than once.  Entries are keyed by ``(filename, size in bytes)`` and hold the
converted JPEG bytes.  The cache is owned by an ``ImageCollection`` and is
cleared together with it, so it never outlives the images it served.

This module is Qt-free and safe for worker import.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class ConversionCache:
    """``(name, size)`` → converted bytes, shared by the loader threads."""

    def __init__(self):
        self._entries: dict[tuple[str, int], bytes] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str, size: int) -> bytes | None:
        with self._lock:
            return self._entries.get((name, size))

    def store(self, name: str, size: int, data: bytes) -> None:
        with self._lock:
            self._entries[(name, size)] = data

    def get_or_convert(self, name: str, data: bytes, convert: Callable[[bytes], bytes]) -> bytes:
        """Return the cached conversion of *data*, converting and storing it on a miss."""
        size = len(data)
        cached = self.get(name, size)
        if cached is not None:
            logger.debug("Conversion cache hit: %s (%d bytes)", name, size)
            return cached
        logger.debug("Conversion cache miss: %s (%d bytes)", name, size)
        converted = convert(data)
        self.store(name, size, converted)
        return converted

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.debug("Cleared %d cached conversion(s)", count)
