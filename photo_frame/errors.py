"""
Error types raised by the Qt-free modules.

Decode and conversion errors are isolated per file while loading; encode
errors abort whatever export is in progress.  Preference load errors never
leave the preferences module.
"""


class FrameError(Exception):
    """Base class for all photo-frame errors."""


class DecodeError(FrameError):
    """A source file is corrupt, unreadable, or has zero dimensions."""


class ConversionError(FrameError):
    """A HEIC/HEIF container could not be converted to JPEG."""


class EncodeError(FrameError):
    """A composed raster could not be encoded to bytes."""


class ClipboardUnsupportedError(FrameError):
    """The system clipboard is not available."""


class PreferenceLoadError(FrameError):
    """The stored preference record is missing or corrupt."""


class ExportCancelled(FrameError):
    """A batch export was cancelled before it finished."""


class UnknownAspectRatioError(FrameError, KeyError):
    """An aspect ratio key is not part of the catalog."""

    def __str__(self):
        return f"unknown aspect ratio {self.args[0]!r}" if self.args else "unknown aspect ratio"
