"""
Application constants and configuration.

All frame-composition limits (maximum output dimension, border and blur
ranges, background defaults) and file-handling constants live here.  The
aspect-ratio catalog itself is in the ratios module.

The ``config_dir()`` helper returns the platform-appropriate config
directory and is shared by all persistence modules (preferences).
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "photo-frame"
APP_TITLE = "Frame"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory

# =============================================================================
# COMPOSITION LIMITS
# =============================================================================
# Longest side of any output raster
MAX_DIMENSION = 4096

# Border around the foreground image (pixels in output coordinates)
BORDER_MIN = 0
BORDER_MAX = 200
BORDER_DEFAULT = 0
BORDER_STEP = 5
BORDER_PRESETS = [0, 20, 50, 100, 150, 200]

# Background modes: value -> UI label
BACKGROUND_TYPES = {"color": "Color", "blur": "Blur"}
BACKGROUND_DEFAULT_TYPE = "color"
BACKGROUND_DEFAULT_COLOR = "#000000"

# Blur radius for the blurred background (pixels)
BLUR_MIN = 5
BLUR_MAX = 200
BLUR_DEFAULT = 30
BLUR_STEP = 5

# Box-blur passes that make up one stack blur (two passes = tent kernel)
BLUR_PASSES = 2

DEFAULT_ASPECT_RATIO = "1:1"

# =============================================================================
# FILE HANDLING
# =============================================================================
# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 6

# Extension of every exported raster
EXPORT_EXTENSION = "png"

# Default name offered for the batch archive
EXPORT_ARCHIVE_NAME = "frame_export.zip"

# HEIC/HEIF containers are converted to JPEG before decoding
HEIF_EXTENSIONS = {".heic", ".heif"}
HEIF_JPEG_QUALITY = 95

# Supported input extensions (HEIF via pillow-heif, PSD via psd-tools)
IMAGE_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".tif", ".webp", ".psd",
} | HEIF_EXTENSIONS

# Threads used to read and decode a dropped batch
LOAD_WORKERS = max(1, min(8, (os.cpu_count() or 4) - 1))

# Preview widget placeholder
DROP_HINT = "Drag & drop images or click to select"
