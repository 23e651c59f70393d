"""
Preference persistence: remember the last-used frame settings.

Settings are stored as one JSON record under the ``frame_settings`` key of
a flat string key-value store.  The default store is a JSON object in the
user's config directory (provided by ``config.config_dir()``)::

    {"frame_settings": "{\\"ratio\\": \\"4:5\\", \\"border\\": 20, ...}"}

The record is not versioned.  Loading never raises: a missing, unreadable
or corrupt record loads as ``None`` and the caller keeps its defaults;
individual bad fields fall back to their defaults.  This module is Qt-free.
"""

import json
import logging
from pathlib import Path
from typing import Protocol

from PIL import ImageColor

from photo_frame.config import (
    config_dir, DEFAULT_ASPECT_RATIO,
    BORDER_MIN, BORDER_MAX, BORDER_DEFAULT,
    BACKGROUND_DEFAULT_COLOR, BACKGROUND_DEFAULT_TYPE,
    BLUR_MIN, BLUR_MAX, BLUR_DEFAULT,
)
from photo_frame.errors import PreferenceLoadError
from photo_frame.models import BackgroundMode, FrameParameters, clamp
from photo_frame.ratios import is_known_ratio

logger = logging.getLogger(__name__)

SETTINGS_KEY = "frame_settings"
_SETTINGS_FILENAME = "settings.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """Flat ``str -> str`` store backed by a JSON object on disk."""

    def __init__(self, path: Path | None = None):
        self._path = path

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = config_dir() / _SETTINGS_FILENAME
        return self._path

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        return raw if isinstance(raw, dict) else {}

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except (ValueError, OSError):
            # Undecodable or corrupt files are overwritten
            data = {}
        data[key] = value
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


# =============================================================================
# Save / Load
# =============================================================================
def to_record(params: FrameParameters) -> dict:
    return {
        "ratio": params.aspect_ratio_key,
        "border": int(params.border_px),
        "bgType": BackgroundMode(params.background_mode).value,
        "bgColor": params.background_color,
        "blurAmount": int(params.blur_radius_px),
    }


def from_record(record: dict) -> FrameParameters:
    """Rebuild parameters field by field; anything missing or invalid gets its default."""
    ratio = record.get("ratio")
    if not is_known_ratio(ratio):
        ratio = DEFAULT_ASPECT_RATIO

    try:
        mode = BackgroundMode(record.get("bgType"))
    except ValueError:
        mode = BackgroundMode(BACKGROUND_DEFAULT_TYPE)

    color = record.get("bgColor")
    if not _is_color(color):
        color = BACKGROUND_DEFAULT_COLOR

    return FrameParameters(
        aspect_ratio_key=ratio,
        border_px=_int_field(record.get("border"), BORDER_DEFAULT, BORDER_MIN, BORDER_MAX),
        background_mode=mode,
        background_color=color,
        blur_radius_px=_int_field(record.get("blurAmount"), BLUR_DEFAULT, BLUR_MIN, BLUR_MAX),
    )


def save_preferences(params: FrameParameters, store: KeyValueStore) -> None:
    """Write *params* to *store*.  An unavailable store is logged, not raised."""
    try:
        store.set(SETTINGS_KEY, json.dumps(to_record(params)))
        logger.debug("Saved preferences: %s", params)
    except (ValueError, OSError) as exc:
        logger.error("Could not save preferences: %s", exc)


def load_preferences(store: KeyValueStore) -> FrameParameters | None:
    """Return the stored parameters, or None if there is no usable record."""
    try:
        return from_record(_read_record(store))
    except PreferenceLoadError as exc:
        logger.debug("No stored preferences (%s) — using defaults", exc)
        return None


def _read_record(store: KeyValueStore) -> dict:
    try:
        text = store.get(SETTINGS_KEY)
    except (ValueError, OSError) as exc:
        raise PreferenceLoadError(f"store unavailable: {exc}") from exc
    if text is None:
        raise PreferenceLoadError("no saved record")
    try:
        record = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise PreferenceLoadError(f"corrupt record: {exc}") from exc
    if not isinstance(record, dict):
        raise PreferenceLoadError("record is not an object")
    return record


def _int_field(value, default: int, low: int, high: int) -> int:
    # Slider values may arrive as strings ("20")
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return clamp(number, low, high)


def _is_color(value) -> bool:
    # Anything the background renderer accepts: "#rrggbb", "red", "rgb(1,2,3)"
    if not isinstance(value, str):
        return False
    try:
        ImageColor.getrgb(value)
    except ValueError:
        return False
    return True
