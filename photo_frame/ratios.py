"""
Aspect-ratio catalog: the fixed set of output ratios and lookup helpers.

The catalog is a process-wide constant.  Keys such as ``"16:9"`` are the
canonical identifiers used in ``FrameParameters`` and in the stored
preferences; ``export_name`` is appended to exported filenames.  This
module is Qt-free and safe for worker import.
"""

from dataclasses import dataclass

from photo_frame.errors import UnknownAspectRatioError

# Display order of the category groups; uncategorized ratios come first
CATEGORIES = ("Horizontal", "Vertical")


@dataclass(frozen=True)
class AspectRatioSpec:
    """One entry of the aspect-ratio catalog."""
    key: str
    ratio_w: int
    ratio_h: int
    export_name: str
    label: str
    category: str | None = None

    @property
    def ratio(self) -> float:
        return self.ratio_w / self.ratio_h


# =============================================================================
# Catalog
# =============================================================================
ASPECT_RATIOS: tuple[AspectRatioSpec, ...] = (
    AspectRatioSpec("1:1", 1, 1, "square", "1:1 Square"),
    AspectRatioSpec("3:2", 3, 2, "photo", "3:2 (1.5:1) 35mm", "Horizontal"),
    AspectRatioSpec("16:9", 16, 9, "wide", "16:9 (1.78:1) Widescreen", "Horizontal"),
    AspectRatioSpec("4:3", 4, 3, "classic", "4:3 (1.33:1) Standard", "Horizontal"),
    AspectRatioSpec("4:5", 4, 5, "portrait", "4:5 (0.8:1) Instagram Portrait", "Vertical"),
    AspectRatioSpec("9:16", 9, 16, "vertical", "9:16 (0.5625:1) Portrait", "Vertical"),
    AspectRatioSpec("2:3", 2, 3, "photo-portrait", "2:3 Photo - 4x6 Print", "Vertical"),
)

_BY_KEY = {spec.key: spec for spec in ASPECT_RATIOS}


# =============================================================================
# Lookup
# =============================================================================
def get_ratio(key: str) -> AspectRatioSpec:
    """Return the catalog entry for *key*, raising UnknownAspectRatioError if absent."""
    try:
        return _BY_KEY[key]
    except KeyError:
        raise UnknownAspectRatioError(key) from None


def is_known_ratio(key: object) -> bool:
    return isinstance(key, str) and key in _BY_KEY


# =============================================================================
# UI helpers
# =============================================================================
def grouped_ratios() -> list[tuple[str | None, list[AspectRatioSpec]]]:
    """
    Group the catalog for option population.

    Returns ``[(None, [uncategorized...]), ("Horizontal", [...]), ...]``.
    Empty groups are left out and catalog order is kept within a group.
    """
    groups: list[tuple[str | None, list[AspectRatioSpec]]] = []
    uncategorized = [spec for spec in ASPECT_RATIOS if spec.category is None]
    if uncategorized:
        groups.append((None, uncategorized))
    for category in CATEGORIES:
        members = [spec for spec in ASPECT_RATIOS if spec.category == category]
        if members:
            groups.append((category, members))
    return groups
