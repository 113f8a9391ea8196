"""Floor plan base images and the marker icon, loaded with Pillow."""

# Floorwalk imports
from floorwalk import config

# Standard library imports
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

# Third-party imports
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def _open_rgba(path: Path) -> Optional[Image.Image]:
    """Open an image as RGBA, or None if it cannot be read."""
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (OSError, UnidentifiedImageError) as exc:
        logger.warning(f"Could not load image {path}: {exc}")
        return None


class FloorPlanAssets:
    """
    Per-level floor plan images, cached after the first load.

    A failed load is cached too, so a missing plan is not re-read on every
    render; ``forget_failed(level)`` lets a later user action try again.

    Args:
        assets_dir: Directory holding the floor plan images.
        pattern: File name pattern with a ``{level}`` placeholder.
    """

    def __init__(
        self,
        assets_dir: Union[Path, str] = config.ASSETS_DIR,
        pattern: str = config.FLOOR_PLAN_PATTERN,
    ):
        self.assets_dir = Path(assets_dir)
        self.pattern = pattern
        self._cache: Dict[str, Optional[Image.Image]] = {}

    def path_for(self, level: str) -> Path:
        return self.assets_dir / self.pattern.format(level=level)

    def get(self, level: str) -> Optional[Image.Image]:
        """Floor plan image for ``level``, or None when it is unavailable."""
        if level in self._cache:
            return self._cache[level]
        path = self.path_for(level)
        image = _open_rgba(path) if path.exists() else None
        if image is None:
            logger.warning(f"Floor plan not found: {path}")
        self._cache[level] = image
        return image

    def forget_failed(self, level: str) -> None:
        """Drop a cached load failure so the next ``get`` reads the file again."""
        if level in self._cache and self._cache[level] is None:
            del self._cache[level]


def load_marker_icon(paths: Iterable[Union[Path, str]] = config.MARKER_ICON_PATHS) -> Optional[Image.Image]:
    """First readable icon among ``paths``; None means markers fall back to circles."""
    for path in paths:
        path = Path(path)
        if not path.exists():
            continue
        icon = _open_rgba(path)
        if icon is not None:
            logger.info(f"Marker icon loaded: {path.name}")
            return icon
    logger.warning("Marker icon unavailable, drawing circle markers")
    return None
