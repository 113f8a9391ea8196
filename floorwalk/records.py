"""Typed panorama and area records, validated once when the data sources are read.

This module contains:
- Panorama: one 360° image placed on a floor plan level
- Area: one named polygonal zone on a floor plan level
- ingestion helpers turning tabular rows into the working record sets
"""

# Floorwalk imports
from floorwalk import config
from floorwalk.geometry_utils import parse_polygon
from floorwalk.i18n import best_name

# Standard library imports
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

# Third-party imports
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Row field names
PANORAMA_REQUIRED_COLUMNS = ["file_path", "position_x", "position_y", "level"]
LINK_COLUMNS = [key for key, _ in config.DIRECTIONS]
NAME_PREFIX = "name_"


class DataSourceError(RuntimeError):
    """A tabular data source is unreachable or unreadable."""


class NoValidPanoramasError(DataSourceError):
    """The panorama data source holds no valid panorama."""


@dataclass(frozen=True)
class Panorama:
    """
    A panorama image placed on a floor plan.

    Attributes:
        file_path (str): Image path, unique identifier of the panorama.
        level (str): Floor level key.
        x, y (float): Position in floor plan pixel space.
        orientation (float): Baseline facing direction in degrees, None if absent.
        names (dict): Localized display names, {language: name}.
        links (dict): Directional links, {north|east|south|west: file_path}.
    """

    file_path: str
    level: str
    x: float
    y: float
    orientation: Optional[float] = None
    names: Dict[str, str] = field(default_factory=dict, compare=False)
    links: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def display_name(self, language: str = "en") -> str:
        return best_name(self.names, language)


@dataclass(frozen=True)
class Area:
    """
    A named polygonal zone on a floor plan.

    ``key`` is a synthetic identifier assigned at load time from the
    user-supplied ``area_id`` and the row position, so rows sharing an
    ``area_id`` stay individually addressable. ``points`` is None when the
    polygon text could not be decoded; such an area is neither drawn nor
    hit-tested.
    """

    key: str
    area_id: str
    level: str
    polygon_raw: str = ""
    points: Optional[np.ndarray] = field(default=None, compare=False)
    names: Dict[str, str] = field(default_factory=dict, compare=False)
    fill_color: Optional[str] = None
    border_color: Optional[str] = None
    description_path: Optional[str] = None

    @property
    def has_geometry(self) -> bool:
        return self.points is not None

    def display_name(self, language: str = "en") -> str:
        return best_name(self.names, language) or self.area_id


# -----------------------------------------------------------------------------
# Ingestion
# -----------------------------------------------------------------------------

def _text(row: Mapping[str, Any], key: str) -> str:
    """Return a row field as stripped text; missing or NaN fields become ''."""
    value = row.get(key)
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    return str(value).strip()


def _optional(row: Mapping[str, Any], key: str) -> Optional[str]:
    return _text(row, key) or None


def _names(row: Mapping[str, Any]) -> Dict[str, str]:
    names = {}
    for key in row:
        if isinstance(key, str) and key.startswith(NAME_PREFIX):
            value = _text(row, key)
            if value:
                names[key[len(NAME_PREFIX):]] = value
    return names


def panoramas_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[Panorama]:
    """
    Builds the valid panorama set from raw rows.

    A row is kept only if file_path, position_x, position_y and level are all
    non-blank and the position is numeric. Excluded rows are logged, never
    raised. Input order is preserved.
    """
    panoramas = []
    for row_no, row in enumerate(rows):
        missing = [col for col in PANORAMA_REQUIRED_COLUMNS if not _text(row, col)]
        if missing:
            logger.warning(f"Skipping panorama row {row_no}: missing {', '.join(missing)}")
            continue

        try:
            x = float(_text(row, "position_x"))
            y = float(_text(row, "position_y"))
        except ValueError:
            logger.warning(f"Skipping panorama row {row_no}: non-numeric position "
                           f"({_text(row, 'position_x')!r}, {_text(row, 'position_y')!r})")
            continue

        orientation = None
        if _text(row, "orientation"):
            try:
                orientation = float(_text(row, "orientation"))
            except ValueError:
                logger.warning(f"Panorama row {row_no}: ignoring non-numeric orientation "
                               f"{_text(row, 'orientation')!r}")

        links = {key: _text(row, key) for key in LINK_COLUMNS if _text(row, key)}

        panoramas.append(Panorama(
            file_path   = _text(row, "file_path"),
            level       = _text(row, "level"),
            x           = x,
            y           = y,
            orientation = orientation,
            names       = _names(row),
            links       = links,
        ))

    logger.info(f"Loaded {len(panoramas)} valid panorama(s)")
    return panoramas


def make_area_key(area_id: str, row_position: int) -> str:
    """Synthetic, load-order based key for an area row."""
    return f"{area_id or 'area'}#{row_position}"


def areas_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[Area]:
    """
    Builds the area set from raw rows, assigning each its synthetic key.

    Rows without a level are excluded and logged. A polygon that fails to
    decode is logged and kept as an area without geometry.
    """
    areas = []
    for row_no, row in enumerate(rows):
        level = _text(row, "level")
        if not level:
            logger.warning(f"Skipping area row {row_no}: missing level")
            continue

        area_id = _text(row, "area_id")
        polygon_raw = _text(row, "polygon")
        points = parse_polygon(polygon_raw)
        if points is None:
            logger.warning(f"Area row {row_no} ({area_id or 'unnamed'}): "
                           f"no usable geometry in {polygon_raw!r}")

        areas.append(Area(
            key              = make_area_key(area_id, row_no),
            area_id          = area_id,
            level            = level,
            polygon_raw      = polygon_raw,
            points           = points,
            names            = _names(row),
            fill_color       = _optional(row, "fill_color"),
            border_color     = _optional(row, "border_color"),
            description_path = _optional(row, "description"),
        ))

    logger.info(f"Loaded {len(areas)} area(s)")
    return areas


def read_rows(csv_path: Union[Path, str]) -> List[Dict[str, str]]:
    """
    Reads a CSV data source into row mappings with every value as text.

    Raises:
        DataSourceError: If the file is missing or cannot be parsed.
    """
    csv_path = Path(csv_path)
    logger.info(f"Loading rows from: {csv_path}")
    try:
        df = pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except FileNotFoundError as e:
        raise DataSourceError(f"Data source not found: {csv_path}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataSourceError(f"Could not parse {csv_path}: {e}") from e

    df.columns = [str(col).strip() for col in df.columns]
    return df.to_dict(orient="records")


def load_panoramas(csv_path: Union[Path, str] = config.PANORAMAS_CSV) -> List[Panorama]:
    """
    Reads and validates the panorama data source.

    Raises:
        DataSourceError: If the source is unreadable.
        NoValidPanoramasError: If no row passes validation.
    """
    panoramas = panoramas_from_rows(read_rows(csv_path))
    if not panoramas:
        raise NoValidPanoramasError(f"No valid panoramas found in {csv_path}")
    return panoramas


def load_areas(csv_path: Union[Path, str] = config.AREAS_CSV) -> List[Area]:
    """Reads the area data source; a missing file means a tour without areas."""
    if not Path(csv_path).exists():
        logger.info(f"No area data source at {csv_path}")
        return []
    return areas_from_rows(read_rows(csv_path))


def level_choices(panoramas: Iterable[Panorama]) -> List[str]:
    """Sorted unique levels of the given panoramas."""
    return sorted({p.level for p in panoramas})


def panorama_choices(panoramas: Iterable[Panorama], language: str = "en") -> List[Tuple[int, str]]:
    """(index, label) pairs for a location picker; label falls back to the file path."""
    return [(i, p.display_name(language) or p.file_path) for i, p in enumerate(panoramas)]
