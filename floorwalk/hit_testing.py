"""Resolves a floor plan click into a panorama marker, an area, or empty space."""

# Floorwalk imports
from floorwalk import config
from floorwalk.geometry_utils import distance, point_in_polygon
from floorwalk.records import Area, Panorama

# Standard library imports
from dataclasses import dataclass
from typing import Optional, Sequence, Union


@dataclass(frozen=True)
class PanoramaHit:
    index: int


@dataclass(frozen=True)
class AreaHit:
    area: Area


@dataclass(frozen=True)
class EmptyHit:
    pass


EMPTY = EmptyHit()

HitResult = Union[PanoramaHit, AreaHit, EmptyHit]


def resolve_click(
    point: Sequence[float],
    level: Optional[str],
    panoramas: Sequence[Panorama],
    areas: Sequence[Area],
    radius: float = config.CLICK_RADIUS,
) -> HitResult:
    """
    Decide what a click at ``point`` (scene coordinates) on ``level`` hits.

    Panorama markers win over areas. Among markers within ``radius`` the first
    in stored order wins, not the nearest. Among areas the first in stored
    order whose polygon contains the point wins; areas without geometry are
    ignored.

    Args:
        point: (x, y) in the floor plan's native coordinate space.
        level: Active level key.
        panoramas: The full valid panorama list; PanoramaHit.index indexes it.
        areas: All areas.
        radius: Marker hit radius.

    Returns:
        PanoramaHit, AreaHit or EMPTY.
    """
    for index, panorama in enumerate(panoramas):
        if panorama.level != level:
            continue
        if distance(point, panorama.position) <= radius:
            return PanoramaHit(index)

    for area in areas:
        if area.level != level or not area.has_geometry:
            continue
        if point_in_polygon(point, area.points):
            return AreaHit(area)

    return EMPTY
