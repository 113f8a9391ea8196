# Standard library imports
import math
import re
from typing import Optional, Sequence, Tuple

# Third-party imports
import numpy as np

Point = Tuple[float, float]

# Tagged form: POLYGON((x1 y1, x2 y2, ...)), whitespace tolerated before the brackets
POLYGON_PREFIX = "POLYGON"
POLYGON_PATTERN = re.compile(r"^POLYGON\s*\(\((.*)\)\)$", re.DOTALL)
MIN_POLYGON_POINTS = 3


def parse_polygon(raw: Optional[str]) -> Optional[np.ndarray]:
    """
    Decodes a polygon text encoding into an ordered array of 2D points.

    Two encodings are accepted:
        - tagged:  ``POLYGON((x1 y1, x2 y2, x3 y3))``
        - flat:    ``x1,y1,x2,y2,x3,y3``

    Points are returned in input order with no deduplication or winding
    correction.

    Args:
        raw (str): The polygon text as found in the area data source.

    Returns:
        np.ndarray or None: Array of shape (N, 2), N >= 3. Returns None
                            ("no geometry") for blank, malformed or
                            undersized input. Never raises.
    """
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None

    if text.startswith(POLYGON_PREFIX):
        points = _parse_tagged(text)
    else:
        points = _parse_flat(text)

    if points is None or len(points) < MIN_POLYGON_POINTS:
        return None
    return np.array(points, dtype=float)


def _parse_tagged(text: str) -> Optional[list]:
    """Parse the ``POLYGON((x y, ...))`` form; each pair is whitespace separated."""
    match = POLYGON_PATTERN.match(text)
    if not match:
        return None

    points = []
    for pair in match.group(1).split(","):
        parts = pair.split()
        if len(parts) != 2:
            return None
        try:
            points.append((float(parts[0]), float(parts[1])))
        except ValueError:
            return None
    return points


def _parse_flat(text: str) -> Optional[list]:
    """Parse the ``x1,y1,x2,y2,...`` form; needs an even count of at least 6 numbers."""
    tokens = [t.strip() for t in text.split(",")]
    if len(tokens) < 2 * MIN_POLYGON_POINTS or len(tokens) % 2 != 0:
        return None
    try:
        values = [float(t) for t in tokens]
    except ValueError:
        return None
    return list(zip(values[0::2], values[1::2]))


def point_in_polygon(point: Sequence[float], polygon: Optional[np.ndarray]) -> bool:
    """
    Ray-casting parity test for a point against a simple polygon.

    A horizontal ray is cast from the point towards +x. An edge counts as a
    crossing when the point's y lies in the half-open span of the edge's
    endpoint y values and the interpolated crossing x is greater than the
    point's x. Odd crossing count means inside. Winding order does not
    affect the result.

    Args:
        point: (x, y) query point.
        polygon: (N, 2) array of vertices, or None for "no geometry".

    Returns:
        bool: True if the point is inside.
    """
    if polygon is None or len(polygon) < MIN_POLYGON_POINTS:
        return False

    px, py = float(point[0]), float(point[1])
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = xi + (py - yi) * (xj - xi) / (yj - yi)
            if x_cross > px:
                inside = not inside
        j = i
    return inside


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two 2D points."""
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))
