"""Polygon geometry on latitude/longitude coordinates.

Area uses a local equirectangular projection centred on the polygon's mean
latitude, which is accurate for territory-sized regions but not globally.
Containment treats longitude/latitude as planar x/y.
"""

import math
import sys
from typing import Optional, Sequence

import numpy as np

from territory_buildings.models import BoundingBox, Point

EARTH_RADIUS_M = 6_378_137.0
SAMPLING_ATTEMPTS = 30

Polygon = Sequence[Point]


def _as_arrays(polygon: Polygon) -> tuple[np.ndarray, np.ndarray]:
    lats = np.array([p.latitude for p in polygon], dtype=np.float64)
    lons = np.array([p.longitude for p in polygon], dtype=np.float64)
    return lats, lons


def project_to_plane(
    lats: np.ndarray, lons: np.ndarray, reference_lat: float
) -> tuple[np.ndarray, np.ndarray]:
    """Convert lat/lon arrays to planar x, y in meters."""
    x = np.radians(lons) * EARTH_RADIUS_M * math.cos(math.radians(reference_lat))
    y = np.radians(lats) * EARTH_RADIUS_M
    return x, y


def polygon_area(polygon: Polygon) -> float:
    """Return the polygon's area in square meters (0 for fewer than 3 points)."""
    if len(polygon) < 3:
        return 0.0
    lats, lons = _as_arrays(polygon)
    x, y = project_to_plane(lats, lons, float(lats.mean()))
    # Shoelace over the implicitly closed ring
    cross = x * np.roll(y, -1) - np.roll(x, -1) * y
    return float(abs(cross.sum()) / 2.0)


def point_in_polygon(point: Point, polygon: Polygon) -> bool:
    """Ray-casting containment test. Degenerate polygons contain nothing."""
    if len(polygon) < 3:
        return False
    yi, xi = _as_arrays(polygon)
    yj = np.roll(yi, 1)
    xj = np.roll(xi, 1)

    crosses = (yi > point.latitude) != (yj > point.latitude)
    # Epsilon keeps horizontal edges from dividing by zero
    x_at_lat = (xj - xi) * (point.latitude - yi) / (yj - yi + sys.float_info.epsilon) + xi
    hits = crosses & (point.longitude < x_at_lat)
    return bool(np.count_nonzero(hits) % 2)


def bounding_box(polygon: Polygon) -> BoundingBox:
    if len(polygon) == 0:
        raise ValueError("Cannot compute the bounding box of an empty polygon")
    lats, lons = _as_arrays(polygon)
    return BoundingBox(
        min_lat=float(lats.min()),
        max_lat=float(lats.max()),
        min_lng=float(lons.min()),
        max_lng=float(lons.max()),
    )


def random_point_in_polygon(
    polygon: Polygon,
    bbox: BoundingBox,
    rng: Optional[np.random.Generator] = None,
    attempts: int = SAMPLING_ATTEMPTS,
) -> Optional[Point]:
    """Draw a uniform point inside the polygon by rejection sampling.

    Samples the bounding box up to ``attempts`` times and returns None when
    no draw lands inside, so callers must handle a missing point.
    """
    if rng is None:
        rng = np.random.default_rng()
    for _ in range(attempts):
        candidate = Point(
            latitude=float(rng.uniform(bbox.min_lat, bbox.max_lat)),
            longitude=float(rng.uniform(bbox.min_lng, bbox.max_lng)),
        )
        if point_in_polygon(candidate, polygon):
            return candidate
    return None
