"""Simulated buildings to fill a territory when real data falls short."""

import time
from typing import Optional

import numpy as np

from territory_buildings.models import BoundingBox, DetectedBuilding
from .geometry import SAMPLING_ATTEMPTS, Polygon, random_point_in_polygon

NO_REAL_DATA_WARNING = (
    "Unable to fetch real building data. Generated simulated buildings to approximate the area."
)
LIMITED_REAL_DATA_WARNING = (
    "Limited real building data available. Added simulated buildings to approximate the area."
)


def simulated_data_warning(real_count: int) -> str:
    return NO_REAL_DATA_WARNING if real_count == 0 else LIMITED_REAL_DATA_WARNING


def synthesize_buildings(
    polygon: Polygon,
    bbox: BoundingBox,
    missing: int,
    *,
    rng: Optional[np.random.Generator] = None,
    now_ms: Optional[int] = None,
    sampling_attempts: int = SAMPLING_ATTEMPTS,
) -> list[DetectedBuilding]:
    """Generate up to ``missing`` simulated buildings inside the polygon.

    Stops at the first failed sample, so the deficit may be only partly filled.
    """
    if rng is None:
        rng = np.random.default_rng()
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    buildings = []
    for index in range(missing):
        point = random_point_in_polygon(polygon, bbox, rng=rng, attempts=sampling_attempts)
        if point is None:
            break
        buildings.append(DetectedBuilding(
            id=f"sim-{now_ms}-{index}",
            latitude=point.latitude,
            longitude=point.longitude,
            address=f"Simulated building near {point.latitude:.6f}, {point.longitude:.6f}",
            source="simulated",
        ))
    return buildings
