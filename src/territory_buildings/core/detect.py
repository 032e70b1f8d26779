"""Building detection for a user-drawn territory polygon.

Pipeline for one call: derive a target building count from the polygon's
area, fetch real building candidates from Overpass, resolve their addresses
one at a time until the target is met, then top up with simulated buildings.
The call always returns a result; degradation is reported via warnings.
"""

import logging
import math
from typing import Optional

import httpx
import numpy as np

from territory_buildings.models import (
    BoundingBox,
    BuildingDetectionResult,
    DetectedBuilding,
)
from territory_buildings.settings import (
    ApiKeyProvider,
    DetectionSettings,
    env_api_key_provider,
)
from .geocode import resolve_address
from .geometry import Polygon, bounding_box, polygon_area
from .osm import fetch_building_candidates
from .synthesize import simulated_data_warning, synthesize_buildings

logger = logging.getLogger(__name__)

FETCH_FAILED_WARNING = "Unable to fetch building data right now. The territory can still be saved."


def compute_target_count(area_m2: float, settings: Optional[DetectionSettings] = None) -> int:
    """Expected number of buildings for an area, clamped to the configured bounds."""
    settings = settings or DetectionSettings()
    # Half-up rounding, so 2.5 buildings counts as 3
    estimate = math.floor(area_m2 / settings.area_per_building_m2 + 0.5)
    return max(settings.min_buildings, min(settings.max_buildings, estimate))


async def _assemble_buildings(
    client: httpx.AsyncClient,
    polygon: Polygon,
    bbox: BoundingBox,
    target: int,
    api_key: Optional[str],
    settings: DetectionSettings,
    rng: Optional[np.random.Generator],
) -> BuildingDetectionResult:
    result = BuildingDetectionResult(target_count=target)

    candidates = await fetch_building_candidates(client, polygon, bbox, settings)
    logger.debug("Found %d building candidates inside polygon", len(candidates))

    # Sequential on purpose: keeps geocoding within third-party rate limits
    for candidate in candidates:
        if len(result.buildings) >= target:
            break
        resolved = await resolve_address(
            client, candidate.latitude, candidate.longitude, api_key, settings,
        )
        result.add_warning(resolved.warning)
        result.buildings.append(DetectedBuilding(
            id=f"osm-{candidate.id}",
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            address=resolved.address,
            building_number=resolved.building_number,
            source="real",
        ))

    real_count = len(result.buildings)
    if real_count < target:
        simulated = synthesize_buildings(
            polygon, bbox, target - real_count,
            rng=rng, sampling_attempts=settings.sampling_attempts,
        )
        if simulated:
            result.buildings.extend(simulated)
            result.add_warning(simulated_data_warning(len(candidates)))
        logger.debug("Added %d of %d simulated buildings", len(simulated), target - real_count)

    return result


async def detect_buildings_for_polygon(
    polygon: Polygon,
    *,
    client: Optional[httpx.AsyncClient] = None,
    api_key_provider: Optional[ApiKeyProvider] = None,
    settings: Optional[DetectionSettings] = None,
    rng: Optional[np.random.Generator] = None,
) -> BuildingDetectionResult:
    """Detect buildings inside a territory polygon.

    Args:
        polygon: Territory vertices; the ring is closed implicitly.
        client: HTTP client for Overpass and geocoding. A private client is
            opened and closed for the call when omitted.
        api_key_provider: Returns the geocoding key or None. Defaults to the
            environment lookup.
        settings: Endpoints, retry schedules and target-count heuristics.
        rng: Random generator for simulated buildings.

    Returns:
        BuildingDetectionResult. Never raises: a geodata outage yields an
        empty result with a single warning.
    """
    if len(polygon) < 3:
        return BuildingDetectionResult()

    settings = settings or DetectionSettings()
    target = 0
    try:
        target = compute_target_count(polygon_area(polygon), settings)
        bbox = bounding_box(polygon)
        api_key = (api_key_provider or env_api_key_provider)()

        if client is not None:
            result = await _assemble_buildings(client, polygon, bbox, target, api_key, settings, rng)
        else:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_s,
                headers={"User-Agent": settings.user_agent},
            ) as own_client:
                result = await _assemble_buildings(
                    own_client, polygon, bbox, target, api_key, settings, rng,
                )
    except Exception:
        logger.exception("Building detection failed; returning empty result")
        failed = BuildingDetectionResult(target_count=target)
        failed.add_warning(FETCH_FAILED_WARNING)
        return failed

    summary = result.summary()
    logger.info(
        "Detected %d buildings (%d real, %d simulated, target %d)",
        len(result.buildings), summary["real"], summary["simulated"], target,
    )
    return result
