"""Building candidates from OpenStreetMap via the Overpass API."""

import logging
import math
from typing import Any, Optional

import httpx

from territory_buildings.models import BoundingBox, BuildingCandidate, Point
from territory_buildings.settings import DetectionSettings
from .geometry import Polygon, point_in_polygon
from .retry import raise_for_retryable_status, with_retries

logger = logging.getLogger(__name__)


def build_overpass_query(bbox: BoundingBox) -> str:
    """Overpass QL for building-tagged ways, relations and nodes in a bbox."""
    box = bbox.as_overpass_bbox()
    return (
        "[out:json];"
        f'(way["building"]({box});'
        f'relation["building"]({box});'
        f'node["building"]({box}););'
        "out center;"
    )


def _is_coordinate(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _coordinate_pair(obj: Any) -> Optional[tuple[float, float]]:
    if not isinstance(obj, dict):
        return None
    lat, lon = obj.get("lat"), obj.get("lon")
    if _is_coordinate(lat) and _is_coordinate(lon):
        return float(lat), float(lon)
    return None


def element_center(element: Any) -> Optional[tuple[float, float]]:
    """Pick a representative (lat, lon) for an Overpass element.

    Nodes carry lat/lon directly, ``out center`` adds a center to ways and
    relations, and ``out geom`` responses fall back to the first vertex.
    """
    if not isinstance(element, dict):
        return None
    direct = _coordinate_pair(element)
    if direct is not None:
        return direct
    center = _coordinate_pair(element.get("center"))
    if center is not None:
        return center
    geometry = element.get("geometry")
    if isinstance(geometry, list) and geometry:
        return _coordinate_pair(geometry[0])
    return None


def parse_building_candidates(elements: list, polygon: Polygon) -> list[BuildingCandidate]:
    """Keep the elements whose center lies inside the polygon, in source order.

    Candidate ids are ``<type>-<id>`` since OSM numbers nodes, ways and
    relations independently. Elements without an id and repeats are dropped.
    """
    candidates = []
    seen = set()
    for element in elements:
        center = element_center(element)
        if center is None:
            continue
        element_id = element.get("id")
        if element_id is None or isinstance(element_id, bool):
            logger.debug("Skipping %s element without an id", element.get("type"))
            continue
        key = f"{element.get('type') or 'element'}-{element_id}"
        if key in seen:
            continue
        lat, lon = center
        try:
            point = Point(latitude=lat, longitude=lon)
        except ValueError:
            logger.debug("Skipping element %s with out-of-range center", key)
            continue
        if point_in_polygon(point, polygon):
            seen.add(key)
            candidates.append(BuildingCandidate(id=key, latitude=lat, longitude=lon))
    return candidates


async def fetch_building_candidates(
    client: httpx.AsyncClient,
    polygon: Polygon,
    bbox: BoundingBox,
    settings: DetectionSettings,
) -> list[BuildingCandidate]:
    """Query Overpass for buildings in ``bbox`` and filter them to ``polygon``.

    Transport errors, 429 and 5xx responses are retried; once the attempts
    are exhausted the last error propagates. Other non-2xx statuses raise
    on the first response.
    """
    query = build_overpass_query(bbox)
    logger.debug("Overpass query for %d-point polygon: %s", len(polygon), query)

    async def query_overpass() -> httpx.Response:
        response = await client.get(settings.overpass_url, params={"data": query})
        return raise_for_retryable_status(response)

    response = await with_retries(
        query_overpass,
        attempts=settings.overpass_attempts,
        initial_delay_ms=settings.overpass_initial_delay_ms,
    )
    response.raise_for_status()
    data = response.json()

    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        logger.warning("Overpass response has no elements list; treating as no buildings")
        return []

    candidates = parse_building_candidates(elements, polygon)
    logger.debug("Overpass returned %d elements, %d inside polygon", len(elements), len(candidates))
    return candidates
