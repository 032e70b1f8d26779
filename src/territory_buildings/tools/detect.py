"""Detection tools: detect_buildings, estimate_territory."""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..core.detect import compute_target_count, detect_buildings_for_polygon
from ..core.geometry import bounding_box, polygon_area
from ..settings import DetectionSettings
from ._polygon import parse_polygon

logger = logging.getLogger(__name__)


def register_detect_tools(mcp: FastMCP, settings: Optional[DetectionSettings] = None):
    settings = settings or DetectionSettings()

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def estimate_territory(points: list[list[float]]) -> str:
        """Report a territory's area, bounding box and expected building count.

        Makes no network requests. Use it to sanity-check a polygon before
        calling detect_buildings.

        Args:
            points: Territory vertices as [latitude, longitude] pairs (at least 3).
        """
        try:
            polygon = parse_polygon(points)
        except ValueError as e:
            return f"Error: {e}"
        if len(polygon) < 3:
            return "Error: A territory needs at least 3 points."

        area = polygon_area(polygon)
        bbox = bounding_box(polygon)
        return json.dumps({
            "area_m2": round(area, 1),
            "bounding_box": bbox.model_dump(),
            "target_count": compute_target_count(area, settings),
        }, indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def detect_buildings(points: list[list[float]]) -> str:
        """Find buildings inside a territory polygon.

        Queries OpenStreetMap for buildings, reverse-geocodes their addresses
        (needs GOOGLE_MAPS_API_KEY, otherwise coordinates are used), and adds
        simulated buildings when real data is sparse. Always returns a result;
        check the warnings list for degraded data.

        Args:
            points: Territory vertices as [latitude, longitude] pairs. Fewer
                than 3 points returns an empty result.
        """
        try:
            polygon = parse_polygon(points)
        except ValueError as e:
            return f"Error: {e}"

        result = await detect_buildings_for_polygon(polygon, settings=settings)
        if not result.buildings:
            logger.debug("detect_buildings returned no buildings for %d points", len(polygon))

        payload = result.model_dump(mode="json")
        payload["summary"] = result.summary()
        return json.dumps(payload, indent=2)
