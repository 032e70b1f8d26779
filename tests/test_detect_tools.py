"""Tests for the detect_buildings and estimate_territory MCP tools."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from territory_buildings.models import BuildingDetectionResult, DetectedBuilding

from conftest import square_polygon


def _register_and_get(tool_name: str):
    """Register detection tools against a mock MCP and extract the named tool."""
    from territory_buildings.tools.detect import register_detect_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_detect_tools(mock_mcp)
    return tools[tool_name]


def _pairs(polygon):
    return [[p.latitude, p.longitude] for p in polygon]


def test_estimate_territory_reports_area_and_target():
    estimate_territory = _register_and_get("estimate_territory")
    result = json.loads(estimate_territory(points=_pairs(square_polygon(100.0))))
    assert result["area_m2"] == pytest.approx(10_000.0, abs=1.0)
    assert result["target_count"] == 25
    assert set(result["bounding_box"]) == {"min_lat", "max_lat", "min_lng", "max_lng"}


def test_estimate_territory_needs_three_points():
    estimate_territory = _register_and_get("estimate_territory")
    result = estimate_territory(points=[[1.0, 1.0], [2.0, 2.0]])
    assert result.startswith("Error:")


def test_estimate_territory_rejects_out_of_range_point():
    estimate_territory = _register_and_get("estimate_territory")
    result = estimate_territory(points=[[0.0, 0.0], [95.0, 0.0], [0.0, 1.0]])
    assert "Error" in result and "Point 1" in result


def test_estimate_territory_rejects_malformed_pair():
    estimate_territory = _register_and_get("estimate_territory")
    result = estimate_territory(points=[[0.0, 0.0], [1.0], [0.0, 1.0]])
    assert "Error" in result and "pair" in result


@pytest.mark.anyio
async def test_detect_buildings_returns_json_with_summary():
    detect_buildings = _register_and_get("detect_buildings")
    canned = BuildingDetectionResult(
        buildings=[DetectedBuilding(
            id="osm-1", latitude=59.3, longitude=18.0,
            address="5 Main Street", building_number=5, source="real",
        )],
        warnings=["Limited real building data available."],
        target_count=3,
    )

    with patch(
        "territory_buildings.tools.detect.detect_buildings_for_polygon",
        new_callable=AsyncMock,
    ) as mock_detect:
        mock_detect.return_value = canned
        result = await detect_buildings(points=_pairs(square_polygon(30.0)))

    payload = json.loads(result)
    assert payload["buildings"][0]["id"] == "osm-1"
    assert payload["buildings"][0]["source"] == "real"
    assert payload["warnings"] == ["Limited real building data available."]
    assert payload["summary"] == {"real": 1, "simulated": 0, "target": 3}
    polygon_arg = mock_detect.call_args.args[0]
    assert len(polygon_arg) == 4


@pytest.mark.anyio
async def test_detect_buildings_reports_invalid_input_without_detecting():
    detect_buildings = _register_and_get("detect_buildings")
    with patch(
        "territory_buildings.tools.detect.detect_buildings_for_polygon",
        new_callable=AsyncMock,
    ) as mock_detect:
        result = await detect_buildings(points=[[0.0, 200.0], [0.0, 0.0], [1.0, 0.0]])
    assert result.startswith("Error:")
    mock_detect.assert_not_awaited()
