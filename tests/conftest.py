"""Shared fixtures: territory polygons and fake Overpass/geocoding backends."""

import math

import httpx
import pytest

from territory_buildings.core.geometry import EARTH_RADIUS_M
from territory_buildings.models import Point
from territory_buildings.settings import DetectionSettings


def square_polygon(side_m: float, lat: float = 59.3, lng: float = 18.0) -> list[Point]:
    """Square whose side is ``side_m`` in the local planar projection."""
    dlat = math.degrees(side_m / EARTH_RADIUS_M)
    ref_lat = lat + dlat / 2
    dlng = math.degrees(side_m / (EARTH_RADIUS_M * math.cos(math.radians(ref_lat))))
    return [
        Point(latitude=lat, longitude=lng),
        Point(latitude=lat, longitude=lng + dlng),
        Point(latitude=lat + dlat, longitude=lng + dlng),
        Point(latitude=lat + dlat, longitude=lng),
    ]


def overpass_node(node_id: int, lat: float, lon: float) -> dict:
    return {"type": "node", "id": node_id, "lat": lat, "lon": lon, "tags": {"building": "yes"}}


class FakeBackend:
    """Routes requests to canned Overpass and geocoding responses."""

    def __init__(self, elements=None, overpass_status=200, overpass_error=None,
                 geocode=None, geocode_status=200):
        self.elements = elements or []
        self.overpass_status = overpass_status
        self.overpass_error = overpass_error
        self.geocode = geocode
        self.geocode_status = geocode_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "overpass-api.de":
            if self.overpass_error is not None:
                raise self.overpass_error("overpass unreachable", request=request)
            return httpx.Response(self.overpass_status, json={"elements": self.elements})
        if self.geocode is None:
            return httpx.Response(self.geocode_status, json={"status": "ZERO_RESULTS", "results": []})
        return httpx.Response(self.geocode_status, json=self.geocode(request))

    def count(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def numbered_geocoder(request: httpx.Request) -> dict:
    """Geocode response whose street number is derived from the latitude."""
    lat = float(request.url.params["latlng"].split(",")[0])
    number = int(round(lat * 1e6)) % 1000 + 1
    return {"status": "OK", "results": [{"formatted_address": f"{number} Main Street, Springfield"}]}


@pytest.fixture
def fast_settings() -> DetectionSettings:
    """Default settings with no backoff delay between retries."""
    return DetectionSettings(overpass_initial_delay_ms=0, geocode_initial_delay_ms=0)


@pytest.fixture
def triangle() -> list[Point]:
    return [
        Point(latitude=0.0, longitude=0.0),
        Point(latitude=0.0, longitude=1.0),
        Point(latitude=1.0, longitude=0.0),
    ]


@pytest.fixture
def anyio_backend() -> str:
    """The package is built on asyncio; don't run async tests on other backends."""
    return "asyncio"
