"""Reverse geocoding of building coordinates via the Google Geocoding API."""

import logging
import re
from typing import Optional

import httpx

from territory_buildings.models import ResolvedAddress
from territory_buildings.settings import DetectionSettings
from .retry import raise_for_retryable_status, with_retries

logger = logging.getLogger(__name__)

MISSING_KEY_WARNING = "Google Maps API key not configured. Using coordinates as addresses."

_LEADING_NUMBER = re.compile(r"^(\d+)")


def placeholder_address(latitude: float, longitude: float) -> str:
    return f"Building at {latitude:.6f}, {longitude:.6f}"


def leading_building_number(address: str) -> Optional[int]:
    """Return the house number an address starts with, if any."""
    match = _LEADING_NUMBER.match(address)
    return int(match.group(1)) if match else None


async def resolve_address(
    client: httpx.AsyncClient,
    latitude: float,
    longitude: float,
    api_key: Optional[str],
    settings: DetectionSettings,
) -> ResolvedAddress:
    """Look up a human-readable address for a coordinate.

    Never raises: a missing key yields a placeholder plus a warning, and any
    failure of the lookup itself yields the same placeholder without one.
    """
    fallback = placeholder_address(latitude, longitude)

    if not api_key or not api_key.strip():
        return ResolvedAddress(address=fallback, warning=MISSING_KEY_WARNING)

    async def reverse_geocode() -> httpx.Response:
        response = await client.get(
            settings.geocode_url,
            params={"latlng": f"{latitude},{longitude}", "key": api_key},
        )
        return raise_for_retryable_status(response)

    try:
        response = await with_retries(
            reverse_geocode,
            attempts=settings.geocode_attempts,
            initial_delay_ms=settings.geocode_initial_delay_ms,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as exc:
        logger.warning("Geocoding returned HTTP %s for %s", exc.response.status_code, fallback)
        return ResolvedAddress(address=fallback)
    except Exception as exc:
        logger.warning("Geocoding failed for %s: %s", fallback, exc)
        return ResolvedAddress(address=fallback)

    if not isinstance(data, dict):
        logger.warning("Geocoding returned a non-object body for %s", fallback)
        return ResolvedAddress(address=fallback)

    results = data.get("results")
    if data.get("status") != "OK" or not isinstance(results, list) or not results:
        logger.info("No address for %s (status=%s)", fallback, data.get("status"))
        return ResolvedAddress(address=fallback)

    first = results[0] if isinstance(results[0], dict) else {}
    formatted = first.get("formatted_address")
    address = formatted.strip() if isinstance(formatted, str) and formatted.strip() else fallback
    return ResolvedAddress(address=address, building_number=leading_building_number(address))
