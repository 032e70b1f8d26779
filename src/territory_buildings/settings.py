"""Configuration for building detection.

Holds the external endpoints, retry schedules and the heuristic constants
that turn a territory's area into an expected number of buildings.
"""

import os
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

API_KEY_ENV_VARS = ("GOOGLE_MAPS_API_KEY", "EXPO_PUBLIC_GOOGLE_MAPS_API_KEY")

ApiKeyProvider = Callable[[], Optional[str]]


class DetectionSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    overpass_url: str = "https://overpass-api.de/api/interpreter"
    geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    user_agent: str = "territory-buildings/1.0"
    http_timeout_s: float = Field(default=30.0, gt=0)

    # Expected density: one building per 400 m², clamped to 3..50
    area_per_building_m2: float = Field(default=400.0, gt=0)
    min_buildings: int = Field(default=3, ge=0)
    max_buildings: int = Field(default=50, ge=0)

    overpass_attempts: int = Field(default=3, ge=1)
    overpass_initial_delay_ms: float = Field(default=800.0, ge=0)
    geocode_attempts: int = Field(default=2, ge=1)
    geocode_initial_delay_ms: float = Field(default=400.0, ge=0)

    sampling_attempts: int = Field(default=30, ge=1)

    @model_validator(mode="after")
    def check_building_bounds(self) -> "DetectionSettings":
        if self.min_buildings > self.max_buildings:
            raise ValueError(
                f"min_buildings ({self.min_buildings}) must not exceed "
                f"max_buildings ({self.max_buildings})"
            )
        return self


def env_api_key_provider() -> Optional[str]:
    """Return the first non-blank geocoding key found in the environment."""
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None
