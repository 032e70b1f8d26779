"""Pydantic domain models for territories and detected buildings."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class BoundingBox(BaseModel):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @model_validator(mode="after")
    def check_ordering(self) -> "BoundingBox":
        if self.min_lat > self.max_lat:
            raise ValueError(f"min_lat ({self.min_lat}) must not exceed max_lat ({self.max_lat})")
        if self.min_lng > self.max_lng:
            raise ValueError(f"min_lng ({self.min_lng}) must not exceed max_lng ({self.max_lng})")
        return self

    def contains(self, point: Point) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lng <= point.longitude <= self.max_lng
        )

    def as_overpass_bbox(self) -> str:
        """Overpass bbox filter order: south, west, north, east."""
        return f"{self.min_lat},{self.min_lng},{self.max_lat},{self.max_lng}"


class BuildingCandidate(BaseModel):
    """A building location from the geodata service, before address lookup."""
    model_config = ConfigDict(frozen=True)

    id: str
    latitude: float
    longitude: float


class ResolvedAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    building_number: Optional[int] = None
    warning: Optional[str] = None


class DetectedBuilding(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    latitude: float
    longitude: float
    address: str
    building_number: Optional[int] = None
    source: Literal["real", "simulated"]


class BuildingDetectionResult(BaseModel):
    """Return type for detect_buildings_for_polygon."""
    buildings: list[DetectedBuilding] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    target_count: int = Field(default=0, ge=0)

    def add_warning(self, warning: Optional[str]) -> None:
        """Append a warning unless it is empty or already present."""
        if warning and warning not in self.warnings:
            self.warnings.append(warning)

    def summary(self) -> dict:
        real = sum(1 for b in self.buildings if b.source == "real")
        return {
            "real": real,
            "simulated": len(self.buildings) - real,
            "target": self.target_count,
        }
