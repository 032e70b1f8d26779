"""Detect candidate buildings inside a territory polygon."""

from .core.detect import detect_buildings_for_polygon
from .models import BuildingDetectionResult, DetectedBuilding, Point
from .settings import DetectionSettings

__all__ = [
    "BuildingDetectionResult",
    "DetectedBuilding",
    "DetectionSettings",
    "Point",
    "detect_buildings_for_polygon",
]
