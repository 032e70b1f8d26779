"""Input parsing helpers for MCP tools."""

from pydantic import ValidationError

from ..models import Point


def parse_polygon(points: list[list[float]]) -> list[Point]:
    """Convert ``[[lat, lng], ...]`` pairs into Points.

    Raises ValueError with a descriptive message for malformed input.

    Usage in a tool:
        try:
            polygon = parse_polygon(points)
        except ValueError as e:
            return f"Error: {e}"
    """
    polygon = []
    for i, pair in enumerate(points):
        if len(pair) != 2:
            raise ValueError(f"Point {i} must be a [latitude, longitude] pair, got {pair!r}.")
        try:
            polygon.append(Point(latitude=pair[0], longitude=pair[1]))
        except ValidationError:
            raise ValueError(
                f"Point {i} is out of range: latitude must be within [-90, 90] "
                f"and longitude within [-180, 180], got {pair!r}."
            ) from None
    return polygon
