from math import atan2, cos, radians, sin, sqrt
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from attendance_engine.core.logger import logger

EARTH_RADIUS_METERS = 6371000


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class GeofenceResult(BaseModel):
    within_radius: bool
    distance: Optional[float] = None
    allowed_radius: Optional[float] = None

    @property
    def evaluated(self) -> bool:
        return self.distance is not None


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two points (haversine)."""
    lat1, lat2 = radians(a.latitude), radians(b.latitude)
    d_lat = radians(b.latitude - a.latitude)
    d_lng = radians(b.longitude - a.longitude)

    h = sin(d_lat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(d_lng / 2) ** 2
    # Rounding can push antipodal pairs just past 1
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_METERS * atan2(sqrt(h), sqrt(1 - h))


class GeofenceEvaluator:
    def __init__(self, default_radius_meters: float = 100):
        self.default_radius_meters = default_radius_meters

    def evaluate(self, location, coordinate: Optional[Coordinate]) -> GeofenceResult:
        """Decide whether ``coordinate`` lies within the location's radius.

        Skipped (within radius, no distance) when the location has the
        geofence disabled, when either side has no coordinates, or when the
        stored centre is not a valid coordinate.
        """
        if not location.geofence_enabled or coordinate is None:
            return GeofenceResult(within_radius=True)
        if location.latitude is None or location.longitude is None:
            return GeofenceResult(within_radius=True)

        try:
            center = Coordinate(
                latitude=location.latitude, longitude=location.longitude
            )
        except ValidationError:
            logger.error(
                'Location %s has invalid coordinates (%s, %s), skipping geofence',
                location.id,
                location.latitude,
                location.longitude,
            )
            return GeofenceResult(within_radius=True)

        distance = distance_meters(coordinate, center)
        allowed_radius = location.allowed_radius_meters
        if allowed_radius is None:
            allowed_radius = self.default_radius_meters
        return GeofenceResult(
            within_radius=distance <= allowed_radius,
            distance=distance,
            allowed_radius=allowed_radius,
        )
