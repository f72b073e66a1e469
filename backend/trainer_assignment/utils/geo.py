"""Great-circle distance shared by zone resolution, eligibility and selection."""

from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_KM
from ..domain.value_objects import Coordinates


def haversine_km(point1: Coordinates, point2: Coordinates) -> float:
    """Return the distance between two coordinates in kilometres."""
    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    delta_lat = math.radians(point2.latitude - point1.latitude)
    delta_lng = math.radians(point2.longitude - point1.longitude)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lng / 2) ** 2
    )
    # Rounding can push a a hair past 1.0 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_within_radius(point1: Coordinates, point2: Coordinates, radius_km: float) -> bool:
    """Boundary-inclusive containment check."""
    return haversine_km(point1, point2) <= radius_km
