"""
Zone resolution: which circular service areas contain a point.

The nearest containing zone decides the operator context (company or a
franchise) for every downstream eligibility check.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from ..domain.value_objects import Coordinates, Operator, operator_from_franchise_id
from ..models.zone import Zone
from ..repositories.zone_repository import ZoneRepository
from ..utils.geo import haversine_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedZone:
    zone_id: str
    name: str
    operator: Operator
    radius_km: float
    distance_km: float
    center: Coordinates


class ZoneResolver:
    def __init__(self, zone_repository: ZoneRepository):
        self.zone_repository = zone_repository

    def find_containing_zones(
        self, location: Coordinates, operator_filter: Optional[Operator] = None
    ) -> List[ResolvedZone]:
        """
        Active zones whose radius covers ``location``, nearest first.

        Containment is inclusive: a point exactly ``radius_km`` away matches.
        Equidistant zones keep the repository's id order.
        """
        if operator_filter is None:
            zones = self.zone_repository.find_active()
        else:
            zones = self.zone_repository.find_by_operator(operator_filter)

        matches = []
        for zone in zones:
            resolved = self._to_resolved(zone, location)
            if resolved.distance_km <= resolved.radius_km:
                matches.append(resolved)

        matches.sort(key=lambda z: z.distance_km)
        logger.debug(
            "Resolved %d containing zone(s) for (%.6f, %.6f)",
            len(matches),
            location.latitude,
            location.longitude,
        )
        return matches

    def resolve(self, location: Coordinates) -> Optional[ResolvedZone]:
        """Nearest containing zone, or None when the location is unserved."""
        matches = self.find_containing_zones(location)
        return matches[0] if matches else None

    @staticmethod
    def _to_resolved(zone: Zone, location: Coordinates) -> ResolvedZone:
        center = Coordinates(zone.center_lat, zone.center_lng)
        return ResolvedZone(
            zone_id=zone.id,
            name=zone.name,
            operator=operator_from_franchise_id(zone.operator_franchise_id),
            radius_km=float(zone.radius_km),
            distance_km=haversine_km(location, center),
            center=center,
        )
