"""Domain primitives that enforce validity at creation time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Coordinates:
    """A point on the globe in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class Company:
    """The central company operates the zone or employs the trainer."""

    kind = "COMPANY"

    @property
    def franchise_id(self) -> None:
        return None

    def __str__(self) -> str:
        return "COMPANY"


@dataclass(frozen=True)
class Franchise:
    """A specific regional franchise operates the zone or employs the trainer."""

    id: str

    kind = "FRANCHISE"

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Franchise id must be a non-empty string")

    @property
    def franchise_id(self) -> str:
        return self.id

    def __str__(self) -> str:
        return f"FRANCHISE({self.id})"


Operator = Union[Company, Franchise]

COMPANY = Company()


def operator_from_franchise_id(franchise_id: Optional[str]) -> Operator:
    """Map the nullable storage/wire representation onto an Operator."""
    if franchise_id is None or franchise_id == "":
        return COMPANY
    return Franchise(franchise_id)
