"""
Purpose: Core data models for the buses domain.
What it does:
Defines the structure of a Bus, its ordered Stops per Period and the
geometric value types (Coordinate, Circle) the matching engine consumes.

Rule: No HTTP calls, no matching logic. Models only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class MalformedStopData(Exception):
    """Raised when a bus's stop records are incomplete or cannot be measured."""
    pass


@dataclass(frozen=True)
class Coordinate:
    """
    A (lat, lng) pair in decimal degrees.
    Parsing does not range check; use in_range() where bounds matter.
    """
    lat: float
    lng: float

    def in_range(self) -> bool:
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0

    def as_param(self) -> str:
        """Format as 'lat,lng' for provider query strings."""
        return f"{self.lat},{self.lng}"


class Period(str, Enum):
    """
    The two directional runs a bus makes every day.
    """
    MORNING = "MORNING"
    EVENING = "EVENING"


@dataclass(frozen=True)
class Stop:
    """
    A named waypoint on one run of a bus. `order` starts at 1.
    """
    name: str
    coordinate: Optional[Coordinate]
    period: Period
    order: Optional[int]

    @classmethod
    def new(
        cls,
        name: str,
        lat: float,
        lng: float,
        period: str | Period,
        order: int,
    ) -> Stop:
        if isinstance(period, str):
            period = Period(period.upper())

        return cls(
            name=name,
            coordinate=Coordinate(float(lat), float(lng)),
            period=period,
            order=int(order),
        )


@dataclass(frozen=True)
class Circle:
    """
    The geofence around a user's location.
    """
    center: Coordinate
    radius_m: float

    def __post_init__(self) -> None:
        if self.radius_m < 0:
            raise ValueError("radius_m must be >= 0")


@dataclass(frozen=True)
class RouteSummary:
    """Display summary of one run: first stop, last stop and the stops in between."""
    period: Period
    from_name: str
    to_name: str
    description: str
    stop_names: Tuple[str, ...]


@dataclass(frozen=True)
class Bus:
    """
    A bus and every stop it serves, both periods mixed.
    The descriptive fields are carried through untouched by the matcher.
    """
    id: str
    name: str
    location: str = ""
    stops: Tuple[Stop, ...] = field(default_factory=tuple)

    capacity: int = 0
    current_occupancy: int = 0
    driver_name: str = ""
    driver_phone: str = ""
    live_location_url: str = ""

    def stops_for(self, period: Period) -> List[Stop]:
        """
        Stops of one period sorted by `order`.

        Raises MalformedStopData if a stop has no coordinate, a non-finite
        coordinate or no order, since such a run cannot be drawn.
        """
        selected = [stop for stop in self.stops if stop.period == period]
        for stop in selected:
            if stop.order is None:
                raise MalformedStopData(f"Bus {self.id}: stop '{stop.name}' has no order")
            if stop.coordinate is None:
                raise MalformedStopData(f"Bus {self.id}: stop '{stop.name}' has no coordinate")
            if not (math.isfinite(stop.coordinate.lat) and math.isfinite(stop.coordinate.lng)):
                raise MalformedStopData(f"Bus {self.id}: stop '{stop.name}' has a non-finite coordinate")
        return sorted(selected, key=lambda stop: stop.order)

    def route_summary(self, period: Period) -> RouteSummary:
        ordered = self.stops_for(period)
        from_name = ordered[0].name if ordered else "Start"
        to_name = ordered[-1].name if ordered else "End"
        return RouteSummary(
            period=period,
            from_name=from_name,
            to_name=to_name,
            description=f"Route from {from_name} to {to_name}",
            stop_names=tuple(stop.name for stop in ordered),
        )
