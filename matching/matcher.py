"""
Purpose: The route matching "orchestrator".
What it does:

For every bus and each of its runs (MORNING, EVENING):

- orders the run's stops

- builds the route path (routing.path_provider)

- tests the path against the user's circle (routing.geofence)

- aggregates matched buses with the number of stops inside the circle

A run whose check fails (broken stop data or any other error) falls back to
checking its stops one by one; the other run keeps its result and the batch
never fails.

Rule: Matcher is the only file other modules should call directly for matching.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from buses.models import Bus, Circle, Coordinate, Period, Stop
from routing.geofence import haversine_m, intersects
from routing.path_provider import PathProvider, PathResult
from .policy import MatchingPolicy, default_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """
    A bus whose route passes through the user's circle.

    nearby_stop_count counts stops (not path points) inside the circle on the
    matched runs; it can be 0 when the road curves through the circle between
    two stops. stop_only=True means at least one run could not be checked
    against its path and was judged on its stops alone.
    """
    bus_id: str
    bus: Bus
    morning_matched: bool
    evening_matched: bool
    nearby_stop_count: int
    morning_path: Optional[PathResult] = None
    evening_path: Optional[PathResult] = None
    stop_only: bool = False

    @property
    def degraded(self) -> bool:
        paths = [p for p in (self.morning_path, self.evening_path) if p is not None]
        return self.stop_only or any(p.degraded for p in paths)


@dataclass(frozen=True)
class _RunCheck:
    matched: bool
    stop_count: int
    path: Optional[PathResult]
    stop_only: bool = False


def count_stops_within(circle: Circle, stops: Sequence[Stop]) -> int:
    return sum(1 for stop in stops if haversine_m(stop.coordinate, circle.center) <= circle.radius_m)


class RouteMatcher:
    def __init__(self, path_provider: PathProvider, policy: Optional[MatchingPolicy] = None):
        self.path_provider = path_provider
        self.policy = policy or default_policy()
        self.policy.validate()

    def find_matches(
        self,
        user_location: Coordinate,
        radius_km: float,
        buses: Sequence[Bus],
    ) -> List[MatchResult]:
        """
        Main matching entry point.

        Parameters
        ----------
        user_location:
            Center of the circle.
        radius_km:
            Circle radius in kilometers.
        buses:
            Buses with their stops, as read from the store.

        Returns
        -------
        List[MatchResult] for the buses that pass through the circle, in the
        order the buses were given.
        """
        circle = Circle(center=user_location, radius_m=radius_km * 1000)

        if not buses:
            return []

        workers = min(self.policy.max_workers, len(buses))
        if workers <= 1:
            results = [self._check_bus(bus, circle) for bus in buses]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="route-matcher") as executor:
                results = list(executor.map(lambda bus: self._check_bus(bus, circle), buses))

        matches = [r for r in results if r is not None]
        logger.info(
            f"{len(matches)} of {len(buses)} buses pass within {radius_km}km of "
            f"{user_location.lat},{user_location.lng}"
        )
        return matches

    # -------------------------
    # Internal helpers
    # -------------------------

    def _check_bus(self, bus: Bus, circle: Circle) -> Optional[MatchResult]:
        morning = self._check_period(bus, Period.MORNING, circle)
        evening = self._check_period(bus, Period.EVENING, circle)

        if not (morning.matched or evening.matched):
            return None

        return MatchResult(
            bus_id=bus.id,
            bus=bus,
            morning_matched=morning.matched,
            evening_matched=evening.matched,
            nearby_stop_count=morning.stop_count + evening.stop_count,
            morning_path=morning.path,
            evening_path=evening.path,
            stop_only=morning.stop_only or evening.stop_only,
        )

    def _check_period(self, bus: Bus, period: Period, circle: Circle) -> _RunCheck:
        # one broken run must not cost the other run its result, nor fail the batch
        try:
            return self._check_run(bus.stops_for(period), circle)
        except Exception as e:
            logger.warning(
                f"Error checking {period.value.lower()} route for bus {bus.id}, "
                f"falling back to stop distances: {e}"
            )
            return self._stop_only_run(bus, period, circle)

    def _check_run(self, stops: List[Stop], circle: Circle) -> _RunCheck:
        if not stops:
            return _RunCheck(matched=False, stop_count=0, path=None)

        path = self.path_provider.build_path(stops)
        if not intersects(circle, path.points):
            return _RunCheck(matched=False, stop_count=0, path=path)

        return _RunCheck(matched=True, stop_count=count_stops_within(circle, stops), path=path)

    def _stop_only_run(self, bus: Bus, period: Period, circle: Circle) -> _RunCheck:
        # only stops that can actually be measured take part
        measurable = [
            stop for stop in bus.stops
            if stop.period == period
            and stop.coordinate is not None
            and isinstance(stop.coordinate.lat, (int, float))
            and isinstance(stop.coordinate.lng, (int, float))
            and math.isfinite(stop.coordinate.lat)
            and math.isfinite(stop.coordinate.lng)
        ]
        count = count_stops_within(circle, measurable)
        return _RunCheck(matched=count > 0, stop_count=count, path=None, stop_only=True)
