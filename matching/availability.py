"""
Purpose: The availability check as the service layer sees it (the "one call" entry point).
What it does:
Resolves the user's location, runs the matcher over every bus in the store
and builds the report the API layer turns into a response. Every check is
also handed to an optional log sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Union

from buses.models import Coordinate
from buses.store import InMemoryBusStore
from locations.cache import GeoCache
from locations.errors import ResolutionError
from locations.resolver import LocationResolver, parse_coordinates
from routing.google_client import GoogleMapsClient
from routing.path_provider import PathProvider
from .matcher import MatchResult, RouteMatcher
from .policy import MatchingPolicy, default_policy, policy_from_env

logger = logging.getLogger(__name__)


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass(frozen=True)
class AvailabilityLogEntry:
    location: str
    lat: float
    lng: float
    status: AvailabilityStatus


AvailabilityLogSink = Callable[[AvailabilityLogEntry], None]


@dataclass(frozen=True)
class AvailabilityReport:
    available: bool
    message: str
    location: Coordinate
    radius_km: float
    buses: List[MatchResult] = field(default_factory=list)
    place_name: Optional[str] = None


def format_radius(radius_km: float) -> str:
    return f"{radius_km:g}km"


class AvailabilityService:
    """
    Glue between resolution and matching.

    Only ResolutionError escapes check_availability; provider trouble is
    absorbed below and a failing log sink is logged and ignored.
    """
    def __init__(
        self,
        resolver: LocationResolver,
        matcher: RouteMatcher,
        store: InMemoryBusStore,
        policy: Optional[MatchingPolicy] = None,
        log_sink: Optional[AvailabilityLogSink] = None,
    ):
        self.resolver = resolver
        self.matcher = matcher
        self.store = store
        self.policy = policy or default_policy()
        self.log_sink = log_sink

    def check_availability(
        self,
        location: Union[str, Coordinate],
        radius_km: Optional[float] = None,
    ) -> AvailabilityReport:
        radius_km = self.policy.radius_km if radius_km is None else radius_km
        if radius_km < 0:
            raise ValueError("radius_km must be >= 0")

        user_location = self.resolver.resolve(location)
        if not user_location.in_range():
            raise ResolutionError(
                "out_of_range",
                location,
                f"Coordinates {user_location.as_param()} are outside valid latitude/longitude bounds",
            )

        place_name = None
        if self.policy.describe_coordinates and self.resolver.cache is not None:
            # only raw "lat,lng" input lacks a human readable name
            if isinstance(location, Coordinate) or parse_coordinates(location) is not None:
                place_name = self.resolver.cache.reverse_geocode(user_location)

        matches = self.matcher.find_matches(user_location, radius_km, self.store.list_buses())
        radius_text = format_radius(radius_km)

        if matches:
            message = f"Found {len(matches)} bus(es) within {radius_text} radius"
        else:
            message = (
                f"At your location, within {radius_text} radius, the college bus is not available. "
                "Your search will be notified to admin."
            )

        self._record(location, user_location, bool(matches))

        return AvailabilityReport(
            available=bool(matches),
            message=message,
            location=user_location,
            radius_km=radius_km,
            buses=matches,
            place_name=place_name,
        )

    def _record(self, location: Union[str, Coordinate], user_location: Coordinate, available: bool) -> None:
        if self.log_sink is None:
            return

        entry = AvailabilityLogEntry(
            location=location if isinstance(location, str) else user_location.as_param(),
            lat=user_location.lat,
            lng=user_location.lng,
            status=AvailabilityStatus.AVAILABLE if available else AvailabilityStatus.UNAVAILABLE,
        )
        try:
            self.log_sink(entry)
        except Exception as e:
            # the check already succeeded, a broken log must not undo it
            logger.error(f"Failed to log availability check: {e}")


def service_from_env(
    store: InMemoryBusStore,
    policy: Optional[MatchingPolicy] = None,
    log_sink: Optional[AvailabilityLogSink] = None,
) -> AvailabilityService:
    """
    Wire the full stack from environment settings (GOOGLE_MAPS_API_KEY etc.).
    Without an API key everything still works: place names fail to resolve
    and paths fall back to straight lines.
    """
    policy = policy or policy_from_env()
    client = GoogleMapsClient(timeout=policy.provider_timeout_s)
    if not client.has_credential:
        logger.warning("GOOGLE_MAPS_API_KEY not set: geocoding disabled, using straight-line paths")

    resolver = LocationResolver(GeoCache(client, timeout=policy.provider_timeout_s))
    matcher = RouteMatcher(PathProvider(client, timeout=policy.provider_timeout_s), policy)
    return AvailabilityService(resolver, matcher, store, policy=policy, log_sink=log_sink)
