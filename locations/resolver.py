"""
Purpose: Turn a user supplied location into a Coordinate.
What it does:
- "lat,lng" text (spaces allowed around the comma, optional minus sign and
  decimals) is parsed directly, without range checks
- anything else is a place name and goes to the geocoder through GeoCache
"""

from __future__ import annotations

import re
from typing import Optional, Union

from buses.models import Coordinate
from .cache import GeoCache
from .errors import ResolutionError

COORDINATE_PATTERN = re.compile(r"^\s*(-?\d+\.?\d*)\s*,\s*(-?\d+\.?\d*)\s*$")


def parse_coordinates(token: str) -> Optional[Coordinate]:
    """Return the Coordinate for a "lat,lng" token, None if it isn't one."""
    match = COORDINATE_PATTERN.match(token)
    if not match:
        return None
    return Coordinate(float(match.group(1)), float(match.group(2)))


class LocationResolver:
    def __init__(self, cache: Optional[GeoCache] = None):
        self.cache = cache

    def resolve(self, token: Union[str, Coordinate]) -> Coordinate:
        if isinstance(token, Coordinate):
            return token
        if not isinstance(token, str) or not token.strip():
            raise ResolutionError("not_geocodable", token, "Invalid location format")

        parsed = parse_coordinates(token)
        if parsed is not None:
            return parsed

        if self.cache is None:
            raise ResolutionError("not_geocodable", token, "No geocoding provider configured")
        return self.cache.geocode(token)
