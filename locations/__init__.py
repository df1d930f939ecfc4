"""
Locations package: resolving user input into coordinates.

Public API:
- LocationResolver, parse_coordinates
- GeoCache
- ResolutionError
"""
from .cache import GeoCache
from .errors import ResolutionError
from .resolver import LocationResolver, parse_coordinates

__all__ = [
    "GeoCache",
    "LocationResolver",
    "ResolutionError",
    "parse_coordinates",
]
