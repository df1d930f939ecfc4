#Marks routing as a package.
#Re-exports the public APIs (GoogleMapsClient, PathProvider, intersects, ...)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .google_client import (
    DirectionsResult,
    GeocodeResult,
    GoogleMapsClient,
    GoogleMapsError,
    MissingCredentialError,
)
from .geofence import haversine_m, intersects, point_to_segment_m
from .path_provider import PathProvider, PathResult
from .polyline import decode_polyline

__all__ = [
    "DirectionsResult",
    "GeocodeResult",
    "GoogleMapsClient",
    "GoogleMapsError",
    "MissingCredentialError",
    "PathProvider",
    "PathResult",
    "decode_polyline",
    "haversine_m",
    "intersects",
    "point_to_segment_m",
]
