#Purpose: The Google Maps "adapter/client".
#Sole responsibility: talk to the Geocoding and Directions APIs via HTTP and return normalized outputs.
#Encapsulates Google-specific details:
#coordinate formatting ("lat,lng", waypoints joined with "|")
#URL construction (/geocode/json, /directions/json)
#timeouts and status handling
#parsing response JSON into our internal shape
#It should not contain matching rules or fallbacks.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests
from dotenv import load_dotenv

from buses.models import Coordinate

# Read provider settings from environment
# Example in .env:
# GOOGLE_MAPS_API_KEY=...
# GEOCODE_COUNTRY=IN
# GEOCODE_REGION=in
load_dotenv()
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
GEOCODE_COUNTRY = os.getenv("GEOCODE_COUNTRY", "")
GEOCODE_REGION = os.getenv("GEOCODE_REGION", "")

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"


class GoogleMapsError(Exception):
    """Provider answered with a non-OK status or an unusable payload."""

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class MissingCredentialError(GoogleMapsError):
    """No API key configured, so the provider cannot be called at all."""
    pass


@dataclass(frozen=True)
class GeocodeResult:
    coordinate: Coordinate
    formatted_address: str


@dataclass(frozen=True)
class DirectionsResult:
    status: str
    encoded_polyline: str


class GoogleMapsClient:
    """
    Google Maps Adapter / Client

    Sole responsibility:
    - Talk to Google via HTTP
    - Convert internal Coordinate -> "lat,lng"
    - Return normalized outputs

    """
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 5,
        country: Optional[str] = None,
        region: Optional[str] = None,
    ):
        self.api_key = GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.timeout = timeout #seconds to wait for Google before giving up
        self.country = GEOCODE_COUNTRY if country is None else country
        self.region = GEOCODE_REGION if region is None else region

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    #----------------
    # Internal helpers
    #----------------
    def _require_credential(self) -> None:
        if not self.api_key:
            raise MissingCredentialError("Google Maps API key not configured")

    def _get(self, url: str, params: Dict[str, Any], timeout: Optional[float]) -> Dict[str, Any]:
        params = dict(params, key=self.api_key)
        response = requests.get(
            url,
            params=params,
            timeout=self.timeout if timeout is None else timeout,
        )
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise GoogleMapsError(f"Invalid JSON from Google Maps: {e}") from e

        if not isinstance(data, dict):
            raise GoogleMapsError(f"Unexpected Google Maps payload: {type(data).__name__}")
        return data

    #----------------
    # Geocoding
    #----------------
    def geocode(self, address: str, *, timeout: Optional[float] = None) -> Optional[GeocodeResult]:
        """
        Forward geocode a place name.

        Returns None when Google has no results for the address.
        Raises GoogleMapsError for any other non-OK status.
        """
        self._require_credential()

        params: Dict[str, Any] = {"address": address}
        if self.country:
            params["components"] = f"country:{self.country}"
        if self.region:
            params["region"] = self.region

        data = self._get(GEOCODE_URL, params, timeout)
        status = data.get("status")

        if status == "ZERO_RESULTS" or (status == "OK" and not data.get("results")):
            return None
        if status != "OK":
            raise GoogleMapsError(f"Geocode failed: {status}", status=status)

        try:
            first = data["results"][0]
            location = first["geometry"]["location"]
            return GeocodeResult(
                coordinate=Coordinate(float(location["lat"]), float(location["lng"])),
                formatted_address=first.get("formatted_address", ""),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GoogleMapsError(f"Malformed geocode payload for '{address}'") from e

    def reverse_geocode(self, coordinate: Coordinate, *, timeout: Optional[float] = None) -> Optional[str]:
        """
        Coordinate -> formatted address, or None when Google has nothing.
        """
        self._require_credential()

        data = self._get(GEOCODE_URL, {"latlng": coordinate.as_param()}, timeout)
        status = data.get("status")

        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            raise GoogleMapsError(f"Reverse geocode failed: {status}", status=status)

        results = data.get("results") or []
        if not results:
            return None
        try:
            return results[0].get("formatted_address")
        except (AttributeError, IndexError, TypeError) as e:
            raise GoogleMapsError("Malformed reverse geocode payload", status=status) from e

    #----------------
    # Directions
    #----------------
    def directions(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate] = (),
        *,
        mode: str = "driving",
        timeout: Optional[float] = None,
    ) -> DirectionsResult:
        """
        calls the Directions API and returns the overview polyline of the first route.

        Waypoints are sent in the given order and never optimized; stop order
        is part of the route.
        """
        self._require_credential()

        params: Dict[str, Any] = {
            "origin": origin.as_param(),
            "destination": destination.as_param(),
            "mode": mode,
            "alternatives": "false",
        }
        if waypoints:
            params["waypoints"] = "|".join(point.as_param() for point in waypoints)

        data = self._get(DIRECTIONS_URL, params, timeout)
        status = data.get("status")

        if status != "OK":
            raise GoogleMapsError(f"Directions failed: {status or 'UNKNOWN'}", status=status)

        routes: List[Dict[str, Any]] = data.get("routes") or []
        try:
            encoded = routes[0]["overview_polyline"]["points"]
        except (KeyError, IndexError, TypeError) as e:
            raise GoogleMapsError("Directions payload has no overview polyline", status=status) from e

        if not isinstance(encoded, str):
            raise GoogleMapsError("Directions overview polyline is not a string", status=status)

        return DirectionsResult(status=status, encoded_polyline=encoded)
