from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Tuple

import requests

from buses.models import Coordinate
from routing.google_client import GeocodeResult, GoogleMapsClient, GoogleMapsError
from .errors import ResolutionError

logger = logging.getLogger(__name__)

COORDINATE_KEY_PRECISION = 6  # ~0.11 m


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def coordinate_key(coordinate: Coordinate) -> Tuple[float, float]:
    return (
        round(coordinate.lat, COORDINATE_KEY_PRECISION),
        round(coordinate.lng, COORDINATE_KEY_PRECISION),
    )


class GeoCache:
    """
    Memoizes geocode and reverse geocode lookups for the process lifetime.

    - name keys are trimmed and case folded
    - coordinate keys are rounded to 6 decimal places
    - a miss makes exactly one provider call per key, even when many threads
      ask for the same key at once (per-key lock, dropped once the lookup ends)
    - failures are never cached, the next lookup retries
    """
    def __init__(self, client: Optional[GoogleMapsClient], timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout
        self._geocodes = {}  # type: Dict[str, GeocodeResult]
        self._places = {}  # type: Dict[Tuple[float, float], str]
        self._lock = threading.Lock()
        self._key_locks = {}  # type: Dict[object, threading.Lock]

    def _key_lock(self, key) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _release_key_lock(self, key, lock: threading.Lock) -> None:
        with self._lock:
            if self._key_locks.get(key) is lock:
                del self._key_locks[key]

    def _cached(self, table: dict, key):
        with self._lock:
            return table.get(key)

    def _store(self, table: dict, key, value) -> None:
        with self._lock:
            table[key] = value

    # --- Public API ---

    def geocode(self, name: str) -> Coordinate:
        return self.geocode_result(name).coordinate

    def geocode_result(self, name: str) -> GeocodeResult:
        """
        Place name -> GeocodeResult (coordinate + formatted address).
        Raises ResolutionError("not_geocodable") when the provider can't answer.
        """
        if not isinstance(name, str) or not name.strip():
            raise ResolutionError("not_geocodable", name, "Invalid location for geocoding")

        key = normalize_name(name)
        cached = self._cached(self._geocodes, key)
        if cached is not None:
            logger.debug(f"Geocode cache hit for '{key}'")
            return cached

        lock = self._key_lock(key)
        with lock:
            try:
                # another thread may have filled it while we waited
                cached = self._cached(self._geocodes, key)
                if cached is not None:
                    return cached

                if self.client is None:
                    raise ResolutionError("not_geocodable", name, "No geocoding provider configured")

                try:
                    result = self.client.geocode(name.strip(), timeout=self.timeout)
                except (GoogleMapsError, requests.RequestException) as e:
                    logger.warning(f"Geocoding '{name}' failed: {e}")
                    raise ResolutionError("not_geocodable", name) from e

                if result is None:
                    raise ResolutionError("not_geocodable", name, f"No results for location {name!r}")

                self._store(self._geocodes, key, result)
                return result
            finally:
                self._release_key_lock(key, lock)

    def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        """
        Coordinate -> formatted address, None if the provider has nothing or fails.
        """
        key = coordinate_key(coordinate)
        cached = self._cached(self._places, key)
        if cached is not None:
            return cached

        lock = self._key_lock(key)
        with lock:
            try:
                cached = self._cached(self._places, key)
                if cached is not None:
                    return cached

                if self.client is None or not self.client.has_credential:
                    return None

                try:
                    place = self.client.reverse_geocode(Coordinate(*key), timeout=self.timeout)
                except (GoogleMapsError, requests.RequestException) as e:
                    logger.warning(f"Reverse geocoding {key} failed: {e}")
                    return None

                if place:
                    self._store(self._places, key, place)
                return place
            finally:
                self._release_key_lock(key, lock)
