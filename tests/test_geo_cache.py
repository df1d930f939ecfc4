import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from buses.models import Coordinate
from locations.cache import GeoCache, coordinate_key, normalize_name
from locations.errors import ResolutionError
from routing.google_client import GeocodeResult, GoogleMapsError


class MockGeocoder:
    """
    Counts upstream calls. `answers` maps the exact queried text to a
    GeocodeResult, None (no results) or an exception.
    """
    has_credential = True

    def __init__(self, answers=None, places=None, delay=0.0):
        self.answers = answers or {}
        self.places = places or {}
        self.delay = delay
        self.geocode_calls = 0
        self.reverse_calls = []
        self._lock = threading.Lock()

    def geocode(self, address, *, timeout=None):
        with self._lock:
            self.geocode_calls += 1
        time.sleep(self.delay)
        answer = self.answers.get(address)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def reverse_geocode(self, coordinate, *, timeout=None):
        self.reverse_calls.append(coordinate)
        answer = self.places.get((coordinate.lat, coordinate.lng))
        if isinstance(answer, Exception):
            raise answer
        return answer


STATION = GeocodeResult(Coordinate(16.5062, 80.6480), "Vijayawada Railway Station, Andhra Pradesh")


def test_name_normalization():
    assert normalize_name("  Benz Circle ") == "benz circle"
    assert normalize_name("BENZ circle") == normalize_name("benz Circle")


def test_coordinate_key_rounds_to_six_places():
    assert coordinate_key(Coordinate(16.50620004, 80.64800049)) == (16.5062, 80.648)


def test_geocode_is_cached_by_normalized_name():
    client = MockGeocoder({"Vijayawada Railway Station": STATION})
    cache = GeoCache(client)

    assert cache.geocode("Vijayawada Railway Station") == STATION.coordinate
    assert cache.geocode("  vijayawada railway station  ") == STATION.coordinate
    assert cache.geocode_result("VIJAYAWADA RAILWAY STATION").formatted_address == STATION.formatted_address
    assert client.geocode_calls == 1


def test_concurrent_identical_lookups_call_upstream_once():
    client = MockGeocoder({"Benz Circle": STATION}, delay=0.05)
    cache = GeoCache(client)

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: cache.geocode("Benz Circle"), range(16)))

    assert all(result == STATION.coordinate for result in results)
    assert client.geocode_calls == 1


@pytest.mark.parametrize(
    "failure",
    [None, GoogleMapsError("Geocode failed: REQUEST_DENIED"), requests.ConnectionError("down")],
)
def test_failures_raise_and_are_not_cached(failure):
    client = MockGeocoder({"Nowhere": failure})
    cache = GeoCache(client)

    for _ in range(2):
        with pytest.raises(ResolutionError) as excinfo:
            cache.geocode("Nowhere")
        assert excinfo.value.reason == "not_geocodable"

    # the second lookup retried upstream
    assert client.geocode_calls == 2


def test_blank_name_is_not_geocodable():
    client = MockGeocoder()
    with pytest.raises(ResolutionError):
        GeoCache(client).geocode("   ")
    assert client.geocode_calls == 0


def test_no_client_is_not_geocodable():
    with pytest.raises(ResolutionError):
        GeoCache(None).geocode("Benz Circle")


def test_reverse_geocode_cached_by_rounded_coordinate():
    client = MockGeocoder(places={(16.5062, 80.648): "Railway Station Rd, Vijayawada"})
    cache = GeoCache(client)

    assert cache.reverse_geocode(Coordinate(16.5062, 80.6480)) == "Railway Station Rd, Vijayawada"
    # differs only below the 6th decimal place
    assert cache.reverse_geocode(Coordinate(16.50620001, 80.64800001)) == "Railway Station Rd, Vijayawada"
    assert len(client.reverse_calls) == 1


def test_reverse_geocode_failure_returns_none_and_retries():
    client = MockGeocoder(places={(1.0, 2.0): GoogleMapsError("Reverse geocode failed: UNKNOWN_ERROR")})
    cache = GeoCache(client)

    assert cache.reverse_geocode(Coordinate(1.0, 2.0)) is None
    assert cache.reverse_geocode(Coordinate(1.0, 2.0)) is None
    assert len(client.reverse_calls) == 2


def test_key_locks_do_not_outlive_lookups():
    client = MockGeocoder(
        answers={"Vijayawada Railway Station": STATION},
        places={(1.0, 2.0): GoogleMapsError("Reverse geocode failed: UNKNOWN_ERROR")},
    )
    cache = GeoCache(client)

    cache.geocode("Vijayawada Railway Station")
    for junk in ("qwerty", "asdfgh", "zxcvbn"):
        with pytest.raises(ResolutionError):
            cache.geocode(junk)
    cache.reverse_geocode(Coordinate(1.0, 2.0))
    cache.reverse_geocode(Coordinate(3.0, 4.0))

    assert cache._key_locks == {}
