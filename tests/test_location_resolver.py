import pytest

from buses.models import Coordinate
from locations.cache import GeoCache
from locations.errors import ResolutionError
from locations.resolver import LocationResolver, parse_coordinates
from routing.google_client import GeocodeResult


class MockGeocoder:
    has_credential = True

    def __init__(self, answers):
        self.answers = answers
        self.queries = []

    def geocode(self, address, *, timeout=None):
        self.queries.append(address)
        return self.answers.get(address)


@pytest.mark.parametrize(
    "token",
    ["16.5062,80.6480", "16.5062, 80.6480", "  16.5062 ,80.6480  "],
)
def test_coordinate_tokens_parse_identically(token):
    assert parse_coordinates(token) == Coordinate(16.5062, 80.6480)


def test_negative_and_integer_coordinates():
    assert parse_coordinates("-33,151") == Coordinate(-33.0, 151.0)
    assert parse_coordinates("-33.86,-151.2") == Coordinate(-33.86, -151.2)


@pytest.mark.parametrize("token", ["abc", "16.5062", "16.5,80.6,1", "lat,lng", "16.5;80.6"])
def test_non_coordinates_are_not_parsed(token):
    assert parse_coordinates(token) is None


def test_parsing_does_not_range_check():
    assert parse_coordinates("123.0,500.0") == Coordinate(123.0, 500.0)


def test_coordinates_skip_the_geocoder():
    client = MockGeocoder({})
    resolver = LocationResolver(GeoCache(client))

    assert resolver.resolve("16.5062, 80.6480") == Coordinate(16.5062, 80.6480)
    assert client.queries == []


def test_place_names_go_to_the_geocoder():
    benz = GeocodeResult(Coordinate(16.5171, 80.6305), "Benz Circle, Vijayawada")
    client = MockGeocoder({"abc": benz})
    resolver = LocationResolver(GeoCache(client))

    assert resolver.resolve("abc") == benz.coordinate
    assert client.queries == ["abc"]


def test_unknown_place_is_a_resolution_error():
    resolver = LocationResolver(GeoCache(MockGeocoder({})))

    with pytest.raises(ResolutionError) as excinfo:
        resolver.resolve("Atlantis")
    assert excinfo.value.reason == "not_geocodable"


def test_place_name_without_geocoder_is_a_resolution_error():
    with pytest.raises(ResolutionError):
        LocationResolver().resolve("Benz Circle")


@pytest.mark.parametrize("token", ["", "   ", None, 42])
def test_invalid_tokens(token):
    with pytest.raises(ResolutionError):
        LocationResolver().resolve(token)


def test_coordinate_passes_through():
    point = Coordinate(16.5, 80.6)
    assert LocationResolver().resolve(point) is point
