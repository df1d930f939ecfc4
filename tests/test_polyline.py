import pytest

from buses.models import Coordinate
from routing.polyline import PolylineError, decode_polyline

# Example from Google's polyline algorithm documentation
GOOGLE_EXAMPLE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def test_decodes_google_reference_polyline():
    points = decode_polyline(GOOGLE_EXAMPLE)

    assert len(points) == 3
    expected = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
    for point, (lat, lng) in zip(points, expected):
        assert isinstance(point, Coordinate)
        assert point.lat == pytest.approx(lat)
        assert point.lng == pytest.approx(lng)


def test_empty_string_decodes_to_empty_path():
    assert decode_polyline("") == []


def test_truncated_polyline_raises():
    # lat of the second point without its lng
    with pytest.raises(PolylineError):
        decode_polyline("_p~iF~ps|U_ulL")


def test_polyline_error_is_a_value_error():
    with pytest.raises(ValueError):
        decode_polyline("_p~iF")
