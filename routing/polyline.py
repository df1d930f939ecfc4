"""
Decoder for Google's encoded polyline format.
See: https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""

from typing import List

from buses.models import Coordinate


class PolylineError(ValueError):
    """Encoded string ended in the middle of a value."""
    pass


def _next_value(encoded: str, index: int):
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineError("Truncated polyline")
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(encoded: str, precision: int = 5) -> List[Coordinate]:
    """
    Decode an encoded polyline string into a list of Coordinates.

    Args:
        encoded: Encoded polyline string (as in overview_polyline.points)
        precision: Decimal places encoded, 5 for Google

    Returns:
        List of Coordinate objects along the route, empty for an empty string
    """
    if not encoded:
        return []

    factor = 10 ** precision
    coordinates: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _next_value(encoded, index)
        dlng, index = _next_value(encoded, index)
        lat += dlat
        lng += dlng
        coordinates.append(Coordinate(lat / factor, lng / factor))

    return coordinates
