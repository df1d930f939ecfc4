#Purpose: Circle geofencing against route geometry.
#Decides whether a bus path passes within a radius of a user's location.
#Typical responsibilities:
#great-circle distance between two points (haversine)
#distance from a point to a path segment on the sphere
#point test: any path point inside the circle
#segment test: any segment passing through the circle without a point inside it
#Output: a plain bool, the matcher decides what to do with it.

from __future__ import annotations

import math
from typing import Sequence

from buses.models import Circle, Coordinate

EARTH_RADIUS_M = 6371000.0


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two points."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2.0) ** 2
    # clamp: rounding can push h a hair above 1 for antipodal points
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def initial_bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial bearing from a to b in radians."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlng = math.radians(b.lng - a.lng)
    y = math.sin(dlng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlng)
    return math.atan2(y, x)


def point_to_segment_m(point: Coordinate, start: Coordinate, end: Coordinate) -> float:
    """
    Shortest distance in meters from `point` to the great-circle segment start-end.

    If the foot of the perpendicular lies between the endpoints the cross-track
    distance is returned, otherwise the distance to the nearer endpoint.
    Coincident endpoints are the plain point-to-point case.
    """
    if start == end or haversine_m(start, end) == 0.0:
        return haversine_m(point, start)

    to_start = haversine_m(point, start)
    to_end = haversine_m(point, end)
    if to_start == 0.0 or to_end == 0.0:
        return 0.0

    # behind start: the angle at start between segment and point is obtuse
    if math.cos(initial_bearing(start, point) - initial_bearing(start, end)) <= 0.0:
        return to_start
    # beyond end: same test from the other endpoint
    if math.cos(initial_bearing(end, point) - initial_bearing(end, start)) <= 0.0:
        return to_end

    angular = to_start / EARTH_RADIUS_M
    delta = initial_bearing(start, point) - initial_bearing(start, end)
    cross_track = math.asin(max(-1.0, min(1.0, math.sin(angular) * math.sin(delta))))
    # the perpendicular can never be longer than either endpoint distance
    return min(abs(cross_track) * EARTH_RADIUS_M, to_start, to_end)


def point_in_circle(circle: Circle, point: Coordinate) -> bool:
    return haversine_m(point, circle.center) <= circle.radius_m


def intersects(circle: Circle, path: Sequence[Coordinate]) -> bool:
    """
    Does the path touch the circle?

    1) any point of the path inside the circle -> True
    2) any segment between consecutive points within radius of the center -> True

    An empty path never intersects; a one-point path only gets the point test.
    """
    if not path:
        return False

    for point in path:
        if point_in_circle(circle, point):
            return True

    for start, end in zip(path[:-1], path[1:]):
        if point_to_segment_m(circle.center, start, end) <= circle.radius_m:
            return True

    return False
