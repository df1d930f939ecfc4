#Purpose: Route geometry for a bus run.
#Returns the path a bus physically traverses through its ordered stops:
#road accurate when the directions provider answers (decoded overview polyline),
#straight lines through the stops otherwise.
#It's the "I need the actual shape of the route" module, geofence.py is "does it touch the circle".

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import requests

from buses.models import Coordinate, Stop
from .google_client import GoogleMapsClient, GoogleMapsError
from .polyline import decode_polyline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathResult:
    """
    Output of path building for one run.

    degraded=True means the provider could not be used and `points` are the
    stop coordinates joined by straight lines; `reason` says why.
    """
    points: Tuple[Coordinate, ...]
    degraded: bool = False
    reason: Optional[str] = None

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.points)


def straight_line_path(stops: Sequence[Stop], reason: Optional[str] = None) -> PathResult:
    return PathResult(
        points=tuple(stop.coordinate for stop in stops),
        degraded=True,
        reason=reason,
    )


class PathProvider:
    """
    Builds PathResults from ordered stops.

    Provider failures of any kind (no client, no key, network error, timeout,
    non-OK status, bad payload) degrade to the straight-line path. They are
    logged and never raised.
    """
    def __init__(self, client: Optional[GoogleMapsClient] = None, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout #per call deadline; None uses the client's own timeout

    def build_path(self, stops: Sequence[Stop]) -> PathResult:
        if not stops:
            raise ValueError("At least one stop is required to build a path.")

        if len(stops) == 1:
            return PathResult(points=(stops[0].coordinate,))

        if self.client is None:
            return straight_line_path(stops, reason="no directions client")

        origin = stops[0].coordinate
        destination = stops[-1].coordinate
        waypoints = [stop.coordinate for stop in stops[1:-1]]

        try:
            result = self.client.directions(origin, destination, waypoints, timeout=self.timeout)
            points = decode_polyline(result.encoded_polyline)
        except requests.Timeout as e:
            return self._degrade(stops, f"directions timed out: {e}")
        except requests.RequestException as e:
            return self._degrade(stops, f"directions request failed: {e}")
        except GoogleMapsError as e:
            return self._degrade(stops, str(e))
        except (ValueError, TypeError) as e:
            #bad polyline
            return self._degrade(stops, f"malformed directions payload: {e}")

        if not points:
            return self._degrade(stops, "directions returned an empty path")

        return PathResult(points=tuple(points))

    def _degrade(self, stops: Sequence[Stop], reason: str) -> PathResult:
        logger.warning(
            f"Falling back to straight-line path through {len(stops)} stops "
            f"({stops[0].name} -> {stops[-1].name}): {reason}"
        )
        return straight_line_path(stops, reason=reason)
