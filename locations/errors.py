class ResolutionError(Exception):
    """
    The location could not be turned into a coordinate.
    Fatal to the request that asked for it.

    reason is one of:
      - "not_geocodable": not "lat,lng" and the geocoder could not answer
      - "out_of_range": parsed coordinates outside lat/lng bounds
    """

    def __init__(self, reason: str, location=None, message=None):
        self.reason = reason
        self.location = location
        super().__init__(message or f"Could not determine location {location!r} ({reason})")
