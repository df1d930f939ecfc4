"""
Buses domain package.

Public API:
- Domain models: Bus, Stop, Period, Coordinate, Circle, RouteSummary
- MalformedStopData
- InMemoryBusStore
"""
from .models import Bus, Circle, Coordinate, MalformedStopData, Period, RouteSummary, Stop
from .store import InMemoryBusStore

__all__ = [
    "Bus",
    "Circle",
    "Coordinate",
    "MalformedStopData",
    "Period",
    "RouteSummary",
    "Stop",
    "InMemoryBusStore",
]
