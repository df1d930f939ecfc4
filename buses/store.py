"""
Purpose: Read-only bus/stop store consumed by the matching engine.
What it does:
- Holds buses keyed by bus number, in insertion order.
- Loads them from a flat CSV of stops (one row per stop).

Expected CSV columns:
  bus_number, bus_name, location, stop_name, lat, lng, period, order
Optional columns:
  capacity, current_occupancy, driver_name, driver_phone, live_location_url

Rule: The matcher only ever reads from the store.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .models import Bus, MalformedStopData, Stop


@dataclass
class InMemoryBusStore:
    """
    In-memory stand-in for the bus database.
    """
    _buses: Dict[str, Bus] = field(default_factory=dict)

    @classmethod
    def from_buses(cls, buses: Iterable[Bus]) -> InMemoryBusStore:
        store = cls()
        for bus in buses:
            store.add(bus)
        return store

    @classmethod
    def from_csv(cls, path: str | Path) -> InMemoryBusStore:
        """
        Build a store from a stops CSV. Rows of the same bus_number are grouped;
        bus level columns are taken from the first row of each bus.
        """
        store = cls()
        stops_by_bus: Dict[str, List[Stop]] = {}

        with open(path, "r", newline="") as file:
            reader = csv.DictReader(file)
            for line_no, row in enumerate(reader, start=2):
                number = (row.get("bus_number") or "").strip()
                if not number:
                    raise MalformedStopData(f"{path}:{line_no}: missing bus_number")

                if number not in stops_by_bus:
                    stops_by_bus[number] = []
                    store.add(Bus(
                        id=number,
                        name=row.get("bus_name") or f"Bus {number}",
                        location=row.get("location") or "",
                        capacity=int(row.get("capacity") or 0),
                        current_occupancy=int(row.get("current_occupancy") or 0),
                        driver_name=row.get("driver_name") or "",
                        driver_phone=row.get("driver_phone") or "",
                        live_location_url=row.get("live_location_url") or "",
                    ))

                try:
                    stop = Stop.new(
                        name=row["stop_name"],
                        lat=row["lat"],
                        lng=row["lng"],
                        period=row["period"],
                        order=row["order"],
                    )
                except (KeyError, TypeError, ValueError) as e:
                    raise MalformedStopData(f"{path}:{line_no}: invalid stop row ({e})") from e
                stops_by_bus[number].append(stop)

        for number, stops in stops_by_bus.items():
            store._buses[number] = replace(store._buses[number], stops=tuple(stops))

        return store

    # --- Public API ---

    def add(self, bus: Bus) -> None:
        self._buses[bus.id] = bus

    def get_bus(self, number: str) -> Optional[Bus]:
        return self._buses.get(number)

    def list_buses(self) -> List[Bus]:
        return list(self._buses.values())

    def __len__(self) -> int:
        return len(self._buses)
