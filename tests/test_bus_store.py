from pathlib import Path

import pytest

from buses.models import Bus, Coordinate, MalformedStopData, Period, Stop
from buses.store import InMemoryBusStore

SAMPLE_STOPS = Path(__file__).parent.parent / "sampledata" / "stops.csv"


def test_sample_data_loads_five_buses():
    store = InMemoryBusStore.from_csv(SAMPLE_STOPS)

    assert len(store) == 5
    assert [bus.id for bus in store.list_buses()] == ["101", "102", "103", "104", "105"]

    bus = store.get_bus("101")
    assert bus.name == "Bus 101"
    assert bus.location == "Vijayawada"
    assert bus.capacity == 60
    assert len(bus.stops_for(Period.MORNING)) == 4
    assert bus.stops_for(Period.EVENING)[0].coordinate == Coordinate(16.5286, 80.6393)


def test_unknown_bus_is_none():
    assert InMemoryBusStore().get_bus("999") is None


def test_stops_for_orders_by_order_field():
    bus = Bus(
        id="1",
        name="Bus 1",
        stops=(
            Stop.new("c", 3, 3, "MORNING", 3),
            Stop.new("evening", 9, 9, "evening", 1),
            Stop.new("a", 1, 1, "MORNING", 1),
            Stop.new("b", 2, 2, "MORNING", 2),
        ),
    )
    assert [s.name for s in bus.stops_for(Period.MORNING)] == ["a", "b", "c"]
    assert [s.name for s in bus.stops_for(Period.EVENING)] == ["evening"]


@pytest.mark.parametrize(
    "stop",
    [
        Stop("no coordinate", None, Period.MORNING, 1),
        Stop("no order", Coordinate(1.0, 1.0), Period.MORNING, None),
        Stop("nan", Coordinate(float("nan"), 1.0), Period.MORNING, 1),
    ],
)
def test_stops_for_rejects_unusable_stops(stop):
    with pytest.raises(MalformedStopData):
        Bus(id="1", name="Bus 1", stops=(stop,)).stops_for(Period.MORNING)


def test_route_summary():
    store = InMemoryBusStore.from_csv(SAMPLE_STOPS)
    summary = store.get_bus("103").route_summary(Period.MORNING)

    assert summary.from_name == "Kanuru Junction"
    assert summary.to_name == "V R Siddhartha Engineering College"
    assert summary.description == "Route from Kanuru Junction to V R Siddhartha Engineering College"
    assert summary.stop_names == ("Kanuru Junction", "NTR Circle", "V R Siddhartha Engineering College")


def test_route_summary_of_empty_run():
    summary = Bus(id="1", name="Bus 1").route_summary(Period.EVENING)
    assert summary.description == "Route from Start to End"
    assert summary.stop_names == ()


def test_bad_csv_row_is_malformed(tmp_path):
    path = tmp_path / "stops.csv"
    path.write_text(
        "bus_number,bus_name,location,stop_name,lat,lng,period,order\n"
        "7,Bus 7,Here,Somewhere,not-a-number,80.6,MORNING,1\n"
    )
    with pytest.raises(MalformedStopData):
        InMemoryBusStore.from_csv(path)


def test_bad_period_is_malformed(tmp_path):
    path = tmp_path / "stops.csv"
    path.write_text(
        "bus_number,bus_name,location,stop_name,lat,lng,period,order\n"
        "7,Bus 7,Here,Somewhere,16.5,80.6,NIGHT,1\n"
    )
    with pytest.raises(MalformedStopData):
        InMemoryBusStore.from_csv(path)
