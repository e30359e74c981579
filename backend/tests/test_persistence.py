from __future__ import annotations

import uuid

import pytest
from tripline.models.enums import DestinationCategory, TransportMode
from tripline.models.schemas import Coordinates, DateSpan, HomePoint, VehicleConfig
from tripline.services.errors import TRIP_NOT_FOUND, PersistenceError
from tripline.services.persistence import (
    InMemoryPersistenceGateway,
    PersistenceGateway,
    SqlPersistenceGateway,
)

from backend.tests.utils.factories import DAY_1, DAY_2, DAY_3, make_destination, make_trip


def _unique(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _sql_fixture():
    trip_id = _unique("trip")
    destinations = [
        make_destination(_unique("a"), DAY_1, offset=0, mode=TransportMode.DRIVING),
        make_destination(
            _unique("h"),
            DAY_1,
            offset=3,
            category=DestinationCategory.HOTEL,
            end_date=DAY_2,
            budget=140.0,
            tags=["sea view"],
        ),
        make_destination(_unique("c"), DAY_2, offset=8, mode=TransportMode.BICYCLE),
    ]
    trip = make_trip(
        [dest.id for dest in destinations],
        trip_id=trip_id,
        vehicle_config={"fuel_consumption": 7.5, "fuel_price": 1.9},
        home_point=HomePoint(name="Home", coordinates=Coordinates(lat=1, lng=2)),
    )
    return trip, destinations


def test_gateways_satisfy_protocol():
    assert isinstance(InMemoryPersistenceGateway(), PersistenceGateway)
    assert isinstance(SqlPersistenceGateway(), PersistenceGateway)


@pytest.mark.asyncio
async def test_in_memory_gateway_records_calls():
    destinations = [make_destination("a", DAY_1), make_destination("b", DAY_2)]
    gateway = InMemoryPersistenceGateway(make_trip(["a", "b"]), destinations)

    await gateway.reorder("trip-1", ["b", "a"])
    await gateway.update_destination_dates("a", DateSpan(start_date=DAY_2, end_date=DAY_2))

    assert gateway.trips["trip-1"].destinations == ["b", "a"]
    assert gateway.destinations["a"].start_date == DAY_2
    assert [name for name, _ in gateway.calls] == ["reorder", "update_destination_dates"]

    with pytest.raises(PersistenceError) as exc_info:
        await gateway.reorder("missing", [])
    assert exc_info.value.code == TRIP_NOT_FOUND
    with pytest.raises(PersistenceError):
        await gateway.update_destination_dates(
            "ghost", DateSpan(start_date=DAY_1, end_date=DAY_1)
        )


@pytest.mark.asyncio
async def test_sql_gateway_round_trip():
    trip, destinations = _sql_fixture()
    gateway = SqlPersistenceGateway()
    await gateway.save_trip(trip, destinations)

    loaded_trip, loaded = await gateway.load_trip(trip.id)

    assert loaded_trip.destinations == trip.destinations
    assert loaded_trip.vehicle_config == VehicleConfig(fuel_consumption=7.5, fuel_price=1.9)
    assert loaded_trip.home_point.name == "Home"
    by_id = {dest.id: dest for dest in loaded}
    hotel = by_id[destinations[1].id]
    assert hotel.category is DestinationCategory.HOTEL
    assert (hotel.start_date, hotel.end_date) == (DAY_1, DAY_2)
    assert hotel.budget == pytest.approx(140.0)
    assert hotel.tags == ["sea view"]
    assert by_id[destinations[2].id].arrival_mode is TransportMode.BICYCLE
    assert by_id[destinations[0].id].coordinates == destinations[0].coordinates


@pytest.mark.asyncio
async def test_sql_gateway_reorder_and_dates():
    trip, destinations = _sql_fixture()
    gateway = SqlPersistenceGateway()
    await gateway.save_trip(trip, destinations)
    moved = destinations[0].id

    new_order = [*trip.destinations[1:], moved]
    await gateway.reorder(trip.id, new_order)
    await gateway.update_destination_dates(
        moved, DateSpan(start_date=DAY_3, end_date=DAY_3)
    )

    loaded_trip, loaded = await gateway.load_trip(trip.id)
    assert loaded_trip.destinations == new_order
    moved_record = next(dest for dest in loaded if dest.id == moved)
    assert (moved_record.start_date, moved_record.end_date) == (DAY_3, DAY_3)


@pytest.mark.asyncio
async def test_sql_gateway_create_destination_appends():
    trip, destinations = _sql_fixture()
    gateway = SqlPersistenceGateway()
    await gateway.save_trip(trip, destinations)

    extra = make_destination(_unique("n"), DAY_3, offset=12)
    created = await gateway.create_destination(trip.id, extra)

    assert created.id == extra.id
    loaded_trip, loaded = await gateway.load_trip(trip.id)
    assert loaded_trip.destinations[-1] == extra.id
    assert len(loaded) == 4


@pytest.mark.asyncio
async def test_sql_gateway_missing_rows():
    gateway = SqlPersistenceGateway()

    with pytest.raises(PersistenceError) as exc_info:
        await gateway.load_trip("no-such-trip")
    assert exc_info.value.code == TRIP_NOT_FOUND

    with pytest.raises(PersistenceError):
        await gateway.reorder("no-such-trip", ["a"])
    with pytest.raises(PersistenceError):
        await gateway.update_destination_dates(
            "no-such-destination", DateSpan(start_date=DAY_1, end_date=DAY_1)
        )


@pytest.mark.asyncio
async def test_sql_gateway_duplicate_trip_is_reported():
    trip, destinations = _sql_fixture()
    gateway = SqlPersistenceGateway()
    await gateway.save_trip(trip, destinations)

    with pytest.raises(PersistenceError) as exc_info:
        await gateway.save_trip(trip, [])
    assert exc_info.value.code == 15020
