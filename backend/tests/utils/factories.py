from __future__ import annotations

from typing import Iterable

from tripline.models.enums import DestinationCategory, TransportMode
from tripline.models.schemas import Destination, HomePoint, TransportInfo, Trip

DAY_1 = "2025-06-01"
DAY_2 = "2025-06-02"
DAY_3 = "2025-06-03"

# roughly 1.1 km per 0.01 degree of longitude on the equator
_STEP = 0.01


def point(offset: float) -> dict[str, float]:
    return {"lat": 0.0, "lng": round(offset * _STEP, 6)}


def make_destination(
    destination_id: str,
    day: str = DAY_1,
    *,
    offset: float | None = None,
    mode: TransportMode | None = None,
    category: DestinationCategory = DestinationCategory.ATTRACTION,
    end_date: str | None = None,
    return_to: str | None = None,
    budget: float | None = None,
    tags: list[str] | None = None,
) -> Destination:
    payload: dict = {
        "id": destination_id,
        "name": f"Stop {destination_id}",
        "category": category,
        "start_date": day,
        "end_date": end_date or day,
        "return_destination_id": return_to,
        "budget": budget,
        "tags": tags or [],
    }
    if offset is not None:
        payload["coordinates"] = point(offset)
    if mode is not None:
        payload["transport_to_next"] = TransportInfo(mode=mode)
    return Destination.model_validate(payload)


def make_trip(
    order: Iterable[str],
    *,
    trip_id: str = "trip-1",
    vehicle_config: dict | None = None,
    home_point: HomePoint | None = None,
) -> Trip:
    return Trip(
        id=trip_id,
        name="Coast road trip",
        start_date=DAY_1,
        end_date=DAY_3,
        destinations=list(order),
        vehicle_config=vehicle_config,
        home_point=home_point,
    )


def as_mapping(destinations: Iterable[Destination]) -> dict[str, Destination]:
    return {destination.id: destination for destination in destinations}
