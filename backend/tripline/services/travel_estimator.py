"""Straight-line travel estimates between destinations.

No routing engine is involved: the great-circle distance is inflated by a
per-mode detour factor and divided by a distance-dependent average speed.
"""

from __future__ import annotations

import math
from typing import Sequence

from tripline.core.logging import get_logger
from tripline.core.settings import settings
from tripline.models.enums import TransportMode
from tripline.models.schemas import (
    Coordinates,
    Destination,
    DrivingSegment,
    TravelEstimate,
    TravelLeg,
)

EARTH_RADIUS_KM = 6371.0

DETOUR_FACTORS: dict[TransportMode, float] = {
    TransportMode.DRIVING: 1.4,
    TransportMode.WALKING: 1.2,
    TransportMode.BICYCLE: 1.3,
    TransportMode.PUBLIC_TRANSPORT: 1.6,
}

logger = get_logger(__name__)


def haversine_km(origin: Coordinates, target: Coordinates) -> float:
    phi1, phi2 = math.radians(origin.lat), math.radians(target.lat)
    d_phi = math.radians(target.lat - origin.lat)
    d_lambda = math.radians(target.lng - origin.lng)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def average_speed_kmh(mode: TransportMode, base_distance_km: float) -> float:
    if mode is TransportMode.DRIVING:
        if base_distance_km < 5:
            return 30.0
        if base_distance_km < 50:
            return 60.0
        if base_distance_km < 200:
            return 80.0
        return 90.0
    if mode is TransportMode.WALKING:
        return 4.5
    if mode is TransportMode.BICYCLE:
        if base_distance_km < 5:
            return 12.0
        if base_distance_km < 20:
            return 15.0
        return 18.0
    # public transport speeds include waiting times
    if base_distance_km < 10:
        return 20.0
    if base_distance_km < 50:
        return 35.0
    return 50.0


def minimum_minutes(mode: TransportMode) -> int:
    return 5 if mode is TransportMode.WALKING else 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_from_distance(base_distance_km: float, mode: TransportMode) -> TravelEstimate:
    inflated = base_distance_km * DETOUR_FACTORS[mode]
    speed = average_speed_kmh(mode, base_distance_km)
    minutes = _round_half_up(inflated / speed * 60)
    return TravelEstimate(
        distance_km=inflated,
        minutes=max(minimum_minutes(mode), minutes),
        mode=mode,
    )


def estimate_travel(
    origin: Coordinates, target: Coordinates, mode: TransportMode
) -> TravelEstimate:
    """Return the inflated distance and travel minutes for one leg."""

    return estimate_from_distance(haversine_km(origin, target), mode)


def resolve_leg_mode(departing: Destination, arriving: Destination) -> TransportMode:
    """Pick the transport mode governing the leg ``departing -> arriving``.

    The arriving destination normally decides how it is reached. An out-and-back
    side trip (departing destination with a return target, travelled on foot or
    by bike) keeps its own mode for the way back.
    """

    own = departing.transport_to_next.mode if departing.transport_to_next else None
    if departing.return_destination_id and own is not None and own.is_local:
        return own
    return arriving.arrival_mode


def estimate_leg(departing: Destination, arriving: Destination) -> TravelEstimate | None:
    if departing.coordinates is None or arriving.coordinates is None:
        logger.debug(
            "travel.leg.missing_coordinates",
            extra={"from_id": departing.id, "to_id": arriving.id},
        )
        return None
    mode = resolve_leg_mode(departing, arriving)
    return estimate_travel(departing.coordinates, arriving.coordinates, mode)


def travel_legs(day_destinations: Sequence[Destination]) -> list[TravelLeg]:
    """One entry per consecutive pair of a day.

    Legs whose ends lack coordinates keep a placeholder duration from
    ``settings.missing_coordinates_travel_minutes`` and no distance.
    """

    legs: list[TravelLeg] = []
    for departing, arriving in zip(day_destinations, day_destinations[1:]):
        estimate = estimate_leg(departing, arriving)
        if estimate is None:
            minutes = settings.missing_coordinates_travel_minutes
            distance_km = None
        else:
            minutes = estimate.minutes
            distance_km = estimate.distance_km
        legs.append(
            TravelLeg(
                from_destination_id=departing.id,
                to_destination_id=arriving.id,
                mode=resolve_leg_mode(departing, arriving),
                minutes=minutes,
                distance_km=distance_km,
            )
        )
    return legs


def driving_anchor_segment(
    day_destinations: Sequence[Destination], index: int
) -> DrivingSegment:
    """Driving segment into ``day_destinations[index]`` measured from its anchor.

    The anchor is the closest earlier destination that was itself reached by
    driving, or the first destination of the day. Walking and cycling detours
    in between are skipped so they do not bend the driving route.
    """

    if index <= 0 or index >= len(day_destinations):
        return DrivingSegment()
    current = day_destinations[index]
    if current.arrival_mode is not TransportMode.DRIVING:
        return DrivingSegment()

    anchor: Destination | None = None
    for position in range(index - 1, -1, -1):
        candidate = day_destinations[position]
        if position == 0 or candidate.arrival_mode is TransportMode.DRIVING:
            anchor = candidate
            break

    if anchor is None or anchor.coordinates is None or current.coordinates is None:
        return DrivingSegment()

    estimate = estimate_travel(
        anchor.coordinates, current.coordinates, TransportMode.DRIVING
    )
    return DrivingSegment(
        distance_km=estimate.distance_km,
        minutes=estimate.minutes,
        from_destination_id=anchor.id,
    )


__all__ = [
    "EARTH_RADIUS_KM",
    "DETOUR_FACTORS",
    "haversine_km",
    "average_speed_kmh",
    "minimum_minutes",
    "estimate_from_distance",
    "estimate_travel",
    "resolve_leg_mode",
    "estimate_leg",
    "travel_legs",
    "driving_anchor_segment",
]
