from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from tripline.core.settings import settings
from tripline.models.enums import TransportMode
from tripline.models.schemas import (
    DayStats,
    Destination,
    OverallStats,
    TimelineDay,
    Trip,
    VehicleConfig,
)
from tripline.services.day_grouper import group_days
from tripline.services.travel_estimator import estimate_leg


@dataclass(frozen=True)
class BudgetFigure:
    value: float
    is_reference: bool


def destination_budget(destination: Destination) -> BudgetFigure:
    """Explicit budget, or the category default flagged as a reference value."""

    if destination.budget is not None:
        return BudgetFigure(value=destination.budget, is_reference=False)
    return BudgetFigure(value=destination.category.default_budget, is_reference=True)


def leg_cost(
    distance_km: float,
    vehicle_config: VehicleConfig | None,
    *,
    fallback_rate: float | None = None,
) -> float:
    if vehicle_config is None:
        rate = settings.fallback_cost_per_km if fallback_rate is None else fallback_rate
        return distance_km * rate
    consumption = vehicle_config.fuel_consumption or settings.default_fuel_consumption
    price = vehicle_config.fuel_price or settings.default_fuel_price
    return (distance_km / 100) * consumption * price


def compute_day_stats(
    day_destinations: Sequence[Destination],
    vehicle_config: VehicleConfig | None = None,
    *,
    fallback_rate: float | None = None,
) -> DayStats:
    total_distance = 0.0
    total_travel_time = 0
    total_cost = 0.0
    driving_distance = 0.0
    walking_distance = 0.0
    biking_distance = 0.0

    for current, following in zip(day_destinations, day_destinations[1:]):
        estimate = estimate_leg(current, following)
        if estimate is None:
            continue
        distance = estimate.distance_km
        mode = estimate.mode
        # public transport is reported with driving, both are cost bearing
        if mode.is_cost_bearing:
            driving_distance += distance
            total_cost += leg_cost(
                distance, vehicle_config, fallback_rate=fallback_rate
            )
        elif mode is TransportMode.WALKING:
            walking_distance += distance
        elif mode is TransportMode.BICYCLE:
            biking_distance += distance
        total_distance += distance
        total_travel_time += estimate.minutes

    return DayStats(
        total_distance=total_distance,
        total_travel_time=total_travel_time,
        total_cost=total_cost,
        driving_distance=driving_distance,
        walking_distance=walking_distance,
        biking_distance=biking_distance,
    )


def build_timeline(
    trip: Trip,
    destinations: Mapping[str, Destination] | Iterable[Destination],
) -> list[TimelineDay]:
    """Group the trip into days and attach per-day statistics."""

    if not isinstance(destinations, Mapping):
        destinations = {dest.id: dest for dest in destinations}
    days: list[TimelineDay] = []
    for bucket in group_days(trip.destinations, destinations):
        days.append(
            TimelineDay(
                date=bucket.date,
                destinations=bucket.destinations,
                day_stats=compute_day_stats(bucket.destinations, trip.vehicle_config),
            )
        )
    return days


def compute_overall_stats(days: Sequence[TimelineDay]) -> OverallStats:
    stats = OverallStats()
    has_reference_budgets = False
    for day in days:
        for destination in day.destinations:
            if destination_budget(destination).is_reference:
                has_reference_budgets = True
        day_stats = day.day_stats
        stats = OverallStats(
            destinations=stats.destinations + len(day.destinations),
            days=stats.days + 1,
            distance=stats.distance + day_stats.total_distance,
            travel_time=stats.travel_time + day_stats.total_travel_time,
            cost=stats.cost + day_stats.total_cost,
            driving_distance=stats.driving_distance + day_stats.driving_distance,
            walking_distance=stats.walking_distance + day_stats.walking_distance,
            biking_distance=stats.biking_distance + day_stats.biking_distance,
        )
    return stats.model_copy(update={"has_reference_budgets": has_reference_budgets})


__all__ = [
    "BudgetFigure",
    "destination_budget",
    "leg_cost",
    "compute_day_stats",
    "build_timeline",
    "compute_overall_stats",
]
