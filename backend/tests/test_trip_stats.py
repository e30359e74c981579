from __future__ import annotations

import pytest
from tripline.models.enums import DestinationCategory, TransportMode
from tripline.models.schemas import VehicleConfig
from tripline.services.travel_estimator import estimate_leg
from tripline.services.trip_stats import (
    build_timeline,
    compute_day_stats,
    compute_overall_stats,
    destination_budget,
    leg_cost,
)

from backend.tests.utils.factories import DAY_1, DAY_2, make_destination, make_trip


def test_walking_and_biking_days_cost_nothing():
    day = [
        make_destination("a", offset=0, mode=TransportMode.DRIVING),
        make_destination("b", offset=2, mode=TransportMode.WALKING),
        make_destination("c", offset=4, mode=TransportMode.BICYCLE),
    ]
    stats = compute_day_stats(day)

    assert stats.total_cost == 0
    assert stats.driving_distance == 0
    assert stats.walking_distance > 0
    assert stats.biking_distance > 0
    assert stats.total_distance == pytest.approx(
        stats.walking_distance + stats.biking_distance
    )


def test_public_transport_counts_as_driving_distance():
    day = [
        make_destination("a", offset=0),
        make_destination("b", offset=50, mode=TransportMode.PUBLIC_TRANSPORT),
    ]
    stats = compute_day_stats(day, fallback_rate=0.5)
    leg = estimate_leg(day[0], day[1])

    assert stats.driving_distance == pytest.approx(leg.distance_km)
    assert stats.total_cost == pytest.approx(leg.distance_km * 0.5)
    assert stats.total_travel_time == leg.minutes


def test_vehicle_config_cost_formula():
    config = VehicleConfig(fuel_consumption=6.0, fuel_price=2.0)
    assert leg_cost(100, config) == pytest.approx(12.0)
    # missing figures fall back to the configured defaults
    assert leg_cost(100, VehicleConfig()) == pytest.approx(9.0 * 1.65)
    assert leg_cost(10, None, fallback_rate=0.3) == pytest.approx(3.0)


def test_return_leg_uses_side_trip_mode():
    day = [
        make_destination("a", offset=0),
        make_destination("view", offset=1, mode=TransportMode.WALKING, return_to="a"),
        make_destination("b", offset=2, mode=TransportMode.DRIVING),
    ]
    stats = compute_day_stats(day)

    # both legs are on foot, so nothing is driven or paid for
    assert stats.driving_distance == 0
    assert stats.total_cost == 0
    assert stats.walking_distance == pytest.approx(stats.total_distance)


def test_missing_coordinates_are_skipped():
    day = [
        make_destination("a", offset=0),
        make_destination("b"),
        make_destination("c", offset=1),
    ]
    stats = compute_day_stats(day)
    assert stats.total_distance == 0
    assert stats.total_travel_time == 0


def test_build_timeline_and_overall_stats(road_trip):
    trip, destinations = road_trip
    trip = trip.model_copy(
        update={"vehicle_config": VehicleConfig(fuel_consumption=8, fuel_price=2)}
    )
    days = build_timeline(trip, destinations)
    overall = compute_overall_stats(days)

    assert [day.date for day in days] == [DAY_1, DAY_2, "2025-06-03"]
    assert overall.days == 3
    # the hotel is counted on both nights
    assert overall.destinations == 6
    assert overall.distance == pytest.approx(
        sum(day.day_stats.total_distance for day in days)
    )
    assert overall.cost == pytest.approx(
        sum(day.day_stats.total_cost for day in days)
    )
    assert overall.travel_time == sum(day.day_stats.total_travel_time for day in days)
    assert overall.has_reference_budgets is True


def test_reference_budget_flag():
    hotel = make_destination(
        "h", DAY_1, category=DestinationCategory.HOTEL, budget=90.0
    )
    museum = make_destination("m", DAY_1, category=DestinationCategory.MUSEUM)

    assert destination_budget(hotel).is_reference is False
    reference = destination_budget(museum)
    assert reference.is_reference is True
    assert reference.value == DestinationCategory.MUSEUM.default_budget

    days = build_timeline(make_trip(["h"]), [hotel])
    assert compute_overall_stats(days).has_reference_budgets is False


def test_empty_trip_has_zero_stats():
    overall = compute_overall_stats(build_timeline(make_trip([]), []))
    assert overall.days == 0
    assert overall.distance == 0
    assert overall.has_reference_budgets is False
