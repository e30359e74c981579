from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from tripline.models.schemas import (
    Destination,
    DropRequest,
    InsertRequest,
    TimelineDay,
    TimelineRequest,
    TravelEstimateRequest,
    Trip,
)
from tripline.services.errors import TimelineError
from tripline.services.persistence import InMemoryPersistenceGateway
from tripline.services.reorder_resolver import ReorderOutcome, resolve_drop
from tripline.services.timeline_service import TimelineService, driving_segments
from tripline.services.travel_estimator import estimate_travel, travel_legs
from tripline.services.trip_stats import build_timeline, compute_overall_stats
from tripline.utils.responses import error_response, success_response

router = APIRouter(prefix="/api", tags=["timeline"])


def _handle_service_error(exc: TimelineError) -> JSONResponse:
    payload = error_response(exc.message, code=exc.code)
    return JSONResponse(status_code=400, content=payload)


def _serialize_day(day: TimelineDay) -> dict:
    payload = day.model_dump(mode="json")
    payload["driving_segments"] = driving_segments(day)
    payload["travel_legs"] = travel_legs(day.destinations)
    return payload


def timeline_payload(trip: Trip, destinations: dict[str, Destination]) -> dict:
    days = build_timeline(trip, destinations)
    overall = compute_overall_stats(days)
    return {
        "order": list(trip.destinations),
        "days": [_serialize_day(day) for day in days],
        "overall": overall,
    }


def apply_drop_outcome(
    trip: Trip, destinations: dict[str, Destination], outcome: ReorderOutcome
) -> Trip:
    """Reflect ``outcome`` in ``destinations`` and return the reordered trip."""

    if outcome.date_change is not None:
        moved = destinations[outcome.moved_id]
        destinations[outcome.moved_id] = moved.model_copy(
            update=outcome.date_change.model_dump()
        )
    return trip.model_copy(update={"destinations": outcome.order})


def drop_payload(
    trip: Trip, destinations: dict[str, Destination], outcome: ReorderOutcome
) -> dict:
    data = timeline_payload(trip, destinations)
    data.update(
        {
            "moved_id": outcome.moved_id,
            "noop": outcome.is_noop,
            "is_cross_day": outcome.is_cross_day,
            "date_change": outcome.date_change,
        }
    )
    return data


@router.post(
    "/timeline",
    summary="Build timeline",
    description="Group a trip's destinations by day and attach travel statistics.",
)
def build_trip_timeline(payload: TimelineRequest) -> dict:
    destinations = {dest.id: dest for dest in payload.destinations}
    return success_response(timeline_payload(payload.trip, destinations))


@router.post(
    "/timeline/drop",
    summary="Resolve drop",
    description="Move one destination to a day and position and return the new order.",
)
def drop_destination(payload: DropRequest) -> dict:
    destinations = {dest.id: dest for dest in payload.destinations}
    try:
        outcome = resolve_drop(
            payload.trip.destinations,
            destinations,
            payload.destination_id,
            payload.target_day,
            payload.target_index,
        )
    except TimelineError as exc:
        return _handle_service_error(exc)

    trip = apply_drop_outcome(payload.trip, destinations, outcome)
    return success_response(drop_payload(trip, destinations, outcome))


@router.post(
    "/timeline/insert",
    summary="Insert destination",
    description=(
        "Place a new destination before or after an existing stop of a day; "
        "a return destination is added right behind it when requested."
    ),
)
async def insert_destination(payload: InsertRequest) -> dict:
    gateway = InMemoryPersistenceGateway(payload.trip, payload.destinations)
    service = TimelineService(payload.trip, payload.destinations, gateway)
    try:
        created = await service.insert_destination(
            payload.destination,
            payload.day,
            payload.position,
            payload.anchor_index,
        )
    except TimelineError as exc:
        return _handle_service_error(exc)

    data = timeline_payload(service.trip, service.destinations)
    data["created"] = created
    return success_response(data)


@router.post(
    "/travel/estimate",
    summary="Estimate travel",
    description="Straight-line distance and travel time between two points.",
)
def estimate_leg_travel(payload: TravelEstimateRequest) -> dict:
    estimate = estimate_travel(payload.origin, payload.destination, payload.mode)
    return success_response(estimate)
