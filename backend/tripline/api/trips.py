from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from tripline.api.timeline import apply_drop_outcome, drop_payload, timeline_payload
from tripline.models.schemas import DropTarget, InsertTarget, TimelineRequest
from tripline.services.errors import TimelineError
from tripline.services.persistence import SqlPersistenceGateway
from tripline.services.reorder_resolver import resolve_drop
from tripline.services.timeline_service import TimelineService
from tripline.utils.responses import error_response, success_response

router = APIRouter(prefix="/api", tags=["trips"])


def _gateway() -> SqlPersistenceGateway:
    return SqlPersistenceGateway()


def _handle_service_error(exc: TimelineError) -> JSONResponse:
    payload = error_response(exc.message, code=exc.code)
    return JSONResponse(status_code=400, content=payload)


@router.post(
    "/trips",
    summary="Store trip",
    description="Persist a trip with its destinations and return its timeline.",
)
async def store_trip(payload: TimelineRequest) -> dict:
    gateway = _gateway()
    try:
        await gateway.save_trip(payload.trip, payload.destinations)
    except TimelineError as exc:
        return _handle_service_error(exc)
    destinations = {dest.id: dest for dest in payload.destinations}
    return success_response(timeline_payload(payload.trip, destinations))


@router.get(
    "/trips/{trip_id}/timeline",
    summary="Stored timeline",
    description="Load a stored trip and group its destinations by day.",
)
async def get_stored_timeline(trip_id: str) -> dict:
    try:
        trip, destinations = await _gateway().load_trip(trip_id)
    except TimelineError as exc:
        return _handle_service_error(exc)
    mapping = {dest.id: dest for dest in destinations}
    return success_response(timeline_payload(trip, mapping))


@router.post(
    "/trips/{trip_id}/drop",
    summary="Drop stored destination",
    description="Move a destination of a stored trip and persist the new order.",
)
async def drop_stored_destination(trip_id: str, payload: DropTarget) -> dict:
    gateway = _gateway()
    try:
        trip, destinations = await gateway.load_trip(trip_id)
        mapping = {dest.id: dest for dest in destinations}
        outcome = resolve_drop(
            trip.destinations,
            mapping,
            payload.destination_id,
            payload.target_day,
            payload.target_index,
        )
        if not outcome.is_noop:
            await gateway.reorder(trip_id, outcome.order)
        if outcome.date_change is not None:
            await gateway.update_destination_dates(
                outcome.moved_id, outcome.date_change
            )
    except TimelineError as exc:
        return _handle_service_error(exc)

    trip = apply_drop_outcome(trip, mapping, outcome)
    return success_response(drop_payload(trip, mapping, outcome))


@router.post(
    "/trips/{trip_id}/destinations",
    summary="Insert stored destination",
    description=(
        "Create a destination inside a stored trip relative to an existing stop; "
        "a requested return destination is stored right behind it."
    ),
)
async def insert_stored_destination(trip_id: str, payload: InsertTarget) -> dict:
    gateway = _gateway()
    try:
        trip, destinations = await gateway.load_trip(trip_id)
        service = TimelineService(trip, destinations, gateway)
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
