from __future__ import annotations

from typing import Protocol, runtime_checkable

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from tripline.core.db import session_scope
from tripline.core.logging import get_logger
from tripline.models.schemas import DateSpan, Destination, Trip
from tripline.repositories import DestinationRepository, TripRepository
from tripline.services.errors import PERSISTENCE_FAILED, TRIP_NOT_FOUND, PersistenceError


@runtime_checkable
class PersistenceGateway(Protocol):
    """Storage boundary of the timeline engine.

    Every call is asynchronous and may fail on its own; the engine never waits
    for one call before issuing the next.
    """

    async def reorder(self, trip_id: str, order: list[str]) -> None: ...

    async def update_destination_dates(
        self, destination_id: str, span: DateSpan
    ) -> None: ...

    async def create_destination(
        self, trip_id: str, destination: Destination
    ) -> Destination: ...


class InMemoryPersistenceGateway:
    """Process-local gateway, handy for embedding and tests."""

    def __init__(
        self,
        trip: Trip | None = None,
        destinations: list[Destination] | None = None,
    ) -> None:
        self.trips: dict[str, Trip] = {}
        self.destinations: dict[str, Destination] = {}
        self.calls: list[tuple[str, object]] = []
        if trip is not None:
            self.trips[trip.id] = trip
        for destination in destinations or []:
            self.destinations[destination.id] = destination

    async def reorder(self, trip_id: str, order: list[str]) -> None:
        trip = self.trips.get(trip_id)
        if trip is None:
            raise PersistenceError("trip not found", code=TRIP_NOT_FOUND)
        self.trips[trip_id] = trip.model_copy(update={"destinations": list(order)})
        self.calls.append(("reorder", list(order)))

    async def update_destination_dates(
        self, destination_id: str, span: DateSpan
    ) -> None:
        destination = self.destinations.get(destination_id)
        if destination is None:
            raise PersistenceError("destination not found", code=PERSISTENCE_FAILED)
        self.destinations[destination_id] = destination.model_copy(
            update={"start_date": span.start_date, "end_date": span.end_date}
        )
        self.calls.append(("update_destination_dates", (destination_id, span)))

    async def create_destination(
        self, trip_id: str, destination: Destination
    ) -> Destination:
        trip = self.trips.get(trip_id)
        if trip is None:
            raise PersistenceError("trip not found", code=TRIP_NOT_FOUND)
        self.destinations[destination.id] = destination
        self.trips[trip_id] = trip.model_copy(
            update={"destinations": [*trip.destinations, destination.id]}
        )
        self.calls.append(("create_destination", destination.id))
        return destination


class SqlPersistenceGateway:
    """SQLAlchemy-backed gateway; blocking work runs in a worker thread."""

    def __init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)

    async def save_trip(self, trip: Trip, destinations: list[Destination]) -> None:
        def _run() -> None:
            with session_scope() as session:
                trip_repo = TripRepository(session)
                destination_repo = DestinationRepository(session)
                trip_repo.add(TripRepository.to_record(trip))
                for destination in destinations:
                    destination_repo.add(
                        DestinationRepository.to_record(trip.id, destination)
                    )

        await self._run_sync(_run, "trip.saved", trip_id=trip.id)

    async def load_trip(self, trip_id: str) -> tuple[Trip, list[Destination]]:
        def _run() -> tuple[Trip, list[Destination]]:
            with session_scope() as session:
                record = TripRepository(session).get_with_destinations(trip_id)
                if record is None:
                    raise PersistenceError("trip not found", code=TRIP_NOT_FOUND)
                trip = TripRepository.to_schema(record)
                destinations = [
                    DestinationRepository.to_schema(item) for item in record.destinations
                ]
                return trip, destinations

        return await self._run_sync(_run, "trip.loaded", trip_id=trip_id)

    async def reorder(self, trip_id: str, order: list[str]) -> None:
        def _run() -> None:
            with session_scope() as session:
                repo = TripRepository(session)
                record = repo.get(trip_id)
                if record is None:
                    raise PersistenceError("trip not found", code=TRIP_NOT_FOUND)
                repo.set_order(record, order)

        await self._run_sync(_run, "trip.reordered", trip_id=trip_id)

    async def update_destination_dates(
        self, destination_id: str, span: DateSpan
    ) -> None:
        def _run() -> None:
            with session_scope() as session:
                repo = DestinationRepository(session)
                record = repo.get(destination_id)
                if record is None:
                    raise PersistenceError(
                        "destination not found", code=PERSISTENCE_FAILED
                    )
                repo.update_dates(
                    record, start_date=span.start_date, end_date=span.end_date
                )

        await self._run_sync(
            _run, "destination.dates_updated", destination_id=destination_id
        )

    async def create_destination(
        self, trip_id: str, destination: Destination
    ) -> Destination:
        def _run() -> Destination:
            with session_scope() as session:
                trip_repo = TripRepository(session)
                trip = trip_repo.get(trip_id)
                if trip is None:
                    raise PersistenceError("trip not found", code=TRIP_NOT_FOUND)
                record = DestinationRepository(session).add(
                    DestinationRepository.to_record(trip_id, destination)
                )
                trip_repo.set_order(
                    trip, [*(trip.destination_order or []), destination.id]
                )
                return DestinationRepository.to_schema(record)

        return await self._run_sync(
            _run, "destination.created", destination_id=destination.id
        )

    async def _run_sync(self, func, event: str, **context):
        try:
            result = await to_thread.run_sync(func)
        except SQLAlchemyError as exc:
            self.logger.warning(f"{event}.failed", extra={**context, "error": str(exc)})
            raise PersistenceError(str(exc), code=PERSISTENCE_FAILED) from exc
        self.logger.info(event, extra=context)
        return result


__all__ = [
    "PersistenceGateway",
    "InMemoryPersistenceGateway",
    "SqlPersistenceGateway",
]
