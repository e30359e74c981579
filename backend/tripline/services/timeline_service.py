from __future__ import annotations

import asyncio
import uuid
from time import monotonic
from typing import Any, Callable, Coroutine, Iterable

from tripline.core.logging import get_logger
from tripline.models.enums import HOME_RETURN_ID, DestinationCategory
from tripline.models.schemas import (
    DateSpan,
    Destination,
    DrivingSegment,
    InsertPosition,
    OverallStats,
    TimelineDay,
    TransportInfo,
    Trip,
)
from tripline.services.drag_state import DragState, DragStateMachine
from tripline.services.errors import ReorderError
from tripline.services.persistence import PersistenceGateway
from tripline.services.reorder_resolver import (
    ReorderOutcome,
    place_after,
    resolve_drop,
    resolve_insertion,
)
from tripline.services.travel_estimator import driving_anchor_segment
from tripline.services.trip_stats import build_timeline, compute_overall_stats

TimelineListener = Callable[[list[TimelineDay], OverallStats], None]
RETURN_TAG = "return"


def driving_segments(day: TimelineDay) -> list[DrivingSegment]:
    """Driving segment shown in front of every destination of ``day``."""

    return [
        driving_anchor_segment(day.destinations, index)
        for index in range(len(day.destinations))
    ]


class TimelineService:
    """Single owner of a trip's timeline, its drag session and storage calls.

    Order changes are applied optimistically and synchronously; the matching
    gateway calls run in the background and are never rolled back.
    """

    def __init__(
        self,
        trip: Trip,
        destinations: Iterable[Destination],
        gateway: PersistenceGateway,
        *,
        listener: TimelineListener | None = None,
        restore_affordances: Callable[[], None] | None = None,
        frame_interval_ms: int | None = None,
        watchdog_seconds: float | None = None,
        clock: Callable[[], float] = monotonic,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.logger = get_logger(self.__class__.__name__)
        self._gateway = gateway
        self._listener = listener
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._background: set[asyncio.Task[Any]] = set()
        self._trip = trip
        self._destinations = {dest.id: dest for dest in destinations}
        self._days: list[TimelineDay] = []
        self._overall = OverallStats()
        self.drag = DragStateMachine(
            frame_interval_ms=frame_interval_ms,
            watchdog_seconds=watchdog_seconds,
            on_reset=restore_affordances,
            clock=clock,
        )
        self._recompute()

    @property
    def trip(self) -> Trip:
        return self._trip

    @property
    def order(self) -> list[str]:
        return list(self._trip.destinations)

    @property
    def destinations(self) -> dict[str, Destination]:
        return dict(self._destinations)

    @property
    def days(self) -> list[TimelineDay]:
        return list(self._days)

    @property
    def overall(self) -> OverallStats:
        return self._overall

    @property
    def drag_state(self) -> DragState:
        return self.drag.state

    @property
    def pending_background_tasks(self) -> int:
        return len(self._background)

    def refresh(self, trip: Trip, destinations: Iterable[Destination]) -> None:
        """Replace the snapshot after an external change (e.g. a sync)."""

        self._trip = trip
        self._destinations = {dest.id: dest for dest in destinations}
        self._recompute()

    def day(self, date: str) -> TimelineDay | None:
        for day in self._days:
            if day.date == date:
                return day
        return None

    # --- gesture input -------------------------------------------------

    def begin_drag(self, destination_id: str) -> bool:
        destination = self._destinations.get(destination_id)
        if destination is None or destination_id not in self._trip.destinations:
            self.logger.warning(
                "timeline.drag.unknown_destination",
                extra={"destination_id": destination_id},
            )
            return False
        return self.drag.begin_drag(destination)

    def hover(self, day: str, index: int) -> None:
        self.drag.hover(day, index, day_destination_ids=self._day_ids(day))

    def _day_ids(self, day: str) -> list[str]:
        current = self.day(day)
        return [dest.id for dest in current.destinations] if current else []

    def cancel(self) -> None:
        self.drag.cancel("cancelled")

    def pointer_down(self, *, inside_timeline: bool) -> None:
        self.drag.pointer_down(inside_timeline=inside_timeline)

    def handle_key(self, key: str) -> ReorderOutcome | None:
        if key == "Escape":
            self.drag.cancel("escape")
        elif key in ("ArrowUp", "ArrowDown"):
            delta = -1 if key == "ArrowUp" else 1
            day = self.drag.state.drag_over_day
            ids = self._day_ids(day) if day is not None else []
            self.drag.nudge(delta, day_destination_ids=ids)
        elif key in ("Enter", " "):
            target = self.drag.state.resolved_target
            if target is not None:
                return self.drop(*target)
        return None

    def drop(self, day: str, index: int) -> ReorderOutcome | None:
        state = self.drag.state
        if state.is_processing_drop:
            self.logger.warning("timeline.drop.ignored", extra={"reason": "in_flight"})
            return None
        dragged = state.dragged_item
        if dragged is None:
            self.drag.reset("drop_without_drag")
            return None

        target_index = index
        if state.drag_over_day == day and state.drop_target_index is not None:
            target_index = state.drop_target_index

        if not self.drag.begin_drop():
            return None
        try:
            outcome = resolve_drop(
                self._trip.destinations,
                self._destinations,
                dragged.id,
                day,
                target_index,
            )
        except ReorderError as exc:
            self.logger.error(
                "timeline.drop.failed",
                extra={"destination_id": dragged.id, "error": exc.message},
            )
            self.drag.reset("resolver_error")
            return None

        if outcome.is_noop:
            self.drag.finish_drop()
            return outcome

        self._apply_order(outcome.order, outcome.moved_id, outcome.date_change)
        self.drag.finish_drop()

        self._spawn(
            self._gateway.reorder(self._trip.id, outcome.order),
            "reorder",
        )
        if outcome.date_change is not None:
            self._spawn(
                self._gateway.update_destination_dates(
                    outcome.moved_id, outcome.date_change
                ),
                "update_destination_dates",
            )
        return outcome

    # --- inline creation -----------------------------------------------

    async def insert_destination(
        self,
        destination: Destination,
        day: str,
        position: InsertPosition = "initial",
        anchor_index: int | None = None,
    ) -> Destination:
        """Create ``destination`` on ``day`` relative to an existing stop.

        Errors propagate so the creation form can show them inline.
        """

        if destination.category.spans_multiple_days and destination.end_date > day:
            end_date = destination.end_date
        else:
            end_date = day
        draft = destination.model_copy(update={"start_date": day, "end_date": end_date})
        created = await self._gateway.create_destination(self._trip.id, draft)

        self._destinations[created.id] = created
        order = resolve_insertion(
            self._trip.destinations,
            self._destinations,
            created.id,
            day,
            position,
            anchor_index,
        )
        self._apply_order(order)
        await self._gateway.reorder(self._trip.id, order)
        self.logger.info(
            "timeline.destination.inserted",
            extra={"destination_id": created.id, "day": day, "position": position},
        )

        if created.return_destination_id:
            await self._create_return_leg(created)
        return created

    async def _create_return_leg(self, origin: Destination) -> Destination | None:
        clone = self._build_return_clone(origin)
        if clone is None:
            self.logger.warning(
                "timeline.return_leg.target_missing",
                extra={
                    "destination_id": origin.id,
                    "return_destination_id": origin.return_destination_id,
                },
            )
            return None
        created = await self._gateway.create_destination(self._trip.id, clone)
        self._destinations[created.id] = created
        order = place_after(self._trip.destinations, origin.id, created.id)
        self._apply_order(order)
        await self._gateway.reorder(self._trip.id, order)
        self.logger.info(
            "timeline.return_leg.created",
            extra={"destination_id": origin.id, "clone_id": created.id},
        )
        return created

    def _build_return_clone(self, origin: Destination) -> Destination | None:
        return_day = origin.end_date or origin.start_date
        transport = TransportInfo(mode=origin.arrival_mode, duration=0, distance=0)
        notes = f"Return from {origin.name} ({origin.arrival_mode.value})"

        if origin.return_destination_id == HOME_RETURN_ID:
            home = self._trip.home_point
            if home is None:
                return None
            return Destination(
                id=self._id_factory(),
                name=home.name,
                location=home.address,
                coordinates=home.coordinates,
                category=DestinationCategory.OTHER,
                start_date=return_day,
                end_date=return_day,
                transport_to_next=transport,
                notes=notes,
                tags=["home", RETURN_TAG],
            )

        target = self._destinations.get(origin.return_destination_id or "")
        if target is None:
            return None
        return Destination(
            id=self._id_factory(),
            name=target.name,
            location=target.location,
            coordinates=target.coordinates,
            category=target.category,
            start_date=return_day,
            end_date=return_day,
            transport_to_next=transport,
            budget=target.budget,
            notes=notes,
            tags=[*target.tags, RETURN_TAG],
        )

    # --- background persistence ----------------------------------------

    async def flush(self) -> None:
        """Wait for outstanding background gateway calls."""

        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any], operation: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            self.logger.error(
                "timeline.persistence.no_event_loop",
                extra={"operation": operation, "trip_id": self._trip.id},
            )
            return
        task = loop.create_task(coro, name=f"timeline.{operation}")
        self._background.add(task)
        task.add_done_callback(
            lambda done: self._on_background_done(done, operation)
        )

    def _on_background_done(self, task: asyncio.Task[Any], operation: str) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # the optimistic order stays in place
            self.logger.error(
                "timeline.persistence.failed",
                extra={
                    "operation": operation,
                    "trip_id": self._trip.id,
                    "error": str(exc),
                },
            )
            return
        self.logger.debug(
            "timeline.persistence.completed",
            extra={"operation": operation, "trip_id": self._trip.id},
        )

    # --- derived views -------------------------------------------------

    def _apply_order(
        self,
        order: list[str],
        moved_id: str | None = None,
        date_change: DateSpan | None = None,
    ) -> None:
        if moved_id is not None and date_change is not None:
            moved = self._destinations[moved_id]
            self._destinations = {
                **self._destinations,
                moved_id: moved.model_copy(
                    update={
                        "start_date": date_change.start_date,
                        "end_date": date_change.end_date,
                    }
                ),
            }
        self._trip = self._trip.model_copy(update={"destinations": list(order)})
        self._recompute()

    def _recompute(self) -> None:
        self._days = build_timeline(self._trip, self._destinations)
        self._overall = compute_overall_stats(self._days)
        if self._listener is not None:
            self._listener(self.days, self._overall)


__all__ = ["TimelineService", "TimelineListener", "driving_segments"]
