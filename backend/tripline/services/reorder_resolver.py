"""Translate per-day drop coordinates into a new flat destination order.

The per-day timeline is derived from ``Trip.destinations``. A gesture names a
day and a position inside that day; the resolver maps that position onto the
flat index of the matching rendered member, which turns ``(day, index)`` into
a global insertion index. Members of a day need not be contiguous in the flat
order, a hotel spanning several nights sits in front of every later day. The
input order is never mutated, every result is a fresh list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from tripline.core.logging import get_logger
from tripline.models.schemas import DateSpan, Destination, InsertPosition
from tripline.services.day_grouper import (
    day_destination_ids,
    primary_day,
)
from tripline.services.errors import DRAGGED_ITEM_MISSING, UNKNOWN_ANCHOR, ReorderError

logger = get_logger(__name__)


@dataclass(frozen=True)
class DaySlots:
    """Flat indexes of the members rendered on one day, in rendered order.

    ``fallback`` is where the day would start when it has no members yet.
    """

    positions: tuple[int, ...]
    fallback: int

    @property
    def length(self) -> int:
        return len(self.positions)

    def global_index(self, offset: int) -> int:
        """Flat index in front of the ``offset``-th member, or behind the last one."""

        if not self.positions:
            return self.fallback
        if offset < len(self.positions):
            return self.positions[offset]
        return self.positions[-1] + 1


@dataclass(frozen=True)
class ReorderOutcome:
    order: list[str]
    moved_id: str
    original_index: int
    global_index: int
    is_cross_day: bool
    date_change: DateSpan | None = None

    @property
    def is_noop(self) -> bool:
        return self.global_index == self.original_index and self.date_change is None


def find_day_slots(
    order: Sequence[str], destinations: Mapping[str, Destination], day: str
) -> DaySlots:
    """Map every member of ``day`` as rendered onto its index in ``order``.

    Without members, the fallback is placed after the last member that belongs
    to an earlier day so the flat order stays chronological.
    """

    flat_index = {destination_id: idx for idx, destination_id in enumerate(order)}
    members = day_destination_ids(order, destinations, day)
    positions = tuple(flat_index[destination_id] for destination_id in members)

    fallback = 0
    if not positions:
        for idx, destination_id in enumerate(order):
            destination = destinations.get(destination_id)
            first_day = primary_day(destination) if destination is not None else None
            if first_day is not None and first_day < day:
                fallback = idx + 1
    return DaySlots(positions=positions, fallback=fallback)


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def moved_date_span(destination: Destination, target_day: str) -> DateSpan:
    """Dates after a cross-day move; multi-day stays keep their check-out."""

    if destination.category.spans_multiple_days:
        end_date = destination.end_date or target_day
    else:
        end_date = target_day
    return DateSpan(start_date=target_day, end_date=end_date)


def resolve_drop(
    order: Sequence[str],
    destinations: Mapping[str, Destination],
    dragged_id: str,
    target_day: str,
    target_index: int,
) -> ReorderOutcome:
    """Resolve a drop of ``dragged_id`` at ``target_index`` within ``target_day``.

    ``target_index`` is the resolution index carried by the drag state, not
    the visual highlight index.
    """

    dragged = destinations.get(dragged_id)
    if dragged is None or dragged_id not in order:
        raise ReorderError("dragged destination not found", code=DRAGGED_ITEM_MISSING)

    original_index = list(order).index(dragged_id)
    source_day = dragged.start_date
    is_cross_day = source_day != target_day

    # the pre-removal position of the dragged item inside its own day
    day_position = -1
    if not is_cross_day:
        same_day = day_destination_ids(order, destinations, target_day)
        if dragged_id in same_day:
            day_position = same_day.index(dragged_id)

    working = [destination_id for destination_id in order if destination_id != dragged_id]
    slots = find_day_slots(working, destinations, target_day)

    adjusted = target_index
    if not is_cross_day and day_position != -1 and target_index > day_position:
        adjusted = target_index - 1
    adjusted = _clamp(adjusted, 0, slots.length)
    global_index = slots.global_index(adjusted)

    date_change = moved_date_span(dragged, target_day) if is_cross_day else None

    if global_index == original_index and date_change is None:
        logger.debug(
            "timeline.drop.noop",
            extra={"destination_id": dragged_id, "target_day": target_day},
        )
        return ReorderOutcome(
            order=list(order),
            moved_id=dragged_id,
            original_index=original_index,
            global_index=global_index,
            is_cross_day=False,
        )

    working.insert(global_index, dragged_id)
    logger.info(
        "timeline.drop.resolved",
        extra={
            "destination_id": dragged_id,
            "source_day": source_day,
            "target_day": target_day,
            "target_index": target_index,
            "day_slots": slots.length,
            "global_index": global_index,
        },
    )
    return ReorderOutcome(
        order=working,
        moved_id=dragged_id,
        original_index=original_index,
        global_index=global_index,
        is_cross_day=is_cross_day,
        date_change=date_change,
    )


def resolve_insertion(
    order: Sequence[str],
    destinations: Mapping[str, Destination],
    new_id: str,
    day: str,
    position: InsertPosition = "initial",
    anchor_index: int | None = None,
) -> list[str]:
    """Place a freshly created destination inside ``day`` without touching other days.

    ``anchor_index`` is relative to the day as rendered: ``before`` inserts at
    the anchor, ``after`` right behind it, ``initial`` (or no anchor) appends to
    the day.
    """

    working = [destination_id for destination_id in order if destination_id != new_id]
    if not working:
        return [new_id]

    slots = find_day_slots(working, destinations, day)
    if position == "before" and anchor_index is not None:
        offset = anchor_index
    elif position == "after" and anchor_index is not None:
        offset = anchor_index + 1
    else:
        offset = slots.length
    offset = _clamp(offset, 0, slots.length)
    working.insert(slots.global_index(offset), new_id)
    return working


def place_after(order: Sequence[str], anchor_id: str, new_id: str) -> list[str]:
    """Put ``new_id`` directly behind ``anchor_id`` (used for return legs)."""

    working = [destination_id for destination_id in order if destination_id != new_id]
    if anchor_id not in working:
        raise ReorderError("anchor destination not found", code=UNKNOWN_ANCHOR)
    working.insert(working.index(anchor_id) + 1, new_id)
    return working


__all__ = [
    "DaySlots",
    "ReorderOutcome",
    "find_day_slots",
    "moved_date_span",
    "resolve_drop",
    "resolve_insertion",
    "place_after",
]
