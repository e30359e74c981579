from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as dt_date
from datetime import timedelta
from typing import Iterable, Mapping, Sequence

from tripline.core.logging import get_logger
from tripline.models.schemas import Destination

logger = get_logger(__name__)


@dataclass(slots=True)
class DayBucket:
    date: str
    destinations: list[Destination] = field(default_factory=list)

    @property
    def destination_ids(self) -> list[str]:
        return [dest.id for dest in self.destinations]


def _parse_iso(value: str) -> dt_date | None:
    try:
        return dt_date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def iter_dates(start: dt_date, end: dt_date) -> Iterable[str]:
    current = start
    while current <= end:
        yield current.isoformat()
        current += timedelta(days=1)


def resolve_date_buckets(destination: Destination) -> list[str]:
    """Return every day key the destination occupies on the timeline."""

    start_raw = (destination.start_date or "").strip()
    if not start_raw:
        logger.warning(
            "timeline.group.empty_start_date",
            extra={"destination_id": destination.id},
        )
        return []

    end_raw = (destination.end_date or "").strip()
    if not destination.category.spans_multiple_days or not end_raw or end_raw == start_raw:
        return [start_raw]

    start = _parse_iso(start_raw)
    end = _parse_iso(end_raw)
    if start is None or end is None:
        logger.warning(
            "timeline.group.unparseable_range",
            extra={
                "destination_id": destination.id,
                "start_date": start_raw,
                "end_date": end_raw,
            },
        )
        return [start_raw]
    if end < start:
        logger.warning(
            "timeline.group.inverted_range",
            extra={
                "destination_id": destination.id,
                "start_date": start_raw,
                "end_date": end_raw,
            },
        )
        return [start_raw]
    return list(iter_dates(start, end))


def primary_day(destination: Destination) -> str | None:
    buckets = resolve_date_buckets(destination)
    return buckets[0] if buckets else None


def ordered_destinations(
    order: Sequence[str], destinations: Mapping[str, Destination]
) -> list[Destination]:
    """Destinations in flat-order sequence; ids without a record are dropped."""

    resolved: list[Destination] = []
    for destination_id in order:
        destination = destinations.get(destination_id)
        if destination is None:
            logger.warning(
                "timeline.group.unknown_destination",
                extra={"destination_id": destination_id},
            )
            continue
        resolved.append(destination)
    return resolved


def group_days(
    order: Sequence[str], destinations: Mapping[str, Destination]
) -> list[DayBucket]:
    """Derive the per-day view from the flat order.

    Within a day, destinations follow their index in ``order``; day buckets are
    sorted by date string. Malformed dates degrade to a single bucket or are
    skipped, grouping itself never raises.
    """

    positions = {destination_id: idx for idx, destination_id in enumerate(order)}
    grouped: dict[str, list[Destination]] = {}
    seen: dict[str, set[str]] = {}

    for destination in ordered_destinations(order, destinations):
        for day in resolve_date_buckets(destination):
            members = seen.setdefault(day, set())
            if destination.id in members:
                continue
            members.add(destination.id)
            grouped.setdefault(day, []).append(destination)

    buckets: list[DayBucket] = []
    for day in sorted(grouped):
        members = sorted(grouped[day], key=lambda dest: positions[dest.id])
        buckets.append(DayBucket(date=day, destinations=members))
    return buckets


def day_destination_ids(
    order: Sequence[str], destinations: Mapping[str, Destination], day: str
) -> list[str]:
    """Ids rendered on ``day``, in the order the timeline shows them."""

    for bucket in group_days(order, destinations):
        if bucket.date == day:
            return bucket.destination_ids
    return []


__all__ = [
    "DayBucket",
    "iter_dates",
    "resolve_date_buckets",
    "primary_day",
    "ordered_destinations",
    "group_days",
    "day_destination_ids",
]
