from __future__ import annotations

from sqlalchemy.orm import selectinload
from tripline.models.orm import TripRecord
from tripline.models.schemas import Trip

from .base import BaseRepository


class TripRepository(BaseRepository[TripRecord]):
    """Encapsulates trip level data operations."""

    model = TripRecord

    def get_with_destinations(self, trip_id: str) -> TripRecord | None:
        return (
            self.session.query(TripRecord)
            .options(selectinload(TripRecord.destinations))
            .filter(TripRecord.id == trip_id)
            .one_or_none()
        )

    def set_order(self, trip: TripRecord, order: list[str]) -> TripRecord:
        # JSON columns are replaced wholesale so the change is tracked
        trip.destination_order = list(order)
        return self._save(trip)

    @staticmethod
    def to_record(trip: Trip) -> TripRecord:
        return TripRecord(
            id=trip.id,
            name=trip.name,
            start_date=trip.start_date,
            end_date=trip.end_date,
            destination_order=list(trip.destinations),
            vehicle_config=trip.vehicle_config.model_dump()
            if trip.vehicle_config
            else None,
            home_point=trip.home_point.model_dump(mode="json")
            if trip.home_point
            else None,
        )

    @staticmethod
    def to_schema(record: TripRecord) -> Trip:
        return Trip.model_validate(
            {
                "id": record.id,
                "name": record.name,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "destinations": list(record.destination_order or []),
                "vehicle_config": record.vehicle_config,
                "home_point": record.home_point,
            }
        )
