from __future__ import annotations

from tripline.models.orm import DestinationRecord
from tripline.models.schemas import Destination

from .base import BaseRepository


class DestinationRepository(BaseRepository[DestinationRecord]):
    model = DestinationRecord

    def update_dates(
        self, record: DestinationRecord, *, start_date: str, end_date: str
    ) -> DestinationRecord:
        record.start_date = start_date
        record.end_date = end_date
        return self._save(record)

    @staticmethod
    def to_record(trip_id: str, destination: Destination) -> DestinationRecord:
        coordinates = destination.coordinates
        transport = destination.transport_to_next
        return DestinationRecord(
            id=destination.id,
            trip_id=trip_id,
            name=destination.name,
            location=destination.location,
            lat=coordinates.lat if coordinates else None,
            lng=coordinates.lng if coordinates else None,
            category=destination.category,
            status=destination.status,
            start_date=destination.start_date,
            end_date=destination.end_date,
            transport_mode=transport.mode if transport else None,
            transport_duration=transport.duration if transport else None,
            transport_distance=transport.distance if transport else None,
            return_destination_id=destination.return_destination_id,
            budget=destination.budget,
            actual_cost=destination.actual_cost,
            notes=destination.notes,
            tags=list(destination.tags),
        )

    @staticmethod
    def to_schema(record: DestinationRecord) -> Destination:
        coordinates = None
        if record.lat is not None and record.lng is not None:
            coordinates = {"lat": record.lat, "lng": record.lng}
        transport = None
        if record.transport_mode is not None:
            transport = {
                "mode": record.transport_mode,
                "duration": record.transport_duration,
                "distance": record.transport_distance,
            }
        return Destination.model_validate(
            {
                "id": record.id,
                "name": record.name,
                "location": record.location,
                "coordinates": coordinates,
                "category": record.category,
                "status": record.status,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "transport_to_next": transport,
                "return_destination_id": record.return_destination_id,
                "budget": record.budget,
                "actual_cost": record.actual_cost,
                "notes": record.notes or "",
                "tags": list(record.tags or []),
            }
        )
