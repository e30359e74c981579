from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from tripline.models.enums import (
    DestinationCategory,
    DestinationStatus,
    TransportMode,
)

InsertPosition = Literal["before", "after", "initial"]


class ORMBaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class TransportInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: TransportMode = TransportMode.DRIVING
    duration: int | None = Field(default=None, ge=0, description="minutes")
    distance: float | None = Field(default=None, ge=0, description="meters")


class Destination(ORMBaseSchema):
    """A single stop of a trip.

    ``transport_to_next`` records how this destination is reached; a missing
    value means driving. Instances are immutable, edits go through
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    location: str | None = None
    coordinates: Coordinates | None = None
    category: DestinationCategory = DestinationCategory.ATTRACTION
    status: DestinationStatus = DestinationStatus.PLANNED
    start_date: str = ""
    end_date: str = ""
    transport_to_next: TransportInfo | None = None
    return_destination_id: str | None = None
    budget: float | None = None
    actual_cost: float | None = None
    notes: str = ""
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def default_end_date(cls, data: Any) -> Any:
        if isinstance(data, dict):
            start = data.get("start_date") or ""
            if start and not data.get("end_date"):
                return {**data, "end_date": start}
        return data

    @property
    def arrival_mode(self) -> TransportMode:
        if self.transport_to_next is None:
            return TransportMode.DRIVING
        return self.transport_to_next.mode


class VehicleConfig(BaseModel):
    fuel_consumption: float | None = Field(
        default=None, ge=0, description="litres per 100 km"
    )
    fuel_price: float | None = Field(default=None, ge=0, description="per litre")


class HomePoint(BaseModel):
    name: str
    address: str | None = None
    coordinates: Coordinates | None = None


class Trip(ORMBaseSchema):
    id: str
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    destinations: list[str] = Field(default_factory=list)
    vehicle_config: VehicleConfig | None = None
    home_point: HomePoint | None = None

    @model_validator(mode="after")
    def validate_unique_destinations(self) -> "Trip":
        if len(set(self.destinations)) != len(self.destinations):
            msg = "destinations must not contain duplicate ids"
            raise ValueError(msg)
        return self


class DateSpan(BaseModel):
    start_date: str
    end_date: str


class TravelEstimate(BaseModel):
    distance_km: float
    minutes: int
    mode: TransportMode


class TravelLeg(BaseModel):
    from_destination_id: str
    to_destination_id: str
    mode: TransportMode
    minutes: int
    # None when either end has no coordinates
    distance_km: float | None = None


class DrivingSegment(BaseModel):
    distance_km: float = 0.0
    minutes: int = 0
    from_destination_id: str | None = None


class DayStats(BaseModel):
    total_distance: float = 0.0
    total_travel_time: int = 0
    total_cost: float = 0.0
    driving_distance: float = 0.0
    walking_distance: float = 0.0
    biking_distance: float = 0.0


class TimelineDay(BaseModel):
    date: str
    destinations: list[Destination] = Field(default_factory=list)
    day_stats: DayStats = Field(default_factory=DayStats)


class OverallStats(BaseModel):
    destinations: int = 0
    days: int = 0
    distance: float = 0.0
    travel_time: int = 0
    cost: float = 0.0
    driving_distance: float = 0.0
    walking_distance: float = 0.0
    biking_distance: float = 0.0
    has_reference_budgets: bool = False


class TimelineRequest(BaseModel):
    trip: Trip
    destinations: list[Destination] = Field(default_factory=list)


class DropTarget(BaseModel):
    destination_id: str
    target_day: str
    target_index: int = Field(ge=0)


class DropRequest(TimelineRequest, DropTarget):
    pass


class InsertTarget(BaseModel):
    destination: Destination
    day: str
    position: InsertPosition = "initial"
    anchor_index: int | None = Field(default=None, ge=0)


class InsertRequest(TimelineRequest, InsertTarget):
    pass


class TravelEstimateRequest(BaseModel):
    origin: Coordinates
    destination: Coordinates
    mode: TransportMode = TransportMode.DRIVING


__all__ = [
    "InsertPosition",
    "Coordinates",
    "TransportInfo",
    "Destination",
    "VehicleConfig",
    "HomePoint",
    "Trip",
    "DateSpan",
    "TravelEstimate",
    "TravelLeg",
    "DrivingSegment",
    "DayStats",
    "TimelineDay",
    "OverallStats",
    "TimelineRequest",
    "DropTarget",
    "DropRequest",
    "InsertTarget",
    "InsertRequest",
    "TravelEstimateRequest",
]
