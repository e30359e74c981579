from __future__ import annotations

from enum import StrEnum

HOME_RETURN_ID = "home"


class TransportMode(StrEnum):
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLE = "bicycle"
    PUBLIC_TRANSPORT = "public_transport"

    @property
    def is_local(self) -> bool:
        """Foot/bike legs: never cost anything, never anchor a driving route."""
        return self in (TransportMode.WALKING, TransportMode.BICYCLE)

    @property
    def is_cost_bearing(self) -> bool:
        return self in (TransportMode.DRIVING, TransportMode.PUBLIC_TRANSPORT)


class DestinationStatus(StrEnum):
    PLANNED = "planned"
    VISITED = "visited"
    SKIPPED = "skipped"


_DEFAULT_BUDGETS: dict[str, float] = {
    "hotel": 150.0,
    "restaurant": 50.0,
    "attraction": 25.0,
    "museum": 15.0,
    "nature": 0.0,
    "cultural": 20.0,
    "sports": 30.0,
    "shopping": 100.0,
    "entertainment": 40.0,
    "transport": 30.0,
    "other": 25.0,
}


class DestinationCategory(StrEnum):
    MUSEUM = "museum"
    RESTAURANT = "restaurant"
    ATTRACTION = "attraction"
    HOTEL = "hotel"
    TRANSPORT = "transport"
    NATURE = "nature"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    CULTURAL = "cultural"
    SPORTS = "sports"
    OTHER = "other"

    @property
    def spans_multiple_days(self) -> bool:
        return self is DestinationCategory.HOTEL

    @property
    def default_budget(self) -> float:
        return _DEFAULT_BUDGETS.get(self.value, 25.0)


__all__ = [
    "HOME_RETURN_ID",
    "TransportMode",
    "DestinationStatus",
    "DestinationCategory",
]
