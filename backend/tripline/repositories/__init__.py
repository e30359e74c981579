from .destination_repository import DestinationRepository
from .trip_repository import TripRepository

__all__ = [
    "TripRepository",
    "DestinationRepository",
]
