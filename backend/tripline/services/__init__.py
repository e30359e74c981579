from .persistence import (
    InMemoryPersistenceGateway,
    PersistenceGateway,
    SqlPersistenceGateway,
)
from .timeline_service import TimelineService

__all__ = [
    "InMemoryPersistenceGateway",
    "PersistenceGateway",
    "SqlPersistenceGateway",
    "TimelineService",
]
