from __future__ import annotations

# ruff: noqa: E402
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = PROJECT_ROOT / "backend"
for path in (PROJECT_ROOT, BACKEND_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest
from fastapi.testclient import TestClient
from tripline.core.app import create_app
from tripline.core.db import create_schema, dispose_engine
from tripline.core.settings import settings
from tripline.models.enums import DestinationCategory, TransportMode

from backend.tests.utils.factories import (
    DAY_1,
    DAY_2,
    DAY_3,
    make_destination,
    make_trip,
)


@pytest.fixture(scope="session", autouse=True)
def configure_test_database(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Point settings at a throwaway SQLite file and log directory."""

    workdir = tmp_path_factory.mktemp("tripline")
    original_url = settings.database_url
    original_log_dir = settings.log_directory
    settings.database_url = f"sqlite:///{workdir / 'tripline_test.db'}"
    settings.log_directory = str(workdir / "logs")
    dispose_engine()
    create_schema()
    yield settings.database_url
    dispose_engine()
    settings.database_url = original_url
    settings.log_directory = original_log_dir


@pytest.fixture()
def client(configure_test_database: str) -> TestClient:
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def road_trip():
    """Two stops on day one, a hotel over two nights, one stop on day three."""

    destinations = [
        make_destination("a", DAY_1, offset=0, mode=TransportMode.DRIVING),
        make_destination("b", DAY_1, offset=10, mode=TransportMode.DRIVING),
        make_destination(
            "h",
            DAY_1,
            offset=12,
            mode=TransportMode.DRIVING,
            category=DestinationCategory.HOTEL,
            end_date=DAY_2,
            budget=120.0,
        ),
        make_destination("c", DAY_2, offset=20, mode=TransportMode.DRIVING),
        make_destination("d", DAY_3, offset=40, mode=TransportMode.DRIVING),
    ]
    trip = make_trip([dest.id for dest in destinations])
    return trip, destinations
