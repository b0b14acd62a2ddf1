import copy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_session_factory, make_session_factory, register_sqlite_functions
from app.models import error_log, vehicle  # noqa: F401
from app.storage.memory import InMemoryVehicleStore
from app.storage.sql import SqlVehicleStore
from main import app


# ---------------------------------------------------------------------------
# Sample records reused across tests (wire-shaped, as the dataset columns)
# ---------------------------------------------------------------------------

SAMPLE_VEHICLES = [
    {
        "Brand": "Tesla", "Model": "Model 3 Long Range Dual Motor", "AccelSec": 4.6,
        "TopSpeed_KmH": 233, "Range_Km": 450, "Efficiency_WhKm": 161, "FastCharge_KmH": 940,
        "RapidCharge": "Yes", "PowerTrain": "AWD", "PlugType": "Type 2 CCS",
        "BodyStyle": "Sedan", "Segment": "D", "Seats": 5, "PriceEuro": 55480, "Date": "8/24/16",
    },
    {
        "Brand": "Volkswagen", "Model": "ID.3 Pure", "AccelSec": 10.0,
        "TopSpeed_KmH": 160, "Range_Km": 270, "Efficiency_WhKm": 167, "FastCharge_KmH": 250,
        "RapidCharge": "Yes", "PowerTrain": "RWD", "PlugType": "Type 2 CCS",
        "BodyStyle": "Hatchback", "Segment": "C", "Seats": 5, "PriceEuro": 30000, "Date": "9/13/16",
    },
    {
        "Brand": "BMW", "Model": "i4", "AccelSec": 4.0,
        "TopSpeed_KmH": 200, "Range_Km": 450, "Efficiency_WhKm": 178, "FastCharge_KmH": 650,
        "RapidCharge": "Yes", "PowerTrain": "RWD", "PlugType": "Type 2 CCS",
        "BodyStyle": "Sedan", "Segment": "D", "Seats": 5, "PriceEuro": 65000, "Date": "",
    },
    {
        "Brand": "BMW", "Model": "iX3", "AccelSec": 6.8,
        "TopSpeed_KmH": 180, "Range_Km": 360, "Efficiency_WhKm": 206, "FastCharge_KmH": 560,
        "RapidCharge": "Yes", "PowerTrain": "RWD", "PlugType": "Type 2 CCS",
        "BodyStyle": "SUV", "Segment": "D", "Seats": 5, "PriceEuro": 68040, "Date": None,
    },
    {
        "Brand": "Renault", "Model": "Twizy 45", "AccelSec": None,
        "TopSpeed_KmH": 45, "Range_Km": 80, "Efficiency_WhKm": 101, "FastCharge_KmH": None,
        "RapidCharge": "No", "PowerTrain": "RWD", "PlugType": "Type 1 CHAdeMO",
        "BodyStyle": "Hatchback", "Segment": "A", "Seats": 2, "PriceEuro": 11000, "Date": "1/2/17",
    },
]


@pytest.fixture
def sample_vehicles():
    return copy.deepcopy(SAMPLE_VEHICLES)


@pytest.fixture
def memory_store(sample_vehicles):
    return InMemoryVehicleStore(sample_vehicles)


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    Base.metadata.create_all(bind=engine)
    factory: sessionmaker = make_session_factory(engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db, sample_vehicles):
    SqlVehicleStore(db).insert_many(sample_vehicles)
    return db


@pytest.fixture
def client(session_factory):
    # The lifespan is not run: the test database replaces the real one
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client, seeded_db):
    return client
