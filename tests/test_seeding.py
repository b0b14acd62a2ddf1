import pytest
from unittest.mock import patch
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError

from app.database import Base, init_db, make_session_factory
from app.models.vehicle import Vehicle, coerce_field_value
from app.schemas.vehicle import VehicleCreate
from app.services.seeding import load_csv
from scripts.seed import main as seed_main

CSV_CONTENT = (
    "Brand,Model,AccelSec,TopSpeed_KmH,Range_Km,Efficiency_WhKm,FastCharge_KmH,RapidCharge,"
    "PowerTrain,PlugType,BodyStyle,Segment,Seats,PriceEuro,Date\n"
    "Tesla ,Model 3 Long Range Dual Motor,4.6,233,450,161,940,Yes,AWD,Type 2 CCS,Sedan,D,5,55480,8/24/16\n"
    "Renault,Twizy 45,,45,80,101,-,No,RWD,Type 1 CHAdeMO,Hatchback,A,2,11000,1/2/17\n"
)


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "ElectricCarData.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    return path


class TestVehicleCreate:

    def test_numeric_strings_are_converted(self):
        vehicle = VehicleCreate.model_validate({"PriceEuro": "55480", "AccelSec": " 4.6 ", "Seats": 5.0})
        assert vehicle.price_euro == 55480
        assert vehicle.accel_sec == 4.6
        assert vehicle.seats == 5

    @pytest.mark.parametrize("raw", ["-", "", "n/a", "nan", None, True])
    def test_unparseable_numbers_become_null(self, raw):
        assert VehicleCreate.model_validate({"FastCharge_KmH": raw}).fast_charge_kmh is None

    def test_text_is_trimmed(self):
        assert VehicleCreate.model_validate({"Brand": " Tesla "}).brand == "Tesla"

    def test_dumps_wire_names(self):
        dumped = VehicleCreate(Brand="Kia").model_dump(by_alias=True)
        assert dumped["Brand"] == "Kia"
        assert "PriceEuro" in dumped


class TestCoerceFieldValue:

    def test_text_field_passes_through(self):
        assert coerce_field_value("Brand", "BMW") == "BMW"

    def test_numbers(self):
        assert coerce_field_value("PriceEuro", "30000") == 30000
        assert coerce_field_value("PriceEuro", "30000.0") == 30000
        assert coerce_field_value("AccelSec", "4.6") == 4.6

    @pytest.mark.parametrize("field, raw", [("PriceEuro", "abc"), ("Seats", "4.5"), ("AccelSec", "inf")])
    def test_rejects_values_that_do_not_fit(self, field, raw):
        with pytest.raises(ValueError):
            coerce_field_value(field, raw)


def test_load_csv(csv_file):
    records = load_csv(csv_file)
    assert len(records) == 2
    tesla, renault = records
    assert tesla["Brand"] == "Tesla"
    assert tesla["TopSpeed_KmH"] == 233
    assert renault["AccelSec"] is None
    assert renault["FastCharge_KmH"] is None
    assert renault["PlugType"] == "Type 1 CHAdeMO"


def test_seed_script_replaces_table(csv_file, tmp_path):
    database_url = f"sqlite:///{tmp_path / 'seed.db'}"

    assert seed_main([str(csv_file), "--database-url", database_url]) == 0
    assert seed_main([str(csv_file), "--database-url", database_url]) == 0

    engine = create_engine(database_url)
    try:
        with make_session_factory(engine)() as db:
            assert db.query(Vehicle).count() == 2
    finally:
        engine.dispose()


def test_seed_script_reports_missing_file(tmp_path):
    assert seed_main([str(tmp_path / "missing.csv"), "--database-url", "sqlite://"]) == 1


class TestInitDb:

    def test_creates_tables(self):
        engine = create_engine("sqlite://")
        init_db(engine)
        assert {"vehicles", "error_logs"} <= set(inspect(engine).get_table_names())
        engine.dispose()

    @patch("time.sleep")
    def test_retries_while_database_is_unavailable(self, mock_sleep):
        engine = create_engine("sqlite://")
        unavailable = OperationalError("CREATE TABLE", {}, Exception("database is locked"))
        with patch.object(Base.metadata, "create_all", side_effect=[unavailable, None]) as mock_create:
            init_db(engine)
        assert mock_create.call_count == 2
        mock_sleep.assert_called_once()
        engine.dispose()
