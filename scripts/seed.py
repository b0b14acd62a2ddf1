"""
Replace the vehicles table with the contents of the EV dataset CSV.

    python scripts/seed.py data/ElectricCarData.csv
"""
import argparse
import logging
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from app import config
from app.database import create_db_engine, init_db, make_session_factory
from app.logging_config import configure_logging
from app.services.seeding import load_csv
from app.storage.sql import SqlVehicleStore

logger = logging.getLogger("seed")


def seed(csv_path: str, database_url: str) -> int:
    records = load_csv(csv_path)

    engine = create_db_engine(database_url)
    try:
        init_db(engine)
        with make_session_factory(engine)() as db:
            store = SqlVehicleStore(db)
            removed = store.delete_all()
            logger.info("Removed %d existing records", removed)
            return store.insert_many(records)
    finally:
        engine.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the vehicle database from a CSV file.")
    parser.add_argument("csv_path", help="Path to the electric car dataset CSV")
    parser.add_argument("--database-url", default=config.DATABASE_URL, help="SQLAlchemy database URL")
    args = parser.parse_args(argv)

    configure_logging(config.LOG_LEVEL)
    try:
        count = seed(args.csv_path, args.database_url)
    except (OSError, ValueError, SQLAlchemyError) as e:
        logger.error("Error seeding DB: %s", e)
        return 1
    logger.info("Database seeded successfully with %d records", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
