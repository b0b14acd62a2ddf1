from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from app import config
from app.database import get_db, get_session_factory
from app.services.error_sink import DatabaseErrorSink, ErrorSink, LoggingErrorSink
from app.storage.base import VehicleStore
from app.storage.sql import SqlVehicleStore


def get_vehicle_store(db: Session = Depends(get_db)) -> VehicleStore:
    return SqlVehicleStore(db)


def get_error_sink(session_factory: sessionmaker = Depends(get_session_factory)) -> ErrorSink:
    if config.ERROR_SINK == "logging":
        return LoggingErrorSink()
    return DatabaseErrorSink(session_factory)
