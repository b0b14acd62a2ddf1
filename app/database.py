import logging

from fastapi import Depends, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

Base = declarative_base()


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def register_sqlite_functions(engine: Engine) -> None:
    """Install `casefold()` on every new connection; SQLite's lower() only folds ASCII."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def create_db_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI may touch the same connection from several threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        register_sqlite_functions(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
def init_db(engine: Engine) -> None:
    """Create tables, retrying while the database is still coming up."""
    # Register the mapped classes on Base.metadata
    from app.models import error_log, vehicle  # noqa: F401

    logger.info("Creating database tables on %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)


def get_session_factory(request: Request) -> sessionmaker:
    """The session factory built once by the application lifespan."""
    return request.app.state.session_factory


def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    db: Session = session_factory()
    try:
        yield db
    finally:
        db.close()
