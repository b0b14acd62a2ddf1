import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.database import create_db_engine, init_db, make_session_factory
from app.logging_config import configure_logging
from app.routers import error_logs, vehicles

configure_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One engine for the whole process; sessions are handed out per request
    engine = create_db_engine(config.DATABASE_URL)
    init_db(engine)
    app.state.session_factory = make_session_factory(engine)
    logger.info("Database connected")
    yield
    engine.dispose()


app = FastAPI(
    title="EV Data Grid API",
    description="Browse, filter, search and delete electric vehicle records for a server-side data grid.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
)

app.include_router(vehicles.router, prefix="/api", tags=["Vehicles"])
app.include_router(error_logs.router, prefix="/api", tags=["Error Logs"])


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "EVGrid"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=True)
