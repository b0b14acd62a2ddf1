"""
Error observability sinks.

Routers report storage failures (and recovered input problems) here. A sink
is fire-and-forget: `record` never raises into the caller, whatever happens
to the sink's own backend.
"""
from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol

from sqlalchemy.orm import sessionmaker

from app.models.error_log import ErrorLog

logger = logging.getLogger(__name__)


@dataclass
class ErrorContext:
    endpoint: str
    method: str
    request_data: Dict[str, Any] = field(default_factory=dict)
    additional: Dict[str, Any] = field(default_factory=dict)


class ErrorSink(Protocol):
    def record(self, error: BaseException, context: ErrorContext) -> None:
        ...


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class LoggingErrorSink:
    """Writes errors to the application log only."""

    def record(self, error: BaseException, context: ErrorContext) -> None:
        logger.error(
            "Error in %s %s: %s | request=%s additional=%s",
            context.method,
            context.endpoint,
            error,
            context.request_data,
            context.additional,
        )


class DatabaseErrorSink:
    """
    Persists errors as ErrorLog rows.

    Uses its own session from `session_factory`, never the session of the
    request that failed, so a broken request transaction cannot take the
    error record down with it.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def record(self, error: BaseException, context: ErrorContext) -> None:
        try:
            with self._session_factory() as db:
                db.add(
                    ErrorLog(
                        message=str(error) or type(error).__name__,
                        stack=_format_stack(error),
                        endpoint=context.endpoint,
                        method=context.method,
                        request_data=context.request_data,
                        additional=context.additional,
                    )
                )
                db.commit()
        except Exception:
            logger.exception("Failed to log error to database")
            logger.error("Original error in %s %s: %s", context.method, context.endpoint, error)
            return

        # Still log to the stream for immediate debugging
        logger.error("Error in %s %s: %s", context.method, context.endpoint, error)
