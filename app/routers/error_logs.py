import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.error_log import ErrorLog
from app.schemas.error_log import (
    ErrorLogDeleteResponse,
    ErrorLogEntry,
    ErrorLogListResponse,
    ErrorLogPagination,
)
from app.services.pagination import PageRequest, total_pages

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_LOG_PAGE_SIZE = 20


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """ISO-8601 date or datetime as naive UTC; None when absent or unreadable."""
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unreadable timestamp %r", raw)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_entry(log: ErrorLog) -> ErrorLogEntry:
    return ErrorLogEntry(
        _id=log.id,
        message=log.message,
        stack=log.stack,
        endpoint=log.endpoint,
        method=log.method,
        timestamp=log.timestamp,
        requestData=log.request_data,
        additional=log.additional,
    )


@router.get("/error-logs", response_model=ErrorLogListResponse)
async def list_error_logs(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(default=None, alias="pageSize"),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Recorded errors, most recent first, optionally bounded by date."""
    page_request = PageRequest.from_params(page, page_size, default_page_size=ERROR_LOG_PAGE_SIZE)
    start, end = parse_timestamp(start_date), parse_timestamp(end_date)

    try:
        q = db.query(ErrorLog)
        if start is not None:
            q = q.filter(ErrorLog.timestamp >= start)
        if end is not None:
            q = q.filter(ErrorLog.timestamp <= end)

        total_count = q.count()
        logs = (
            q.order_by(ErrorLog.timestamp.desc(), ErrorLog.id.desc())
            .offset(page_request.skip)
            .limit(page_request.page_size)
            .all()
        )
    except Exception:
        # Not routed to the error sink: it may be the thing that is broken
        logger.exception("Error retrieving error logs")
        return JSONResponse(status_code=500, content={"error": "Failed to retrieve error logs"})

    return ErrorLogListResponse(
        logs=[to_entry(log) for log in logs],
        pagination=ErrorLogPagination(
            totalCount=total_count,
            page=page_request.page,
            pageSize=page_request.page_size,
            totalPages=total_pages(total_count, page_request.page_size),
        ),
    )


@router.delete("/error-logs", response_model=ErrorLogDeleteResponse)
async def clear_error_logs(before: Optional[str] = None, db: Session = Depends(get_db)):
    """Delete all error logs, or only those older than `before`."""
    cutoff = parse_timestamp(before)
    if before and cutoff is None:
        return JSONResponse(status_code=400, content={"error": f"Invalid 'before' timestamp: {before}"})
    try:
        q = db.query(ErrorLog)
        if cutoff is not None:
            q = q.filter(ErrorLog.timestamp < cutoff)
        deleted = q.delete(synchronize_session=False)
        db.commit()
    except Exception:
        logger.exception("Error clearing error logs")
        return JSONResponse(status_code=500, content={"error": "Failed to clear error logs"})

    return ErrorLogDeleteResponse(
        success=True,
        deleted=deleted,
        message=f"Successfully deleted {deleted} error logs",
    )
