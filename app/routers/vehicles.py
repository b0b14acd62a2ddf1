import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from app.dependencies import get_error_sink, get_vehicle_store
from app.schemas.vehicle import (
    CountResponse,
    OverviewResponse,
    SeedResponse,
    VehicleCreate,
    VehicleRecord,
)
from app.services.error_sink import ErrorContext, ErrorSink
from app.services.pagination import PageRequest, fetch_page
from app.services.predicates import MATCH_ALL, predicate_to_dict
from app.services.query_composer import FilterClause, compose_predicate, resolve_filters
from app.storage.base import VehicleStore

logger = logging.getLogger(__name__)

router = APIRouter()

LIST_LIMIT = 100


@router.get("/data", response_model=List[VehicleRecord])
async def list_vehicles(
    search: Optional[str] = None,
    filter: Optional[str] = None,
    operator: Optional[str] = None,
    value: Optional[str] = None,
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """List up to 100 full records matching an optional search and single filter."""
    legacy = FilterClause.from_params(filter, operator, value)
    predicate = compose_predicate(search, [legacy] if legacy else None)
    try:
        return store.find(predicate, limit=LIST_LIMIT)
    except Exception as e:
        sink.record(e, ErrorContext(
            endpoint="/api/data",
            method="GET",
            request_data={"search": search, "filter": filter, "operator": operator, "value": value},
        ))
        raise HTTPException(status_code=500, detail=f"Server error: {str(e)}")


@router.get("/data/overview", response_model=OverviewResponse)
async def get_overview(
    search: Optional[str] = None,
    filter: Optional[str] = None,
    operator: Optional[str] = None,
    value: Optional[str] = None,
    filters_json: Optional[str] = Query(default=None, alias="filtersJson"),
    page: Optional[str] = None,
    page_size: Optional[str] = Query(default=None, alias="pageSize"),
    sort_field: Optional[str] = Query(default=None, alias="sortField"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """
    Paginated, filtered and searchable overview for the grid.
    Returns:
        {success, rows, lastRow, pagination} with only the overview fields per row.
    Failures:
        Storage errors are recorded and answered with HTTP 500
        {success: false, error}. Bad filter/pagination input never fails.
    """
    legacy = FilterClause.from_params(filter, operator, value)
    filters = resolve_filters(
        filters_json,
        legacy,
        error_sink=sink,
        context=ErrorContext(
            endpoint="/api/data/overview",
            method="GET",
            request_data={"filtersJson": filters_json, "filter": filter, "operator": operator, "value": value},
        ),
    )
    predicate = compose_predicate(search, filters)
    page_request = PageRequest.from_params(page, page_size, sort_field, sort_order)

    try:
        result = fetch_page(store, predicate, page_request)
    except Exception as e:
        sink.record(e, ErrorContext(
            endpoint="/api/data/overview",
            method="GET",
            request_data={
                "search": search,
                "filtersJson": filters_json,
                "filter": filter,
                "operator": operator,
                "value": value,
                "page": page,
                "pageSize": page_size,
                "sortField": sort_field,
                "sortOrder": sort_order,
            },
            additional={"queryBuilt": predicate_to_dict(predicate)},
        ))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to fetch overview data"},
        )

    return result.to_grid_response()


@router.get("/data/{record_id}", response_model=VehicleRecord)
async def get_vehicle(
    record_id: str,
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """Get a single record by ID."""
    try:
        record = store.find_by_id(record_id)
    except Exception as e:
        sink.record(e, ErrorContext(endpoint=f"/api/data/{record_id}", method="GET", request_data={"id": record_id}))
        raise HTTPException(status_code=500, detail=f"Server error: {str(e)}")
    if not record:
        raise HTTPException(status_code=404, detail="Item not found")
    return record


@router.delete("/data/{record_id}")
async def delete_vehicle(
    record_id: str,
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """Delete a record by ID."""
    try:
        deleted = store.delete_by_id(record_id)
    except Exception as e:
        sink.record(e, ErrorContext(endpoint=f"/api/data/{record_id}", method="DELETE", request_data={"id": record_id}))
        raise HTTPException(status_code=500, detail=f"Server error: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail="Item not found")
    return {"message": f"Vehicle {record_id} deleted"}


@router.post("/seed", response_model=SeedResponse)
async def seed_vehicles(
    vehicles: List[VehicleCreate],
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """Bulk insert records, e.g. the EV dataset converted to JSON."""
    try:
        count = store.insert_many(v.model_dump(by_alias=True) for v in vehicles)
    except Exception as e:
        sink.record(e, ErrorContext(endpoint="/api/seed", method="POST", request_data={"dataCount": len(vehicles)}))
        raise HTTPException(status_code=500, detail=f"Failed to seed data: {str(e)}")
    logger.info("Seeded %d vehicles", count)
    return SeedResponse(status="Seeded", count=count)


@router.get("/count", response_model=CountResponse)
async def count_vehicles(
    store: VehicleStore = Depends(get_vehicle_store),
    sink: ErrorSink = Depends(get_error_sink),
):
    """Total number of stored records."""
    try:
        return CountResponse(count=store.count(MATCH_ALL))
    except Exception as e:
        sink.record(e, ErrorContext(endpoint="/api/count", method="GET"))
        raise HTTPException(status_code=500, detail=f"Server error: {str(e)}")
