from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorLogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(alias="_id")
    message: Optional[str] = None
    stack: Optional[str] = None
    endpoint: Optional[str] = None
    method: Optional[str] = None
    timestamp: Optional[datetime] = None
    request_data: Optional[Dict[str, Any]] = Field(default=None, alias="requestData")
    additional: Optional[Dict[str, Any]] = None


class ErrorLogPagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(alias="totalCount")
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")


class ErrorLogListResponse(BaseModel):
    logs: List[ErrorLogEntry]
    pagination: ErrorLogPagination


class ErrorLogDeleteResponse(BaseModel):
    success: bool
    deleted: int
    message: str
