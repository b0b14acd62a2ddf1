import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

INTEGER_COLUMNS = (
    "top_speed_kmh",
    "range_km",
    "efficiency_whkm",
    "fast_charge_kmh",
    "seats",
    "price_euro",
)


class VehicleFields(BaseModel):
    """Electric vehicle attributes, named on the wire after the dataset columns."""
    model_config = ConfigDict(populate_by_name=True)

    brand: Optional[str] = Field(default=None, alias="Brand", description="Manufacturer, e.g. 'Tesla'")
    model: Optional[str] = Field(default=None, alias="Model", description="Model name, e.g. 'Model 3 Long Range Dual Motor'")
    accel_sec: Optional[float] = Field(default=None, alias="AccelSec", description="0-100 km/h in seconds")
    top_speed_kmh: Optional[int] = Field(default=None, alias="TopSpeed_KmH")
    range_km: Optional[int] = Field(default=None, alias="Range_Km")
    efficiency_whkm: Optional[int] = Field(default=None, alias="Efficiency_WhKm")
    fast_charge_kmh: Optional[int] = Field(default=None, alias="FastCharge_KmH")
    rapid_charge: Optional[str] = Field(default=None, alias="RapidCharge", description="'Yes' or 'No'")
    power_train: Optional[str] = Field(default=None, alias="PowerTrain", description="AWD, RWD or FWD")
    plug_type: Optional[str] = Field(default=None, alias="PlugType")
    body_style: Optional[str] = Field(default=None, alias="BodyStyle")
    segment: Optional[str] = Field(default=None, alias="Segment")
    seats: Optional[int] = Field(default=None, alias="Seats")
    price_euro: Optional[int] = Field(default=None, alias="PriceEuro")
    date: Optional[str] = Field(default=None, alias="Date", description="Free-text date as found in the dataset")


class VehicleCreate(VehicleFields):
    """Input schema for seeding. Numbers that do not parse are stored as null."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("accel_sec", *INTEGER_COLUMNS, mode="before")
    @classmethod
    def lenient_number(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            try:
                number = float(str(value).strip())
            except ValueError:
                return None
        if not math.isfinite(number):
            return None
        if info.field_name in INTEGER_COLUMNS:
            return int(round(number))
        return number

    @field_validator("brand", "model", "rapid_charge", "power_train", "plug_type", "body_style", "segment", "date", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        if value is None:
            return None
        return str(value).strip()


class VehicleRecord(VehicleFields):
    """A stored vehicle as returned by the detail endpoint."""
    id: str = Field(alias="_id", description="Store-assigned identifier")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class VehicleOverviewRow(BaseModel):
    """The projected fields the overview grid displays."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    brand: Optional[str] = Field(default=None, alias="Brand")
    model: Optional[str] = Field(default=None, alias="Model")
    body_style: Optional[str] = Field(default=None, alias="BodyStyle")
    price_euro: Optional[int] = Field(default=None, alias="PriceEuro")
    date: Optional[str] = Field(default=None, alias="Date")


class PaginationInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(alias="totalCount")
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")


class OverviewResponse(BaseModel):
    """Grid response for the infinite row model: rows plus lastRow."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    rows: List[VehicleOverviewRow]
    last_row: int = Field(alias="lastRow")
    pagination: PaginationInfo


class SeedResponse(BaseModel):
    status: str
    count: int


class CountResponse(BaseModel):
    count: int
