import math
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import Column, DateTime, Float, Integer, String, func

from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    brand = Column(String, index=True)
    model = Column(String, index=True)
    accel_sec = Column(Float, nullable=True)
    top_speed_kmh = Column(Integer, nullable=True)
    range_km = Column(Integer, nullable=True)
    efficiency_whkm = Column(Integer, nullable=True)
    fast_charge_kmh = Column(Integer, nullable=True)
    rapid_charge = Column(String, nullable=True)
    power_train = Column(String, nullable=True)
    plug_type = Column(String, nullable=True)
    body_style = Column(String, index=True)
    segment = Column(String, nullable=True)
    seats = Column(Integer, nullable=True)
    price_euro = Column(Integer, nullable=True)
    date = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def to_record(self, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Serialize to the wire shape, optionally limited to `fields`."""
        wanted = set(fields) if fields is not None else None
        record: Dict[str, Any] = {"_id": str(self.id)}
        for name, attr in FIELD_ATTRIBUTES.items():
            if wanted is None or name in wanted:
                record[name] = getattr(self, attr)
        if wanted is None:
            record["createdAt"] = self.created_at
            record["updatedAt"] = self.updated_at
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Vehicle":
        return cls(**{attr: record.get(name) for name, attr in FIELD_ATTRIBUTES.items()})


# Wire field name (dataset column) -> mapped attribute
FIELD_ATTRIBUTES = {
    "Brand": "brand",
    "Model": "model",
    "AccelSec": "accel_sec",
    "TopSpeed_KmH": "top_speed_kmh",
    "Range_Km": "range_km",
    "Efficiency_WhKm": "efficiency_whkm",
    "FastCharge_KmH": "fast_charge_kmh",
    "RapidCharge": "rapid_charge",
    "PowerTrain": "power_train",
    "PlugType": "plug_type",
    "BodyStyle": "body_style",
    "Segment": "segment",
    "Seats": "seats",
    "PriceEuro": "price_euro",
    "Date": "date",
}

NUMERIC_FIELDS = {
    "AccelSec": float,
    "TopSpeed_KmH": int,
    "Range_Km": int,
    "Efficiency_WhKm": int,
    "FastCharge_KmH": int,
    "Seats": int,
    "PriceEuro": int,
}


def coerce_field_value(field: str, raw: Any) -> Any:
    """
    Convert a raw (usually string) value to the type stored for `field`.
    Raises ValueError when the value cannot represent that type.
    """
    kind = NUMERIC_FIELDS.get(field)
    if kind is None:
        return raw if isinstance(raw, str) else str(raw)
    number = float(str(raw).strip())
    if not math.isfinite(number):
        raise ValueError(f"{field} expects a finite number, got {raw!r}")
    if kind is int:
        if not number.is_integer():
            raise ValueError(f"{field} expects an integer, got {raw!r}")
        return int(number)
    return number
