from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import String, and_, false, func, or_, true
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session
from sqlalchemy.sql.functions import FunctionElement

from app.models.vehicle import FIELD_ATTRIBUTES, NUMERIC_FIELDS, Vehicle, coerce_field_value
from app.services.predicates import And, Contains, Empty, Equals, Or, Predicate, Prefix, Suffix
from app.storage.base import Record, SortSpec

logger = logging.getLogger(__name__)


def _column(field: str):
    attr = FIELD_ATTRIBUTES.get(field)
    return getattr(Vehicle, attr) if attr else None


def _sort_column(field: str):
    return Vehicle.id if field == "_id" else _column(field)


class casefold(FunctionElement):
    """Unicode case folding of a text expression."""
    type = String()
    name = "casefold"
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element, compiler, **kw):
    return "lower(%s)" % compiler.process(element.clauses, **kw)


# Registered per connection by app.database.register_sqlite_functions
@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element, compiler, **kw):
    return "casefold(%s)" % compiler.process(element.clauses, **kw)


def to_clause(predicate: Predicate):
    """Translate a predicate into a SQLAlchemy boolean expression over Vehicle."""
    if isinstance(predicate, And):
        if not predicate.clauses:
            return true()
        return and_(*[to_clause(c) for c in predicate.clauses])
    if isinstance(predicate, Or):
        if not predicate.clauses:
            return false()
        return or_(*[to_clause(c) for c in predicate.clauses])

    column = _column(predicate.field)
    if isinstance(predicate, Empty):
        # An unknown field is always absent
        if column is None:
            return true()
        if predicate.field in NUMERIC_FIELDS:
            return column.is_(None)
        return or_(column.is_(None), column == "")

    if column is None:
        return false()

    if isinstance(predicate, Equals):
        try:
            value = coerce_field_value(predicate.field, predicate.value)
        except ValueError:
            return false()
        return column == value

    # Text matching never applies to numeric columns
    if predicate.field in NUMERIC_FIELDS:
        return false()
    folded = casefold(column)
    needle = predicate.value.casefold()
    if isinstance(predicate, Contains):
        return folded.contains(needle, autoescape=True)
    if isinstance(predicate, Prefix):
        return folded.startswith(needle, autoescape=True)
    if isinstance(predicate, Suffix):
        return folded.endswith(needle, autoescape=True)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


class SqlVehicleStore:
    """VehicleStore backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def count(self, predicate: Predicate) -> int:
        return self.db.query(func.count(Vehicle.id)).filter(to_clause(predicate)).scalar() or 0

    def find(
        self,
        predicate: Predicate,
        projection: Optional[Sequence[str]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Record]:
        q = self.db.query(Vehicle).filter(to_clause(predicate))
        if sort is not None:
            column = _sort_column(sort.field)
            if column is not None:
                q = q.order_by(column.desc() if sort.descending else column.asc())
                if sort.field != "_id":
                    # Ties keep the natural order so pages never overlap
                    q = q.order_by(Vehicle.id.asc())
            else:
                logger.debug("Ignoring sort on unknown field %r", sort.field)
        if skip:
            q = q.offset(skip)
        if limit is not None:
            q = q.limit(limit)
        return [vehicle.to_record(projection) for vehicle in q.all()]

    def _get(self, record_id: str) -> Optional[Vehicle]:
        try:
            pk = int(record_id)
        except (TypeError, ValueError):
            return None
        return self.db.query(Vehicle).filter(Vehicle.id == pk).first()

    def find_by_id(self, record_id: str) -> Optional[Record]:
        vehicle = self._get(record_id)
        return vehicle.to_record() if vehicle else None

    def delete_by_id(self, record_id: str) -> bool:
        vehicle = self._get(record_id)
        if not vehicle:
            return False
        self.db.delete(vehicle)
        self.db.commit()
        return True

    def insert_many(self, records: Iterable[Record]) -> int:
        vehicles = [Vehicle.from_record(record) for record in records]
        self.db.add_all(vehicles)
        self.db.commit()
        return len(vehicles)

    def delete_all(self) -> int:
        deleted = self.db.query(Vehicle).delete()
        self.db.commit()
        return deleted
