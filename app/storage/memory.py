from __future__ import annotations

import copy
from typing import Any, Iterable, List, Optional, Sequence

from app.models.vehicle import FIELD_ATTRIBUTES, NUMERIC_FIELDS, coerce_field_value
from app.services.predicates import And, Contains, Empty, Equals, Or, Predicate, Prefix, Suffix
from app.storage.base import Record, SortSpec


def _field_value(record: Record, field: str) -> Any:
    # Fields outside the record schema are always absent
    if field not in FIELD_ATTRIBUTES:
        return None
    return record.get(field)


def matches(predicate: Predicate, record: Record) -> bool:
    """Evaluate a predicate against a wire-shaped record, mirroring the SQL adapter."""
    if isinstance(predicate, And):
        return all(matches(c, record) for c in predicate.clauses)
    if isinstance(predicate, Or):
        return any(matches(c, record) for c in predicate.clauses)

    value = _field_value(record, predicate.field)
    if isinstance(predicate, Empty):
        return value is None or value == ""

    if isinstance(predicate, Equals):
        if value is None:
            return False
        try:
            expected = coerce_field_value(predicate.field, predicate.value)
        except ValueError:
            return False
        return value == expected

    if predicate.field in NUMERIC_FIELDS or not isinstance(value, str):
        return False
    haystack = value.casefold()
    needle = predicate.value.casefold()
    if isinstance(predicate, Contains):
        return needle in haystack
    if isinstance(predicate, Prefix):
        return haystack.startswith(needle)
    if isinstance(predicate, Suffix):
        return haystack.endswith(needle)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


class InMemoryVehicleStore:
    """
    List-backed VehicleStore.

    - Keeps records in insertion order (the natural order)
    - Assigns sequential string ids
    - Counts matches before the skip/limit window is applied
    """

    def __init__(self, records: Optional[Iterable[Record]] = None):
        self._records: List[Record] = []
        self._next_id = 1
        if records:
            self.insert_many(records)

    def count(self, predicate: Predicate) -> int:
        return sum(1 for record in self._records if matches(predicate, record))

    def find(
        self,
        predicate: Predicate,
        projection: Optional[Sequence[str]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Record]:
        found = [record for record in self._records if matches(predicate, record)]
        if sort is not None and (sort.field == "_id" or sort.field in FIELD_ATTRIBUTES):
            if sort.field == "_id":
                key = lambda r: int(r["_id"])  # noqa: E731
            else:
                # Missing values sort first, like NULLs in an ascending SQL sort
                key = lambda r: (r.get(sort.field) is not None, r.get(sort.field))  # noqa: E731
            found.sort(key=key, reverse=sort.descending)
        end = None if limit is None else skip + limit
        window = found[skip:end]
        if projection is None:
            return [copy.deepcopy(record) for record in window]
        return [{name: record.get(name) for name in projection} for record in window]

    def find_by_id(self, record_id: str) -> Optional[Record]:
        for record in self._records:
            if record["_id"] == record_id:
                return copy.deepcopy(record)
        return None

    def delete_by_id(self, record_id: str) -> bool:
        for index, record in enumerate(self._records):
            if record["_id"] == record_id:
                del self._records[index]
                return True
        return False

    def insert_many(self, records: Iterable[Record]) -> int:
        inserted = 0
        for record in records:
            stored = {name: record.get(name) for name in FIELD_ATTRIBUTES}
            stored["_id"] = str(self._next_id)
            self._next_id += 1
            self._records.append(stored)
            inserted += 1
        return inserted
