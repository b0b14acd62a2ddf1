from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from app.services.predicates import Predicate

Record = Dict[str, Any]


@dataclass(frozen=True)
class SortSpec:
    field: str
    descending: bool = False


class VehicleStore(Protocol):
    """
    Port for vehicle record access.

    Records cross this boundary in their wire shape: a dict keyed by dataset
    column names plus the opaque string identifier under "_id".
    """

    def count(self, predicate: Predicate) -> int:
        ...

    def find(
        self,
        predicate: Predicate,
        projection: Optional[Sequence[str]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Record]:
        ...

    def find_by_id(self, record_id: str) -> Optional[Record]:
        ...

    def delete_by_id(self, record_id: str) -> bool:
        ...

    def insert_many(self, records: Iterable[Record]) -> int:
        ...
