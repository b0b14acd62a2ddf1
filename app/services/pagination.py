"""
Pagination & response shaping for the grid's server-side row model.

`fetch_page` runs a count and a windowed fetch against the store and packs
the result into a PageResult. The two reads are independent; no consistency
is promised between them if the data changes in between.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from app.services.predicates import Predicate, predicate_to_dict
from app.storage.base import Record, SortSpec, VehicleStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000
# Largest OFFSET a 64-bit SQL integer holds
MAX_OFFSET = 2**63 - 1

OVERVIEW_PROJECTION = ("_id", "Brand", "Model", "BodyStyle", "PriceEuro", "Date")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_positive_int(raw: Any, default: int) -> int:
    """
    Lenient integer parsing for query-string numbers: "3", " 3", "3abc" -> 3.
    Absent, non-numeric or non-positive input yields `default`.
    """
    if raw is None:
        return default
    if isinstance(raw, int) and not isinstance(raw, bool):
        number = raw
    else:
        match = _LEADING_INT.match(str(raw))
        if not match:
            return default
        number = int(match.group(1))
    return number if number >= 1 else default


def total_pages(total_count: int, page_size: int) -> int:
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: Optional[str] = None
    sort_order: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        page_size: Any = None,
        sort_field: Optional[str] = None,
        sort_order: Optional[str] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PageRequest:
        size = min(parse_positive_int(page_size, default_page_size), MAX_PAGE_SIZE)
        # skip + pageSize stays within MAX_OFFSET
        last_page = (MAX_OFFSET - size) // size + 1
        return cls(
            page=min(parse_positive_int(page, DEFAULT_PAGE), last_page),
            page_size=size,
            sort_field=sort_field or None,
            sort_order=sort_order or None,
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def sort(self) -> Optional[SortSpec]:
        if not self.sort_field:
            return None
        # Only an explicit "asc" sorts ascending
        return SortSpec(field=self.sort_field, descending=self.sort_order != "asc")


@dataclass(frozen=True)
class PageResult:
    rows: List[Record]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)

    def to_grid_response(self) -> Dict[str, Any]:
        """The shape the grid's infinite row model reads: rows plus lastRow."""
        return {
            "success": True,
            "rows": self.rows,
            "lastRow": self.total_count,
            "pagination": {
                "totalCount": self.total_count,
                "page": self.page,
                "pageSize": self.page_size,
                "totalPages": self.total_pages,
            },
        }


def fetch_page(
    store: VehicleStore,
    predicate: Predicate,
    page_request: PageRequest,
    projection: Sequence[str] = OVERVIEW_PROJECTION,
) -> PageResult:
    logger.debug("Overview query: %s", predicate_to_dict(predicate))
    logger.debug("Pagination: page=%s pageSize=%s", page_request.page, page_request.page_size)

    total_count = store.count(predicate)
    rows = store.find(
        predicate,
        projection=projection,
        sort=page_request.sort,
        skip=page_request.skip,
        limit=page_request.page_size,
    )

    result = PageResult(
        rows=rows,
        total_count=total_count,
        page=page_request.page,
        page_size=page_request.page_size,
    )
    logger.info(
        "Returning %d overview items (page %d of %d)",
        len(rows),
        result.page,
        result.total_pages,
    )
    return result
