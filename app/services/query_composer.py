"""
Translates grid search/filter parameters into a store predicate.

Composition is pure and deterministic. The only side effect in this module
is `resolve_filters` reporting an unreadable `filtersJson` to the error
sink before falling back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from app.schemas.filters import FilterItemList
from app.services.error_sink import ErrorContext, ErrorSink
from app.services.predicates import (
    MATCH_ALL,
    And,
    Contains,
    Empty,
    Equals,
    Or,
    Predicate,
    Prefix,
    Suffix,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("Brand", "Model", "BodyStyle", "PowerTrain", "PlugType", "Segment")

_VALUE_OPERATORS: Dict[str, Callable[[str, str], Predicate]] = {
    "contains": Contains,
    "equals": Equals,
    "starts": Prefix,
    "ends": Suffix,
}


class FilterParseError(ValueError):
    pass


@dataclass(frozen=True)
class FilterClause:
    field: Optional[str]
    operator: Optional[str]
    value: Optional[str] = None

    @classmethod
    def from_params(
        cls, field: Optional[str], operator: Optional[str], value: Optional[str]
    ) -> Optional[FilterClause]:
        """The legacy single `filter/operator/value` query triple, if given."""
        if not field or not operator:
            return None
        return cls(field=field, operator=operator, value=value)


def clause_to_predicate(clause: FilterClause) -> Optional[Predicate]:
    """Returns None for clauses that add no constraint."""
    if not clause.field or not clause.operator:
        return None
    if clause.operator == "empty":
        return Empty(clause.field)
    build = _VALUE_OPERATORS.get(clause.operator)
    if build is None or clause.value is None:
        return None
    return build(clause.field, clause.value)


def search_predicate(search: Optional[str]) -> Optional[Or]:
    term = (search or "").strip()
    if not term:
        return None
    return Or(tuple(Contains(name, term) for name in SEARCH_FIELDS))


def compose_predicate(
    search: Optional[str] = None, filters: Optional[Sequence[FilterClause]] = None
) -> Predicate:
    """
    Combine a free-text search with a conjunctive filter set.

    search + filters -> And(Or(search...), filter1, ..., filterN)
    only one side    -> that side's own shape
    neither          -> MATCH_ALL
    """
    searched = search_predicate(search)
    constraints: List[Predicate] = []
    for clause in filters or ():
        predicate = clause_to_predicate(clause)
        if predicate is not None:
            constraints.append(predicate)

    if searched is not None and constraints:
        return And((searched, *constraints))
    if searched is not None:
        return searched
    if len(constraints) == 1:
        return constraints[0]
    if constraints:
        return And(tuple(constraints))
    return MATCH_ALL


def parse_filters_json(raw: str) -> List[FilterClause]:
    """Decode the `filtersJson` array. Raises FilterParseError on any malformed input."""
    try:
        items = FilterItemList.validate_json(raw)
    except ValidationError as e:
        raise FilterParseError(f"Invalid filtersJson: {e.errors(include_url=False)}") from e
    return [FilterClause(field=item.field, operator=item.operator, value=item.value) for item in items]


def resolve_filters(
    filters_json: Optional[str],
    legacy: Optional[FilterClause],
    error_sink: Optional[ErrorSink] = None,
    context: Optional[ErrorContext] = None,
) -> List[FilterClause]:
    """
    Pick the filter set for a request.

    A readable `filtersJson` wins, even when it is an empty array. When it
    cannot be read, fall back to the legacy triple (or to no filters) and
    report the failure.
    """
    fallback = [legacy] if legacy is not None else []
    if not filters_json:
        return fallback

    try:
        return parse_filters_json(filters_json)
    except FilterParseError as e:
        logger.warning("Error parsing filters JSON, falling back to legacy filter: %s", e)
        if error_sink is not None:
            ctx = context or ErrorContext(endpoint="", method="")
            ctx.request_data.setdefault("filtersJson", filters_json)
            ctx.additional.setdefault("errorType", "JSON Parsing")
            error_sink.record(e, ctx)
        return fallback
