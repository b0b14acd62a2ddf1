"""
Store-agnostic predicate types.

The query composer only ever builds these values; each storage adapter
translates them into its own query language (SQL expressions, an in-memory
evaluator, ...).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union


@dataclass(frozen=True)
class Contains:
    field: str
    value: str


@dataclass(frozen=True)
class Equals:
    field: str
    value: str


@dataclass(frozen=True)
class Prefix:
    field: str
    value: str


@dataclass(frozen=True)
class Suffix:
    field: str
    value: str


@dataclass(frozen=True)
class Empty:
    """Field is null, an empty string, or absent."""
    field: str


@dataclass(frozen=True)
class And:
    clauses: Tuple[Predicate, ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple[Predicate, ...]


Predicate = Union[Contains, Equals, Prefix, Suffix, Empty, And, Or]

# An empty conjunction constrains nothing
MATCH_ALL = And(())


def predicate_to_dict(predicate: Predicate) -> Dict[str, Any]:
    """JSON-friendly description, used for logs and error records."""
    if isinstance(predicate, (And, Or)):
        return {type(predicate).__name__.lower(): [predicate_to_dict(c) for c in predicate.clauses]}
    if isinstance(predicate, Empty):
        return {"empty": {"field": predicate.field}}
    return {type(predicate).__name__.lower(): {"field": predicate.field, "value": predicate.value}}
