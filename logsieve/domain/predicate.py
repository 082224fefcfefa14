"""
Existence-query predicate AST.

The duplicate-query builder produces a tree of `Equals`, `Range`, `And` and `Or`
nodes over dotted document paths (e.g. ``meta.request.id``). Storage backends
either evaluate the tree directly (`evaluate`) or compile it to their own query
language; `render` gives a Mongo-style dict for logging and debugging.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Tuple, Union

_MISSING = object()


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class Range:
    """Lower-bounded range (``field >= gte``)."""

    field: str
    gte: datetime


@dataclass(frozen=True)
class And:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Predicate", ...]


Predicate = Union[Equals, Range, And, Or]


def lookup(document: Mapping[str, Any], path: str) -> Any:
    """
    Resolve a dotted path against nested mappings.

    Returns the module-level `_MISSING` sentinel when any segment is absent.
    Header names such as ``content-type`` contain no dots, so splitting on "."
    is unambiguous for every indexed path.
    """
    current: Any = document
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return _MISSING
        current = current[segment]
    return current


def is_missing(value: Any) -> bool:
    return value is _MISSING


def evaluate(predicate: Predicate, document: Mapping[str, Any]) -> bool:
    """Evaluate a predicate tree against a stored document."""
    if isinstance(predicate, Equals):
        return lookup(document, predicate.field) == predicate.value
    if isinstance(predicate, Range):
        value = lookup(document, predicate.field)
        if is_missing(value) or value is None:
            return False
        return value >= predicate.gte
    if isinstance(predicate, And):
        return all(evaluate(clause, document) for clause in predicate.clauses)
    if isinstance(predicate, Or):
        return any(evaluate(clause, document) for clause in predicate.clauses)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def render(predicate: Predicate) -> Dict[str, Any]:
    """Render a predicate as a Mongo-style query document."""
    if isinstance(predicate, Equals):
        return {predicate.field: predicate.value}
    if isinstance(predicate, Range):
        return {predicate.field: {"$gte": predicate.gte.isoformat()}}
    if isinstance(predicate, And):
        return {"$and": [render(clause) for clause in predicate.clauses]}
    if isinstance(predicate, Or):
        return {"$or": [render(clause) for clause in predicate.clauses]}
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def fields(predicate: Predicate) -> Tuple[str, ...]:
    """List every document path referenced by the tree, in order."""
    if isinstance(predicate, (Equals, Range)):
        return (predicate.field,)
    collected: list[str] = []
    for clause in predicate.clauses:
        collected.extend(fields(clause))
    return tuple(collected)


__all__ = [
    "And",
    "Equals",
    "Or",
    "Predicate",
    "Range",
    "evaluate",
    "fields",
    "is_missing",
    "lookup",
    "render",
]
