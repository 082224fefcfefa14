"""
Compile predicate trees and schema DDL to PostgreSQL.

Records live in a single JSONB `document` column; dotted paths become
``document #> '{a,b,c}'`` expressions. The same expression text is used for
the partial indexes so the planner can match equality lookups against them.
`created_at` is a real column and range bounds on it use the column directly.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from psycopg import sql
from psycopg.types.json import Jsonb

from logsieve.domain.predicate import And, Equals, Or, Predicate, Range
from logsieve.storage.schema import PARTIAL_INDEX_FIELDS

COLUMN_FIELDS = frozenset({"created_at", "expires_at"})


def path_expression(path: str) -> sql.Composed:
    """``document #> '{meta,request,id}'`` for a dotted path."""
    text_path = "{" + ",".join(path.split(".")) + "}"
    return sql.SQL("(document #> {})").format(sql.Literal(text_path))


def compile_predicate(predicate: Predicate) -> Tuple[sql.Composable, List[Any]]:
    """
    Return a WHERE-clause fragment and its positional parameters.

    Equality values are sent as JSONB so numbers, strings and booleans compare
    with the same semantics they have inside the stored document.
    """
    if isinstance(predicate, Equals):
        if predicate.field in COLUMN_FIELDS:
            return (
                sql.SQL("{} = {}").format(sql.Identifier(predicate.field), sql.Placeholder()),
                [predicate.value],
            )
        return (
            sql.SQL("{} = {}").format(path_expression(predicate.field), sql.Placeholder()),
            [Jsonb(predicate.value)],
        )
    if isinstance(predicate, Range):
        if predicate.field in COLUMN_FIELDS:
            target: sql.Composable = sql.Identifier(predicate.field)
        else:
            text_path = "{" + ",".join(predicate.field.split(".")) + "}"
            target = sql.SQL("(document #>> {})::timestamptz").format(sql.Literal(text_path))
        return sql.SQL("{} >= {}").format(target, sql.Placeholder()), [predicate.gte]
    if isinstance(predicate, (And, Or)):
        if not predicate.clauses:
            return sql.SQL("TRUE" if isinstance(predicate, And) else "FALSE"), []
        joiner = sql.SQL(" AND " if isinstance(predicate, And) else " OR ")
        parts: List[sql.Composable] = []
        params: List[Any] = []
        for clause in predicate.clauses:
            fragment, clause_params = compile_predicate(clause)
            parts.append(fragment)
            params.extend(clause_params)
        return sql.SQL("({})").format(joiner.join(parts)), params
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def count_query(table: str, predicate: Predicate) -> Tuple[sql.Composed, List[Any]]:
    where, params = compile_predicate(predicate)
    query = sql.SQL("SELECT count(*) FROM {} WHERE {}").format(sql.Identifier(table), where)
    return query, params


def index_name(table: str, path: str) -> str:
    return f"{table}_{path.replace('.', '_').replace('-', '_')}_idx"


def schema_statements(table: str) -> List[sql.Composed]:
    """DDL for the logs table, its time indexes and one partial index per path."""
    ident = sql.Identifier(table)
    statements = [
        sql.SQL(
            "CREATE TABLE IF NOT EXISTS {} ("
            "id UUID PRIMARY KEY, "
            "created_at TIMESTAMPTZ NOT NULL, "
            "expires_at TIMESTAMPTZ NOT NULL, "
            "document JSONB NOT NULL)"
        ).format(ident),
        sql.SQL("CREATE INDEX IF NOT EXISTS {} ON {} (created_at)").format(
            sql.Identifier(f"{table}_created_at_idx"), ident
        ),
        sql.SQL("CREATE INDEX IF NOT EXISTS {} ON {} (expires_at)").format(
            sql.Identifier(f"{table}_expires_at_idx"), ident
        ),
    ]
    for path in PARTIAL_INDEX_FIELDS:
        expression = path_expression(path)
        statements.append(
            sql.SQL("CREATE INDEX IF NOT EXISTS {} ON {} ({}) WHERE {} IS NOT NULL").format(
                sql.Identifier(index_name(table, path)), ident, expression, expression
            )
        )
    return statements


__all__ = [
    "COLUMN_FIELDS",
    "compile_predicate",
    "count_query",
    "index_name",
    "path_expression",
    "schema_statements",
]
