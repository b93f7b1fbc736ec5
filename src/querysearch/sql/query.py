"""Immutable, renderable relational queries.

A ``Query`` is either sourced from a table or from raw SQL. Filters, ordering
and a page window are stored as structured clauses and only become text when
the query is rendered:

    SELECT [b].*
    FROM (
        <raw sql>
    ) AS [b]
    WHERE [b].[Category] = N'news'
        AND [b].[Published] = 1
    ORDER BY [b].[Id] ASC
    OFFSET 0 ROWS FETCH NEXT 20 ROWS ONLY

Raw sources are always rendered as a derived table, one line per clause, which
is the layout the full-text splicer reads. A string literal spanning lines is
never re-indented, so its value survives the wrapping.
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple, Union

from sqlalchemy import TextClause

from querysearch.errors import ConfigurationError
from querysearch.sql.literals import (
    ends_inside_literal,
    inline_parameters,
    quote_identifier,
    to_text_clause,
)

OPERATORS = {
    "eq": "=",
    "ne": "<>",
    "lt": "<",
    "lte": "<=",
    "gt": ">",
    "gte": ">=",
    "like": "LIKE",
    "in": "IN",
    "is_null": "IS NULL",
}


@dataclass(frozen=True)
class Condition:
    """``<alias>.<column> <operator> <values>``"""

    column: str
    operator: str
    values: Tuple[Any, ...] = ()

    def render(self, alias: str, first_index: int) -> Tuple[str, List[Any]]:
        target = f"{alias}.{self.column}"
        if self.operator == "IS NULL":
            is_null = not self.values or bool(self.values[0])
            return f"{target} {'IS NULL' if is_null else 'IS NOT NULL'}", []
        if self.operator == "IN":
            slots = ", ".join("{" + str(first_index + i) + "}" for i in range(len(self.values)))
            return f"{target} IN ({slots})", list(self.values)
        return f"{target} {self.operator} {{{first_index}}}", [self.values[0]]


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of conditions, rendered in parentheses."""

    conditions: Tuple[Condition, ...]

    def render(self, alias: str, first_index: int) -> Tuple[str, List[Any]]:
        parts = []
        params: List[Any] = []
        for condition in self.conditions:
            sql, condition_params = condition.render(alias, first_index + len(params))
            parts.append(sql)
            params.extend(condition_params)
        return "(" + " OR ".join(parts) + ")", params


Predicate = Union[Condition, AnyOf]


@dataclass(frozen=True)
class OrderTerm:
    column: str
    descending: bool = False

    def render(self, alias: str) -> str:
        return f"{alias}.{self.column} {'DESC' if self.descending else 'ASC'}"


def parse_sort_terms(sort: str) -> List[OrderTerm]:
    """Parse ``"[Id] ASC, [Created] DESC"`` into order terms."""
    terms = []
    for part in sort.split(","):
        words = part.split()
        if not words:
            continue
        direction = "ASC"
        if len(words) > 1 and words[-1].upper() in ("ASC", "DESC"):
            direction = words[-1].upper()
            words = words[:-1]
        terms.append(OrderTerm(quote_identifier(" ".join(words)), direction == "DESC"))
    if not terms:
        raise ConfigurationError(f"Empty sort expression: {sort!r}")
    return terms


def indent_source(sql: str) -> List[str]:
    """Indent the lines of a raw source; lines that continue a string literal are kept as is."""
    lines = []
    inside = False
    for line in sql.split("\n"):
        lines.append(line if inside else f"    {line}")
        inside = ends_inside_literal(line, inside)
    return lines


def alias_for(table_name: str) -> str:
    """Derive a short alias from a table name: ``[dbo].[BlogPost]`` -> ``[b]``."""
    last = quote_identifier(table_name).split(".")[-1].strip("[]")
    initial = next((c for c in last if c.isalpha()), "t")
    return f"[{initial.lower()}]"


@dataclass(frozen=True)
class Query:
    """Relational query over a table or a raw SQL template."""

    source: str
    alias: str
    params: Tuple[Any, ...] = ()
    is_raw: bool = False
    conditions: Tuple[Predicate, ...] = field(default=())
    ordering: Tuple[OrderTerm, ...] = field(default=())
    offset: Optional[int] = None
    fetch: Optional[int] = None

    @classmethod
    def table(cls, table_name: str, alias: Optional[str] = None) -> "Query":
        return cls(
            source=quote_identifier(table_name),
            alias=quote_identifier(alias) if alias else alias_for(table_name),
        )

    def from_sql(self, sql: str, *params: Any) -> "Query":
        """New query sourced from raw SQL; outer clauses are not carried over."""
        return Query(source=sql.strip(), alias=self.alias, params=tuple(params), is_raw=True)

    def where(self, *conditions: Predicate) -> "Query":
        return replace(self, conditions=self.conditions + tuple(conditions))

    def order_by(self, *terms: OrderTerm) -> "Query":
        return replace(self, ordering=self.ordering + tuple(terms))

    def paginate(self, offset: int, fetch: int) -> "Query":
        return replace(self, offset=offset, fetch=fetch)

    @property
    def is_composed(self) -> bool:
        return bool(self.conditions or self.ordering or self.fetch is not None)

    def to_template(self) -> Tuple[str, List[Any]]:
        """Render to a ``{n}`` template and its positional parameters."""
        params: List[Any] = list(self.params)
        lines = [f"SELECT {self.alias}.*"]
        if self.is_raw:
            lines.append("FROM (")
            lines.extend(indent_source(self.source))
            lines.append(f") AS {self.alias}")
        else:
            lines.append(f"FROM {self.source} AS {self.alias}")

        for i, condition in enumerate(self.conditions):
            sql, condition_params = condition.render(self.alias, len(params))
            params.extend(condition_params)
            lines.append(f"WHERE {sql}" if i == 0 else f"    AND {sql}")

        if self.ordering:
            lines.append("ORDER BY " + ", ".join(t.render(self.alias) for t in self.ordering))
        elif self.fetch is not None:
            # OFFSET/FETCH is only valid after an ORDER BY
            lines.append("ORDER BY (SELECT NULL)")

        if self.fetch is not None:
            lines.append(f"OFFSET {self.offset or 0} ROWS FETCH NEXT {self.fetch} ROWS ONLY")

        return "\n".join(lines), params

    def to_sql(self) -> str:
        """Render with every parameter inlined as a literal, for inspection and splicing."""
        template, params = self.to_template()
        return inline_parameters(template, params)

    def to_statement(self) -> TextClause:
        """Executable statement with positional parameters bound."""
        if self.is_raw and not self.is_composed:
            return to_text_clause(self.source, self.params)
        template, params = self.to_template()
        return to_text_clause(template, params)

