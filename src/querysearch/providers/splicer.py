"""Relocate the outer clauses of a rendered query onto the full-text base query.

The default provider only knows how to filter and sort on top of a query, so
when it runs on a query sourced from the full-text base query it renders:

    SELECT [b].*
    FROM (
        SELECT [ftst].* FROM [BlogPost] AS [ftst] INNER JOIN CONTAINSTABLE(...) ...
    ) AS [b]
    WHERE [b].[Category] = N'news'
    ORDER BY [b].[Id] ASC

Nesting the full-text join inside a derived table loses its rank ordering, so
the splicer flattens this into the base query followed by the outer clauses,
with the renderer's alias replaced by the fixed table alias.

Inlined values may contain line breaks, so markers are only recognised on
lines that do not continue a string literal.
"""

from typing import Iterator, Tuple

from loguru import logger

from querysearch.errors import ConfigurationError, RewriteAssumptionError
from querysearch.sql.literals import ends_inside_literal, replace_outside_literals

ALIAS_LINE_PREFIX = ") AS "
DERIVED_TABLE_OPENER = "FROM ("


class SqlSplicer:
    """Line-oriented splicer for rendered derived-table queries."""

    def __init__(self, table_alias: str, key_table_alias: str):
        self.table_alias = table_alias
        self.key_table_alias = key_table_alias

    def splice(self, base_query: str, rendered_sql: str, reuse_base_line: bool = False) -> str:
        """Return ``base_query`` decorated with the outer clauses of ``rendered_sql``.

        Args:
            base_query: Full-text base query used as the leading line
            rendered_sql: Rendered outer query wrapping the base query as a derived table
            reuse_base_line: Take the leading line from the line after ``FROM (``
                instead of ``base_query``, so cosmetic re-rendering of the base
                query is preserved. A string literal on that line is followed
                onto the lines it spans.

        Raises:
            RewriteAssumptionError: If the derived-table alias line is missing
            ConfigurationError: If the renderer's alias is one of the reserved aliases
        """
        leading_line = base_query
        used_alias = None
        relevant_lines = []
        inside_literal = False

        lines = iter(rendered_sql.split("\n"))
        for line in lines:
            starts_inside = inside_literal
            inside_literal = ends_inside_literal(line, inside_literal)
            if used_alias is not None:
                relevant_lines.append(line)
            elif starts_inside:
                continue
            elif reuse_base_line and line == DERIVED_TABLE_OPENER:
                leading_line, inside_literal = self._read_base_line(lines)
                leading_line = leading_line or base_query
            elif line.startswith(ALIAS_LINE_PREFIX):
                used_alias = line[len(ALIAS_LINE_PREFIX) :].strip()
                self._check_alias(used_alias)

        if used_alias is None:
            logger.error("Rendered SQL has no derived-table alias line")
            raise RewriteAssumptionError(
                "Could not find the derived-table alias line in the rendered SQL", rendered_sql
            )

        result = leading_line
        if relevant_lines:
            # Rendered clauses always qualify columns as <alias>.<column>
            outer = replace_outside_literals(
                "\n".join(relevant_lines), f"{used_alias}.", f"{self.table_alias}."
            )
            result += "\n" + outer
        logger.trace(f"Spliced alias {used_alias} -> {self.table_alias}: {result}")
        return result

    def _read_base_line(self, lines: Iterator[str]) -> Tuple[str, bool]:
        """Read the line after ``FROM (`` plus any lines its string literals span."""
        head = next(lines, "").lstrip()
        inside = ends_inside_literal(head)
        if not inside:
            return head.rstrip(), False

        parts = [head]
        while inside:
            line = next(lines, None)
            if line is None:
                break
            parts.append(line)
            inside = ends_inside_literal(line, True)
        return "\n".join(parts), inside

    def _check_alias(self, alias: str) -> None:
        if not alias:
            logger.error("Derived-table alias line has no alias")
            raise RewriteAssumptionError("Derived-table alias line has no alias")
        if alias == self.key_table_alias:
            raise ConfigurationError(
                f"Rendered alias {alias} collides with the reserved key table alias"
            )
