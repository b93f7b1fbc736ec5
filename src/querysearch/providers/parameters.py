"""Turn the inlined full-text predicate back into a bound parameter."""

from loguru import logger

from querysearch.errors import RewriteAssumptionError
from querysearch.sql.literals import literal_end, unquote_literal

PREDICATE_PLACEHOLDER = "{0}"
UNICODE_LITERAL_OPENER = "N'"


def extract_predicate_literal(sql: str, table_function: str) -> str:
    """Return the first string literal passed to ``table_function`` in ``sql``.

    Raises:
        RewriteAssumptionError: If the call or its literal cannot be found
    """
    call_start = sql.find(f"{table_function}(")
    literal_start = sql.find(UNICODE_LITERAL_OPENER, call_start) if call_start >= 0 else -1
    end = literal_end(sql, literal_start + 1) if literal_start >= 0 else -1

    if end < 0:
        if call_start < 0:
            message = f"No {table_function} call in spliced SQL"
        elif literal_start < 0:
            message = f"No predicate literal after {table_function}"
        else:
            message = "Predicate literal is not terminated"
        logger.error(f"{message}: {sql}")
        raise RewriteAssumptionError(message, sql)

    return sql[literal_start:end]


def parameterize(sql: str, table_function: str, predicate: str) -> str:
    """Replace the inlined predicate literal with the ``{0}`` placeholder.

    Every occurrence of the exact literal is replaced; they all carry the
    same value, which is then bound once as parameter 0.

    Raises:
        RewriteAssumptionError: If the literal is missing or does not hold ``predicate``
    """
    literal = extract_predicate_literal(sql, table_function)
    if unquote_literal(literal) != predicate:
        logger.error(f"Recovered predicate literal does not match: {literal}")
        raise RewriteAssumptionError(
            "The literal passed to the table function is not the search predicate", sql
        )
    return sql.replace(literal, PREDICATE_PLACEHOLDER)
