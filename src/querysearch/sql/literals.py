"""SQL templates, literals and identifiers for the SQL Server dialect.

Raw SQL handled by querysearch is a *template*: ``{0}``, ``{1}``... are
positional placeholders and ``{{`` / ``}}`` stand for literal braces. Rendered
SQL keeps that property (inlined literals have their braces doubled), so a
rendering can be fed straight back into ``Query.from_sql``.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import TextClause, text

from querysearch.errors import ConfigurationError, QuerySearchError

TEMPLATE_TOKEN = re.compile(r"\{\{|\}\}|\{(\d+)\}")
STRING_LITERAL = re.compile(r"N?'(?:[^']|'')*'")
IDENTIFIER_PART = re.compile(r"\[(?:[^\]]|\]\])+\]|[A-Za-z_][A-Za-z0-9_]*")


def quote_identifier(name: str) -> str:
    """Return ``name`` as a bracketed identifier.

    Accepts bare names (``Title``), bracketed names (``[Title]``) and dotted
    paths of either (``dbo.[BlogPost]``). Anything else is rejected since it
    would end up verbatim in generated SQL.
    """
    stripped = name.strip()
    parts = []
    position = 0
    while True:
        match = IDENTIFIER_PART.match(stripped, position)
        if match is None:
            raise ConfigurationError(f"Not a valid SQL identifier: {name!r}")
        part = match.group(0)
        parts.append(part if part.startswith("[") else f"[{part}]")
        position = match.end()
        if position == len(stripped):
            return ".".join(parts)
        if stripped[position] != ".":
            raise ConfigurationError(f"Not a valid SQL identifier: {name!r}")
        position += 1


def escape_braces(value: str) -> str:
    return value.replace("{", "{{").replace("}", "}}")


def quote_literal(value: Any) -> str:
    """Render a python value as an inline SQL Server literal (template-safe)."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return f"'{value.isoformat()}'"
    if isinstance(value, str):
        return "N'" + escape_braces(value.replace("'", "''")) + "'"
    raise QuerySearchError(f"Cannot render {type(value).__name__} as a SQL literal")


def unquote_literal(literal: str) -> str:
    """Inverse of ``quote_literal`` for string literals."""
    body = literal[1:] if literal.startswith("N") else literal
    if len(body) < 2 or body[0] != "'" or body[-1] != "'":
        raise QuerySearchError(f"Not a string literal: {literal!r}")
    return body[1:-1].replace("''", "'").replace("{{", "{").replace("}}", "}")


def literal_end(sql: str, quote_index: int) -> int:
    """Return the index just past the string literal whose opening quote is at ``quote_index``.

    Doubled quotes inside the literal are skipped. Returns -1 when the literal
    is never closed.
    """
    i = quote_index + 1
    while i < len(sql):
        if sql[i] == "'":
            if i + 1 < len(sql) and sql[i + 1] == "'":
                i += 2
                continue
            return i + 1
        i += 1
    return -1


def ends_inside_literal(sql: str, inside: bool = False) -> bool:
    """Return True when ``sql`` ends inside an unterminated string literal.

    ``inside`` says whether ``sql`` starts inside one, so multi-line text can
    be scanned a line at a time. Bracketed identifiers are skipped.
    """
    i = 0
    if inside:
        # literal_end scans from quote_index + 1
        i = literal_end(sql, -1)
        if i < 0:
            return True
    while i < len(sql):
        char = sql[i]
        if char == "'":
            i = literal_end(sql, i)
            if i < 0:
                return True
        elif char == "[":
            i += 1
            while i < len(sql):
                if sql[i] == "]":
                    if sql[i + 1 : i + 2] != "]":
                        break
                    i += 1
                i += 1
            i += 1
        else:
            i += 1
    return False


def replace_outside_literals(sql: str, old: str, new: str) -> str:
    """Replace ``old`` with ``new`` everywhere except inside string literals."""
    if not old or old == new:
        return sql
    pieces = []
    position = 0
    for match in STRING_LITERAL.finditer(sql):
        pieces.append(sql[position : match.start()].replace(old, new))
        pieces.append(match.group(0))
        position = match.end()
    pieces.append(sql[position:].replace(old, new))
    return "".join(pieces)


def inline_parameters(template: str, params: Sequence[Any]) -> str:
    """Substitute each ``{n}`` with the inline literal of ``params[n]``."""

    def _inline(match: re.Match) -> str:
        if match.group(1) is None:
            return match.group(0)
        return quote_literal(_param(params, int(match.group(1))))

    return TEMPLATE_TOKEN.sub(_inline, template)


def to_text_clause(template: str, params: Sequence[Any]) -> TextClause:
    """Build an executable SQLAlchemy ``text()`` with ``{n}`` bound as ``:pn``.

    Colons in the SQL itself are escaped so SQLAlchemy does not read them as
    bind parameters.
    """
    pieces = []
    bound: dict[str, Any] = {}
    position = 0
    for match in TEMPLATE_TOKEN.finditer(template):
        pieces.append(template[position : match.start()].replace(":", "\\:"))
        token = match.group(0)
        if token == "{{":
            pieces.append("{")
        elif token == "}}":
            pieces.append("}")
        else:
            index = int(match.group(1))
            name = f"p{index}"
            bound[name] = _param(params, index)
            pieces.append(f":{name}")
        position = match.end()
    pieces.append(template[position:].replace(":", "\\:"))

    clause = text("".join(pieces))
    if bound:
        clause = clause.bindparams(**bound)
    return clause


def _param(params: Sequence[Any], index: int) -> Any:
    if index >= len(params):
        raise QuerySearchError(
            f"Placeholder {{{index}}} has no parameter ({len(params)} supplied)"
        )
    return params[index]
