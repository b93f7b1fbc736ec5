"""Page window calculation and pagination results."""

from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy import TextClause

from querysearch.config import PaginationMode, QuerySearchConfig
from querysearch.forms import PageForm
from querysearch.sql.query import Query, parse_sort_terms


@dataclass(frozen=True)
class PaginationResult:
    """A paginated query plus the paging metadata it was built from.

    ``is_applied`` is True when the page window is part of the query's
    structured clauses, and False when it is baked into raw SQL.
    """

    query: Query
    mode: PaginationMode
    page: Optional[int]
    page_size: Optional[int]
    skip: Optional[int]
    take: Optional[int]
    is_applied: bool

    def statement(self) -> TextClause:
        return self.query.to_statement()


def get_page_size(form: PageForm, config: QuerySearchConfig) -> int:
    """Requested page size clamped to the configured maximum, or the default."""
    page_size = form.get_page_size()
    if page_size is None or page_size <= 0:
        return config.default_page_size
    return min(page_size, config.max_page_size)


def calculate_window(
    form: PageForm, mode: PaginationMode, config: QuerySearchConfig
) -> Tuple[int, int]:
    """Compute ``(offset, fetch)`` for a page form.

    skip_and_take: offset is the skip (or 0), fetch is the take clamped to
    ``max_take`` (or ``max_take`` itself).

    page_and_page_size: offset is ``page * page_size``; without a page the
    skip is rounded down to a page boundary.
    """
    skip = form.get_skip()

    if mode == PaginationMode.SKIP_AND_TAKE:
        take = form.get_take()
        offset = skip if skip is not None else 0
        fetch = min(take, config.max_take) if take is not None else config.max_take
        return offset, fetch

    page_size = get_page_size(form, config)
    page = form.get_page()
    if page is None:
        page = skip // page_size if skip is not None else 0
    return page * page_size, page_size


def rank_order_by(
    key_table_alias: str, table_alias: str, unique_sort: str, offset: int, fetch: int
) -> str:
    """``ORDER BY <key>.RANK DESC, <alias>.<unique sort> OFFSET o ROWS FETCH NEXT f ROWS ONLY``

    The unique sort breaks rank ties so repeated calls page consistently.
    """
    tie_breakers = ", ".join(term.render(table_alias) for term in parse_sort_terms(unique_sort))
    return (
        f"ORDER BY {key_table_alias}.RANK DESC, {tie_breakers} "
        f"OFFSET {offset} ROWS FETCH NEXT {fetch} ROWS ONLY"
    )


def create_pagination_result(
    query: Query,
    form: PageForm,
    mode: PaginationMode,
    config: QuerySearchConfig,
    is_applied: bool,
) -> PaginationResult:
    if mode == PaginationMode.SKIP_AND_TAKE:
        page, page_size = None, None
    else:
        page_size = get_page_size(form, config)
        page = form.get_page()
        if page is None:
            skip = form.get_skip()
            page = skip // page_size if skip is not None else 0
    return PaginationResult(
        query=query,
        mode=mode,
        page=page,
        page_size=page_size,
        skip=form.get_skip(),
        take=form.get_take(),
        is_applied=is_applied,
    )
