"""Generic query search provider: filters, term matching, sorting and paging."""

from typing import List, Optional, Sequence

from loguru import logger

from querysearch.config import ConfigManager, PaginationMode, QuerySearchConfig
from querysearch.forms import FilterForm, PageForm
from querysearch.providers.pagination import (
    PaginationResult,
    calculate_window,
    create_pagination_result,
)
from querysearch.schemas.search import FieldFilter, FilterOp
from querysearch.sql.literals import quote_identifier
from querysearch.sql.query import (
    OPERATORS,
    AnyOf,
    Condition,
    OrderTerm,
    Predicate,
    Query,
    parse_sort_terms,
)


def condition_for(field_filter: FieldFilter) -> Condition:
    column = quote_identifier(field_filter.field)
    operator = OPERATORS[field_filter.op.value]
    if field_filter.op == FilterOp.IN:
        return Condition(column, operator, tuple(field_filter.value))
    if field_filter.op == FilterOp.IS_NULL:
        is_null = True if field_filter.value is None else bool(field_filter.value)
        return Condition(column, operator, (is_null,))
    return Condition(column, operator, (field_filter.value,))


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally (SQL Server bracket syntax)."""
    return term.replace("[", "[[]").replace("%", "[%]").replace("_", "[_]")


class DefaultQuerySearchProvider:
    """Applies the ordinary parts of a search form to a query.

    Subclasses customise term matching through ``get_term_columns`` and
    deterministic paging through ``get_unique_column_sort``.
    """

    def __init__(self, config: Optional[QuerySearchConfig] = None):
        self.config = config or ConfigManager().config

    @property
    def mode(self) -> PaginationMode:
        return self.config.pagination_mode

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def get_term_columns(self) -> Sequence[str]:
        """Columns matched with LIKE against the term. None by default."""
        return ()

    def get_unique_column_sort(self) -> Optional[str]:
        """Sort that makes row order unique, e.g. ``[Id] ASC``. None by default."""
        return None

    def build_term_conditions(self, term: Optional[str]) -> List[Predicate]:
        """Conditions that match ``term``: a LIKE over every term column."""
        columns = self.get_term_columns()
        if term is None or not term.strip() or not columns:
            return []
        pattern = f"%{escape_like(term.strip())}%"
        likes = tuple(Condition(quote_identifier(c), "LIKE", (pattern,)) for c in columns)
        return [likes[0] if len(likes) == 1 else AnyOf(likes)]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def apply_where(self, query: Query, form: FilterForm) -> Query:
        conditions: List[Predicate] = [condition_for(f) for f in form.get_filters()]
        conditions.extend(self.build_term_conditions(form.get_term()))
        if not conditions:
            return query
        logger.debug(f"Applying {len(conditions)} filter condition(s) to {query.source[:60]}")
        return query.where(*conditions)

    def apply_sorting(self, query: Query, form: PageForm) -> Query:
        terms = [OrderTerm(quote_identifier(s.field), s.descending) for s in form.get_sorting()]
        unique_sort = self.get_unique_column_sort()
        if unique_sort:
            seen = {t.column for t in terms}
            terms.extend(t for t in parse_sort_terms(unique_sort) if t.column not in seen)
        if not terms:
            return query
        return query.order_by(*terms)

    def apply_pagination(self, query: Query, form: PageForm) -> PaginationResult:
        query = self.apply_sorting(query, form)
        offset, fetch = calculate_window(form, self.mode, self.config)
        logger.debug(f"Paginating with offset={offset} fetch={fetch} mode={self.mode.value}")
        return self.create_pagination_result(query.paginate(offset, fetch), form, True)

    def create_pagination_result(
        self, query: Query, form: PageForm, is_applied: bool
    ) -> PaginationResult:
        return create_pagination_result(query, form, self.mode, self.config, is_applied)
