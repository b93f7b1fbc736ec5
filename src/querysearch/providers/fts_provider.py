"""Full-text query search provider for SQL Server table functions.

Term matching is delegated to ``CONTAINSTABLE`` / ``FREETEXTTABLE``. Filters,
sorting and paging from the default provider are kept by splicing its
rendered clauses onto a base query that joins the table to the table
function's ``(KEY, RANK)`` rows.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from loguru import logger

from querysearch.config import QuerySearchConfig
from querysearch.errors import CapabilityError
from querysearch.forms import FilterForm, PageForm
from querysearch.providers.default_provider import DefaultQuerySearchProvider
from querysearch.providers.expressions import expression_builder_for
from querysearch.providers.pagination import PaginationResult, calculate_window, rank_order_by
from querysearch.providers.parameters import parameterize
from querysearch.providers.splicer import SqlSplicer
from querysearch.schemas.search import SearchMode
from querysearch.sql.literals import quote_identifier
from querysearch.sql.query import Predicate, Query


class FtsQuerySearchProvider(DefaultQuerySearchProvider, ABC):
    """Query search provider with full-text term matching.

    Subclasses describe the target table through the abstract hooks and pick
    a ``search_mode``, either as a class attribute or a constructor argument.
    The forms passed in must implement both ``FilterForm`` and ``PageForm``.

    Example:
        class BlogPostSearchProvider(FtsQuerySearchProvider):
            search_mode = SearchMode.WEIGHTED_PREFIXES

            def get_table_name(self):
                return "[BlogPost]"

            def get_key_column_name(self):
                return "[Id]"

            def get_unique_column_sort(self):
                return "[Id] ASC"
    """

    # Reserved aliases; the default provider must never render these itself
    table_alias = "[ftst]"
    key_table_alias = "[KEY_TBL]"

    search_mode: Optional[SearchMode] = None

    def __init__(
        self,
        config: Optional[QuerySearchConfig] = None,
        search_mode: Optional[SearchMode] = None,
    ):
        super().__init__(config)
        if search_mode is not None:
            self.search_mode = search_mode
        self.expression_builder = expression_builder_for(self.search_mode)
        self.splicer = SqlSplicer(self.table_alias, self.key_table_alias)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def get_table_name(self) -> str:
        """Table to search, e.g. ``[BlogPost]``."""

    @abstractmethod
    def get_key_column_name(self) -> str:
        """Key column joined to the table function's ``[KEY]``, e.g. ``[Id]``."""

    @abstractmethod
    def get_unique_column_sort(self) -> str:
        """Unique sort used to break rank ties, e.g. ``[Id] ASC``."""

    def get_search_columns(self, term: Optional[str]) -> Sequence[str]:
        """Columns passed to the table function; all full-text columns by default."""
        return ["*"]

    def build_term_conditions(self, term: Optional[str]) -> list[Predicate]:
        # The table function does the matching
        return []

    # ------------------------------------------------------------------
    # Query construction
    # ------------------------------------------------------------------

    def get_search_expression(self, term: Optional[str]) -> Optional[str]:
        return self.expression_builder.build(term)

    def create_base_query(self, term: Optional[str]) -> str:
        """Join the table to the table function; ``{0}`` is the predicate parameter."""
        table = quote_identifier(self.get_table_name())
        key = quote_identifier(self.get_key_column_name())
        columns = ", ".join(
            "*" if column == "*" else quote_identifier(column)
            for column in self.get_search_columns(term)
        )
        ta, kt = self.table_alias, self.key_table_alias
        return (
            f"SELECT {ta}.* FROM {table} AS {ta} "
            f"INNER JOIN {self.expression_builder.table_function}({table}, ({columns}), {{0}} ) "
            f"AS {kt} ON {ta}.{key} = {kt}.[KEY]"
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def apply_where(self, query: Query, form: FilterForm) -> Query:
        """Filter ``query`` by the form's term through the table function.

        Raises:
            CapabilityError: If the form is not also a PageForm
        """
        self._check_capabilities(form)

        raw_term = form.get_term()
        predicate = self.get_search_expression(raw_term)
        if predicate is None:
            logger.debug("Search term yields no full-text predicate, using default filtering")
            return super().apply_where(query, form)

        base_query = self.create_base_query(raw_term)

        # Let the default provider filter on top of the full-text join (as a derived table)
        filtered = super().apply_where(query.from_sql(base_query, predicate), form)
        rendered = filtered.to_sql()
        logger.trace(f"Rendered filtered full-text query: {rendered}")

        spliced = self.splicer.splice(base_query, rendered)
        return query.from_sql(spliced, predicate)

    def apply_pagination(self, query: Query, form: PageForm) -> PaginationResult:
        """Paginate ``query``, ordering by full-text rank when the form asks for it.

        Raises:
            CapabilityError: If the form is not also a FilterForm
            RewriteAssumptionError: If the rendered SQL cannot be rewritten
        """
        self._check_capabilities(form)

        raw_term = form.get_term()
        predicate = self.get_search_expression(raw_term)
        if predicate is None:
            logger.debug("Search term yields no full-text predicate, using default pagination")
            return super().apply_pagination(query, form)

        base_query = self.create_base_query(raw_term)
        if not query.is_raw:
            query = query.from_sql(base_query, predicate)
        untouched = query

        # Re-apply the filters so the outer query is complete
        query = super().apply_where(query, form)

        rank_sort = form.sort_by_term_rank()
        if not rank_sort:
            query = super().apply_pagination(query, form).query

        rendered = query.to_sql()
        logger.trace(f"Rendered paginated full-text query: {rendered}")
        sql = self.splicer.splice(base_query, rendered, reuse_base_line=True)

        if rank_sort:
            offset, fetch = calculate_window(form, self.mode, self.config)
            sql += "\n" + rank_order_by(
                self.key_table_alias,
                self.table_alias,
                self.get_unique_column_sort(),
                offset,
                fetch,
            )

        final_sql = parameterize(sql, self.expression_builder.table_function, predicate)
        return self.create_pagination_result(untouched.from_sql(final_sql, predicate), form, False)

    def _check_capabilities(self, form: object) -> None:
        if not isinstance(form, FilterForm) or not isinstance(form, PageForm):
            raise CapabilityError(
                "The form must implement both FilterForm and PageForm "
                "in order to support FtsQuerySearchProvider."
            )
