"""Exceptions raised by query search providers."""


class QuerySearchError(Exception):
    """Base class for query search failures."""


class CapabilityError(QuerySearchError):
    """Raised when a form does not implement both the filter and page capabilities."""


class ConfigurationError(QuerySearchError):
    """Raised when a provider is configured incorrectly.

    Examples: no search mode set, an identifier that cannot be quoted safely,
    or an upstream alias that collides with one of the reserved aliases.
    """


class RewriteAssumptionError(QuerySearchError):
    """Raised when rendered SQL does not have the shape the rewriter relies on.

    The splicer and parameter rewriter work on rendered SQL text. When an
    expected marker (derived-table alias line, table function call, predicate
    literal) is missing, the query is rejected instead of emitting malformed SQL.
    """

    def __init__(self, message: str, sql: str | None = None):
        super().__init__(message)
        self.sql = sql
