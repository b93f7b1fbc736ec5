"""Query search providers."""

from querysearch.providers.default_provider import DefaultQuerySearchProvider
from querysearch.providers.fts_provider import FtsQuerySearchProvider
from querysearch.providers.pagination import PaginationResult

__all__ = [
    "DefaultQuerySearchProvider",
    "FtsQuerySearchProvider",
    "PaginationResult",
]
