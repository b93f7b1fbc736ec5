"""Execution of search queries."""

from querysearch.repository.search_result_repository import SearchResultRepository

__all__ = ["SearchResultRepository"]
