"""Pydantic schemas for search requests."""

from querysearch.schemas.search import (
    FieldFilter,
    FilterOp,
    SearchForm,
    SearchMode,
    SortField,
)

__all__ = [
    "FieldFilter",
    "FilterOp",
    "SearchForm",
    "SearchMode",
    "SortField",
]
