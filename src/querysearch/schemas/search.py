"""Search schemas for querysearch.

A search request combines three things:
1. A free-text term matched by the full-text table function
2. Structured field filters applied by the default provider
3. Sorting and a page window
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator


class SearchMode(str, Enum):
    """Full-text predicate syntax, which also decides the table function."""

    FREE_TEXT = "free_text"
    WEIGHTED_PREFIXES = "weighted_prefixes"
    WEIGHTED_PREFIXES_PLUS_REVERSE = "weighted_prefixes_plus_reverse"


class FilterOp(str, Enum):
    """Comparison operators supported by field filters."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    LIKE = "like"
    IN = "in"
    IS_NULL = "is_null"


FilterValue = Union[str, int, float, bool, date, datetime, None]


class FieldFilter(BaseModel):
    """A single column comparison."""

    field: str
    op: FilterOp = FilterOp.EQ
    value: Union[FilterValue, List[FilterValue]] = None

    @model_validator(mode="after")
    def check_value_shape(self) -> "FieldFilter":
        if self.op == FilterOp.IN:
            if not isinstance(self.value, list) or not self.value:
                raise ValueError("'in' filters need a non-empty list value")
        elif isinstance(self.value, list):
            raise ValueError(f"'{self.op.value}' filters need a scalar value")
        return self


class SortField(BaseModel):
    """A column to sort by."""

    field: str
    descending: bool = False


class SearchForm(BaseModel):
    """Search request parameters.

    Implements both the filter and the page capabilities, which is what the
    full-text provider requires.

    Paging:
    - page / page_size: zero-based page number and size
    - skip / take: raw row window
    - order_by_rank: order by full-text rank instead of the sort fields
    """

    term: Optional[str] = None
    filters: List[FieldFilter] = Field(default_factory=list)
    sort: List[SortField] = Field(default_factory=list)

    page: Optional[int] = Field(default=None, ge=0)
    page_size: Optional[int] = Field(default=None, gt=0)
    skip: Optional[int] = Field(default=None, ge=0)
    take: Optional[int] = Field(default=None, gt=0)
    order_by_rank: bool = False

    # FilterForm

    def get_term(self) -> Optional[str]:
        return self.term

    def get_filters(self) -> List[FieldFilter]:
        return list(self.filters)

    # PageForm

    def get_page(self) -> Optional[int]:
        return self.page

    def get_page_size(self) -> Optional[int]:
        return self.page_size

    def get_skip(self) -> Optional[int]:
        return self.skip

    def get_take(self) -> Optional[int]:
        return self.take

    def get_sorting(self) -> List[SortField]:
        return list(self.sort)

    def sort_by_term_rank(self) -> bool:
        return self.order_by_rank
