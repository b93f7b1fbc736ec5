"""Capability protocols for the forms consumed by providers."""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from querysearch.schemas.search import FieldFilter, SortField


@runtime_checkable
class FilterForm(Protocol):
    """A form that supplies a search term and field filters."""

    def get_term(self) -> Optional[str]: ...

    def get_filters(self) -> Sequence[FieldFilter]: ...


@runtime_checkable
class PageForm(Protocol):
    """A form that supplies sorting and a page window."""

    def get_page(self) -> Optional[int]: ...

    def get_page_size(self) -> Optional[int]: ...

    def get_skip(self) -> Optional[int]: ...

    def get_take(self) -> Optional[int]: ...

    def get_sorting(self) -> List[SortField]: ...

    def sort_by_term_rank(self) -> bool: ...
