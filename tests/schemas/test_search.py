"""Tests for search schemas."""

from datetime import date

import pytest
from pydantic import ValidationError

from querysearch.forms import FilterForm, PageForm
from querysearch.schemas.search import FieldFilter, FilterOp, SearchForm, SearchMode, SortField


def test_search_form_defaults():
    """An empty form has no term, filters or paging."""
    form = SearchForm()

    assert form.get_term() is None
    assert form.get_filters() == []
    assert form.get_sorting() == []
    assert form.get_page() is None
    assert form.get_take() is None
    assert form.sort_by_term_rank() is False


def test_search_form_implements_both_capabilities():
    form = SearchForm(term="whale")
    assert isinstance(form, FilterForm)
    assert isinstance(form, PageForm)


def test_search_form_from_request_payload():
    """Forms parse from plain JSON-style dicts."""
    form = SearchForm.model_validate(
        {
            "term": "blue whale",
            "filters": [
                {"field": "Category", "value": "news"},
                {"field": "Status", "op": "in", "value": ["draft", "live"]},
                {"field": "Published", "op": "gte", "value": "2024-01-01"},
            ],
            "sort": [{"field": "Created", "descending": True}],
            "page": 2,
            "page_size": 50,
            "order_by_rank": True,
        }
    )

    assert form.get_filters()[1].op == FilterOp.IN
    assert form.get_sorting() == [SortField(field="Created", descending=True)]
    assert (form.get_page(), form.get_page_size()) == (2, 50)
    assert form.sort_by_term_rank()


def test_getters_return_copies():
    form = SearchForm(sort=[SortField(field="Id")])
    form.get_sorting().clear()
    assert form.sort == [SortField(field="Id")]


@pytest.mark.parametrize(
    "payload",
    [
        {"page": -1},
        {"page_size": 0},
        {"skip": -5},
        {"take": 0},
    ],
)
def test_invalid_paging_is_rejected(payload):
    with pytest.raises(ValidationError):
        SearchForm(**payload)


def test_in_filter_needs_a_list():
    with pytest.raises(ValidationError):
        FieldFilter(field="Status", op=FilterOp.IN, value="draft")
    with pytest.raises(ValidationError):
        FieldFilter(field="Status", op=FilterOp.IN, value=[])


def test_scalar_filter_rejects_a_list():
    with pytest.raises(ValidationError):
        FieldFilter(field="Status", value=["draft"])


def test_filter_accepts_dates():
    field_filter = FieldFilter(field="Published", op=FilterOp.LT, value=date(2024, 1, 1))
    assert field_filter.value == date(2024, 1, 1)


def test_search_mode_values():
    assert SearchMode("weighted_prefixes_plus_reverse") == SearchMode.WEIGHTED_PREFIXES_PLUS_REVERSE
    assert [mode.value for mode in SearchMode] == [
        "free_text",
        "weighted_prefixes",
        "weighted_prefixes_plus_reverse",
    ]
