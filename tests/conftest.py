"""Common test fixtures."""

from typing import Optional, Sequence

import pytest

from querysearch.config import PaginationMode, QuerySearchConfig, reset_config_cache
from querysearch.providers.fts_provider import FtsQuerySearchProvider
from querysearch.schemas.search import SearchMode
from querysearch.sql.query import Query


class BlogPostSearchProvider(FtsQuerySearchProvider):
    """Full-text provider over a [BlogPost] table keyed by [Id]."""

    def __init__(
        self,
        config: Optional[QuerySearchConfig] = None,
        search_mode: Optional[SearchMode] = None,
        search_columns: Optional[Sequence[str]] = None,
    ):
        super().__init__(config, search_mode)
        self.search_columns = list(search_columns or ["*"])

    def get_table_name(self) -> str:
        return "[BlogPost]"

    def get_key_column_name(self) -> str:
        return "[Id]"

    def get_unique_column_sort(self) -> str:
        return "[Id] ASC"

    def get_search_columns(self, term: Optional[str]) -> Sequence[str]:
        return self.search_columns


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    """Isolate configuration from the real home directory and environment."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("QUERYSEARCH_CONFIG_DIR", str(tmp_path / ".querysearch"))
    for name in ("PAGINATION_MODE", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "MAX_TAKE", "LOG_LEVEL"):
        monkeypatch.delenv(f"QUERYSEARCH_{name}", raising=False)
    reset_config_cache()
    yield tmp_path
    reset_config_cache()


@pytest.fixture
def app_config() -> QuerySearchConfig:
    return QuerySearchConfig(
        env="test",
        pagination_mode=PaginationMode.PAGE_AND_PAGE_SIZE,
        default_page_size=20,
        max_page_size=100,
        max_take=1000,
    )


@pytest.fixture
def skip_take_config() -> QuerySearchConfig:
    return QuerySearchConfig(env="test", pagination_mode=PaginationMode.SKIP_AND_TAKE, max_take=50)


@pytest.fixture
def blog_query() -> Query:
    return Query.table("[BlogPost]")


@pytest.fixture
def blog_provider(app_config) -> BlogPostSearchProvider:
    return BlogPostSearchProvider(
        app_config,
        search_mode=SearchMode.WEIGHTED_PREFIXES,
        search_columns=["Title", "Body"],
    )


@pytest.fixture
def make_provider(app_config):
    """Factory for providers with a given search mode, columns and config."""

    def _make(
        search_mode: SearchMode = SearchMode.WEIGHTED_PREFIXES,
        search_columns: Optional[Sequence[str]] = None,
        config: Optional[QuerySearchConfig] = None,
    ) -> BlogPostSearchProvider:
        return BlogPostSearchProvider(config or app_config, search_mode, search_columns)

    return _make
