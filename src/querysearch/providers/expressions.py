"""Full-text predicate builders, one per search mode.

Each builder turns a raw search term into the predicate text passed to the
full-text table function, or ``None`` when the term yields nothing to search.
"""

import re
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from querysearch.errors import ConfigurationError
from querysearch.schemas.search import SearchMode

WORD_SEPARATORS = re.compile(r"[ \t\r\n]+")
WEIGHT_QUANTUM = Decimal("0.01")

FREETEXTTABLE = "FREETEXTTABLE"
CONTAINSTABLE = "CONTAINSTABLE"


def split_words(term: Optional[str]) -> List[str]:
    """Split a term on spaces, tabs and line breaks, dropping empty entries."""
    if term is None or not term.strip():
        return []
    return [word for word in WORD_SEPARATORS.split(term) if word]


def format_weight(length: int, max_length: int) -> str:
    """Format ``length / max_length`` with at most two decimals: 0.8, 0.67, 1."""
    weight = Decimal(length / max_length).quantize(WEIGHT_QUANTUM, rounding=ROUND_HALF_UP)
    return format(weight.normalize(), "f")


def weighted_term(word: str, max_length: int) -> str:
    # Weight uses the length before quotes are stripped
    return f'"{word.replace(chr(34), "")}*" WEIGHT ({format_weight(len(word), max_length)})'


def isabout(words: List[str]) -> str:
    max_length = max(len(word) for word in words)
    return "ISABOUT(" + ", ".join(weighted_term(word, max_length) for word in words) + ")"


class SearchExpressionBuilder(ABC):
    """Builds the predicate for one search mode."""

    mode: SearchMode
    table_function: str

    @abstractmethod
    def build(self, term: Optional[str]) -> Optional[str]:
        """Return the full-text predicate for ``term``, or None if there is nothing to match."""


class FreeTextExpressionBuilder(SearchExpressionBuilder):
    """Passes the term through; matching semantics belong to the engine."""

    mode = SearchMode.FREE_TEXT
    table_function = FREETEXTTABLE

    def build(self, term: Optional[str]) -> Optional[str]:
        if term is None or not term.strip():
            return None
        return term


class WeightedPrefixExpressionBuilder(SearchExpressionBuilder):
    """``ISABOUT("blue*" WEIGHT (0.8), "whale*" WEIGHT (1))``

    Every word becomes a prefix term weighted by its length relative to the
    longest word.
    """

    mode = SearchMode.WEIGHTED_PREFIXES
    table_function = CONTAINSTABLE

    def words(self, term: Optional[str]) -> List[str]:
        return split_words(term)

    def build(self, term: Optional[str]) -> Optional[str]:
        words = self.words(term)
        if not words:
            return None
        return isabout(words)


class WeightedPrefixPlusReverseExpressionBuilder(WeightedPrefixExpressionBuilder):
    """Like weighted prefixes, plus every word reversed as an extra term.

    The reversed words let a reversed-content column match suffixes.
    """

    mode = SearchMode.WEIGHTED_PREFIXES_PLUS_REVERSE

    def words(self, term: Optional[str]) -> List[str]:
        words = split_words(term)
        return words + [word[::-1] for word in words]


_BUILDERS = {
    SearchMode.FREE_TEXT: FreeTextExpressionBuilder,
    SearchMode.WEIGHTED_PREFIXES: WeightedPrefixExpressionBuilder,
    SearchMode.WEIGHTED_PREFIXES_PLUS_REVERSE: WeightedPrefixPlusReverseExpressionBuilder,
}


def expression_builder_for(mode: Optional[SearchMode | str]) -> SearchExpressionBuilder:
    """Select the builder for ``mode``.

    Raises:
        ConfigurationError: If the mode is unset or not a known search mode
    """
    if mode is None:
        raise ConfigurationError("SearchMode is not set.")
    try:
        return _BUILDERS[SearchMode(mode)]()
    except ValueError as e:
        raise ConfigurationError(f"SearchMode is not set correctly: {mode!r}") from e
