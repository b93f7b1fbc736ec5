"""Tests for recovering the predicate literal from spliced SQL."""

import pytest

from querysearch.errors import RewriteAssumptionError
from querysearch.providers.parameters import extract_predicate_literal, parameterize

PREDICATE = 'ISABOUT("blue*" WEIGHT (0.8), "whale*" WEIGHT (1))'


def spliced(literal: str, *outer_lines: str, function: str = "CONTAINSTABLE") -> str:
    base = (
        f"SELECT [ftst].* FROM [BlogPost] AS [ftst] INNER JOIN {function}([BlogPost], (*), "
        f"{literal} ) AS [KEY_TBL] ON [ftst].[Id] = [KEY_TBL].[KEY]"
    )
    return "\n".join([base, *outer_lines])


def test_parameterize_replaces_predicate_literal():
    sql = spliced(f"N'{PREDICATE}'", "WHERE [ftst].[Category] = N'news'")

    result = parameterize(sql, "CONTAINSTABLE", PREDICATE)

    assert "(*), {0} ) AS [KEY_TBL]" in result
    assert result.endswith("WHERE [ftst].[Category] = N'news'")
    assert "ISABOUT" not in result


def test_literal_with_escaped_quotes_is_recovered_whole():
    term = "o'brien' ) AS trap"
    sql = spliced("N'o''brien'' ) AS trap'", function="FREETEXTTABLE")

    assert extract_predicate_literal(sql, "FREETEXTTABLE") == "N'o''brien'' ) AS trap'"
    assert "(*), {0} ) AS [KEY_TBL]" in parameterize(sql, "FREETEXTTABLE", term)


def test_literal_with_braces_matches_unescaped_predicate():
    sql = spliced("N'{{0}} and more'", function="FREETEXTTABLE")

    result = parameterize(sql, "FREETEXTTABLE", "{0} and more")

    assert "(*), {0} ) AS" in result
    assert "more" not in result


def test_literals_before_the_call_are_ignored():
    sql = "SELECT N'decoy' AS [x]\n" + spliced("N'abc'", function="FREETEXTTABLE")

    assert extract_predicate_literal(sql, "FREETEXTTABLE") == "N'abc'"
    assert parameterize(sql, "FREETEXTTABLE", "abc").startswith("SELECT N'decoy' AS [x]")


def test_identical_literals_share_the_placeholder():
    sql = spliced("N'whale'", "WHERE [ftst].[Title] = N'whale'", function="FREETEXTTABLE")

    result = parameterize(sql, "FREETEXTTABLE", "whale")

    assert result.count("{0}") == 2


def test_other_literals_are_untouched():
    sql = spliced("N'whale'", "WHERE [ftst].[Title] = N'whales'", function="FREETEXTTABLE")

    result = parameterize(sql, "FREETEXTTABLE", "whale")

    assert result.endswith("WHERE [ftst].[Title] = N'whales'")
    assert result.count("{0}") == 1


def test_missing_table_function_is_rewrite_error():
    with pytest.raises(RewriteAssumptionError):
        parameterize("SELECT * FROM [BlogPost]", "CONTAINSTABLE", PREDICATE)


def test_missing_literal_is_rewrite_error():
    with pytest.raises(RewriteAssumptionError):
        parameterize(spliced("{0}"), "CONTAINSTABLE", PREDICATE)


def test_unterminated_literal_is_rewrite_error():
    with pytest.raises(RewriteAssumptionError):
        parameterize("CONTAINSTABLE([T], (*), N'open", "CONTAINSTABLE", "open")


def test_mismatched_literal_is_rewrite_error():
    sql = spliced("N'something else'")

    with pytest.raises(RewriteAssumptionError):
        parameterize(sql, "CONTAINSTABLE", PREDICATE)
