"""Query model and SQL text helpers."""

from querysearch.sql.query import AnyOf, Condition, OrderTerm, Query, parse_sort_terms

__all__ = ["AnyOf", "Condition", "OrderTerm", "Query", "parse_sort_terms"]
