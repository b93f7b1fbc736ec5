"""querysearch - full-text search augmentation for generated SQL queries."""

__version__ = "0.1.0"
