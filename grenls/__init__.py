"""Gren symbol extraction, a SQLite symbol index, and a workspace of open documents."""

__version__ = "0.1.0"

__all__ = ["documents", "extractor", "index", "symbols", "workspace"]