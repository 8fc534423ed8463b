"""A small page-based key/value store kept in a plain-text file, with a simple B+ tree index."""

__version__ = "0.1.0"
__all__ = ["app", "bptree", "database", "pagefile"]