"""
Read-only package search API over a SQLite repository index.
"""

__version__ = "0.1.0"
