"""
Exception hierarchy for the package search API.

The API layer registers a handler per class (see ``package_search.main``), so
each exception maps onto exactly one HTTP status.
"""
from __future__ import annotations


class SearchError(Exception):
    """Base class for every error raised while serving a search request."""

    status_code: int = 500


class InputValidationError(SearchError):
    """The caller-supplied search term is too long or has disallowed characters."""

    status_code = 400


class QueryExecutionError(SearchError):
    """The storage layer failed while executing the query or reading rows."""

    status_code = 400


class QueryCancelledError(QueryExecutionError):
    """The query was interrupted because its request ran out of time."""


class SerializationError(SearchError):
    """A row value has a type that cannot be represented as JSON."""

    status_code = 500


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""
