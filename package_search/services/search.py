"""
Package name search: term validation, query execution and result encoding.
"""
from __future__ import annotations

import logging
import re
from threading import Event
from typing import List, Optional

from package_search.domain.errors import InputValidationError
from package_search.domain.ordered_row import OrderedRow, encode_result_set
from package_search.storage.db_manager import IndexDatabase

logger = logging.getLogger(__name__)

MAX_TERM_LENGTH = 50
PACKAGE_NAME_RE = re.compile(r"[a-zA-Z0-9_-]+")

# Column order of this projection is the key order of every JSON row.
SEARCH_QUERY = """
    SELECT
        name,
        v_readable AS version,
        description,
        arch,
        kind,
        tags,
        installed_size AS "installed size",
        maintainer,
        license,
        source_repository AS repository,
        mandatory_dependencies AS dependencies
    FROM repository
    WHERE name LIKE ? ESCAPE '\\'
    ORDER BY index_timestamp DESC
    LIMIT ?
"""


def validate_search_term(term: str) -> str:
    """
    Check a caller-supplied search term.

    The empty term is valid and matches every package.

    Raises:
        InputValidationError: If the term is longer than 50 characters or
            contains anything other than English letters, digits, '-' and '_'.
    """
    if len(term) > MAX_TERM_LENGTH:
        raise InputValidationError(
            f"package length can not be greater than {MAX_TERM_LENGTH}."
        )
    if term and PACKAGE_NAME_RE.fullmatch(term) is None:
        raise InputValidationError(
            "Package name can only contain English alphabets, numbers, '-' and '_' characters."
        )
    return term


def like_pattern(term: str) -> str:
    """Build a substring LIKE pattern in which the term matches literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PackageSearchService:
    """
    Runs the search pipeline for one request: validate, execute, encode.

    The pipeline is synchronous and is meant to run in a worker thread; the
    ``cancel`` event lets the caller abort the in-flight query.
    """

    def __init__(self, db: IndexDatabase, max_results: int = 150):
        self.db = db
        self.max_results = max_results

    def find_packages(self, term: str, cancel: Optional[Event] = None) -> List[OrderedRow]:
        validate_search_term(term)
        rows = self.db.fetch_rows(
            SEARCH_QUERY,
            (like_pattern(term), self.max_results),
            cancel=cancel,
        )
        logger.debug(f"Search for '{term}' matched {len(rows)} packages")
        return rows[: self.max_results]

    def search(self, term: str, cancel: Optional[Event] = None) -> bytes:
        """
        Return the JSON-encoded result set for ``term``.

        Raises:
            InputValidationError: The term was rejected; storage is not touched.
            QueryExecutionError: Storage failed or the query was cancelled.
            SerializationError: A row carried a value JSON cannot represent.
        """
        return encode_result_set(self.find_packages(term, cancel))
