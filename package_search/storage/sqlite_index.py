"""
Query the package repository SQLite index in read-only mode.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import Event
from typing import Any, List, Optional, Sequence

from package_search.domain.errors import QueryCancelledError, QueryExecutionError
from package_search.domain.ordered_row import OrderedRow
from package_search.storage.db_manager import IndexDatabase

logger = logging.getLogger(__name__)

# Number of SQLite VM instructions between cancellation checks.
PROGRESS_INTERVAL = 1000


class SqliteIndexDatabase(IndexDatabase):
    """
    Read-only handle on the SQLite index.

    One instance is owned by the application. Each query runs on its own
    short-lived connection against the shared cache, so the handle can be used
    from several worker threads at once without locking.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._opened = False

    @property
    def uri(self) -> str:
        return f"{self.db_path.expanduser().resolve().as_uri()}?mode=ro&cache=shared"

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.uri, uri=True)
        # Invalid UTF-8 stored in a TEXT cell is replaced with U+FFFD.
        conn.text_factory = lambda b: b.decode("utf-8", "replace")
        return conn

    def open(self) -> None:
        """Open the index and check that it answers queries."""
        logger.debug(f"Opening index database: {self.uri}")
        try:
            version = self.server_version()
        except QueryExecutionError:
            logger.error(f"Index database could not be opened: {self.db_path}")
            raise
        self._opened = True
        logger.info(f"Opened index database {self.db_path} (SQLite {version})")

    def close(self) -> None:
        self._opened = False
        logger.info(f"Closed index database {self.db_path}")

    def server_version(self) -> str:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise QueryExecutionError(str(e)) from e
        try:
            return conn.execute("SELECT sqlite_version()").fetchone()[0]
        except sqlite3.Error as e:
            raise QueryExecutionError(str(e)) from e
        finally:
            conn.close()

    def fetch_rows(
        self,
        query: str,
        params: Sequence[Any] = (),
        cancel: Optional[Event] = None,
    ) -> List[OrderedRow]:
        if not self._opened:
            raise QueryExecutionError("index database is not open")

        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.error(f"Could not connect to index database: {e}")
            raise QueryExecutionError(str(e)) from e

        if cancel is not None:
            # A truthy return value makes SQLite abort the running statement
            # with "interrupted".
            conn.set_progress_handler(cancel.is_set, PROGRESS_INTERVAL)

        try:
            cursor = conn.execute(query, tuple(params))
            columns = [d[0] for d in cursor.description or ()]
            results: List[OrderedRow] = []
            for values in cursor:
                row = OrderedRow()
                for column, value in zip(columns, values):
                    row.set(column, value)
                results.append(row)
            return results
        except sqlite3.Error as e:
            if cancel is not None and cancel.is_set():
                logger.warning("Index query interrupted by cancellation")
                raise QueryCancelledError(f"query cancelled: {e}") from e
            logger.error(f"Index query failed: {e}")
            raise QueryExecutionError(str(e)) from e
        finally:
            conn.close()
