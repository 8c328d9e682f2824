"""
Connectivity check: open the configured index read-only and print the SQLite
version it reports.
"""
from __future__ import annotations

import logging
import sys
from typing import Mapping, Optional

from package_search.core.config import load_settings
from package_search.domain.errors import ConfigurationError, QueryExecutionError
from package_search.storage.sqlite_index import SqliteIndexDatabase

logger = logging.getLogger(__name__)


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    try:
        settings = load_settings(environ)
        db = SqliteIndexDatabase(settings.db_path)
        version = db.server_version()
    except (ConfigurationError, QueryExecutionError) as e:
        logger.critical(str(e))
        return 1

    print(version)
    return 0


if __name__ == "__main__":
    sys.exit(main())
