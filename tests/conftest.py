"""
Shared pytest fixtures: a seeded SQLite repository index and API clients.
"""

import sqlite3
from pathlib import Path
from typing import Callable, Dict, Iterable

import pytest
from fastapi.testclient import TestClient

from package_search.core.config import Settings
from package_search.main import create_app
from package_search.storage.sqlite_index import SqliteIndexDatabase

REPOSITORY_SCHEMA = """
CREATE TABLE repository (
    name TEXT NOT NULL,
    v_readable TEXT,
    description TEXT,
    arch TEXT,
    kind TEXT,
    tags TEXT,
    installed_size INTEGER,
    maintainer TEXT,
    license TEXT,
    source_repository TEXT,
    mandatory_dependencies TEXT,
    index_timestamp INTEGER
)
"""

SEARCH_COLUMNS = [
    "name",
    "version",
    "description",
    "arch",
    "kind",
    "tags",
    "installed size",
    "maintainer",
    "license",
    "repository",
    "dependencies",
]


def make_package(name: str, index_timestamp: int = 1, **overrides) -> Dict:
    row = {
        "name": name,
        "v_readable": "1.0.0-1",
        "description": f"The {name} package",
        "arch": "amd64",
        "kind": "binary",
        "tags": "cli,tools",
        "installed_size": 2048,
        "maintainer": "Jane Doe <jane@example.org>",
        "license": "MIT",
        "source_repository": "https://example.org/core",
        "mandatory_dependencies": "libc",
        "index_timestamp": index_timestamp,
    }
    row.update(overrides)
    return row


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    """Create an empty repository index on disk."""
    path = tmp_path / "index.db"
    conn = sqlite3.connect(path)
    conn.execute(REPOSITORY_SCHEMA)
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def seed(index_path: Path) -> Callable[[Iterable[Dict]], None]:
    """Return a function that inserts package rows into the index."""

    def _seed(packages: Iterable[Dict]) -> None:
        conn = sqlite3.connect(index_path)
        for pkg in packages:
            columns = ", ".join(pkg)
            placeholders = ", ".join("?" for _ in pkg)
            conn.execute(
                f"INSERT INTO repository ({columns}) VALUES ({placeholders})",
                tuple(pkg.values()),
            )
        conn.commit()
        conn.close()

    return _seed


@pytest.fixture
def settings(index_path: Path) -> Settings:
    return Settings(db_path=str(index_path), request_timeout=5.0)


@pytest.fixture
def database(index_path: Path):
    """Opened read-only handle on the seeded index."""
    db = SqliteIndexDatabase(index_path)
    db.open()
    yield db
    db.close()


@pytest.fixture
def client(settings: Settings):
    """API client with startup/shutdown events run against the seeded index."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
