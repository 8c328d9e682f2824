from __future__ import annotations

import logging
import sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from package_search import __version__
from package_search.api.search import router as search_router
from package_search.core.config import Settings, load_settings
from package_search.domain.errors import (
    ConfigurationError,
    QueryExecutionError,
    SearchError,
)
from package_search.storage.db_manager import IndexDatabase
from package_search.storage.sqlite_index import SqliteIndexDatabase

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)

MASKED_QUERY_ERROR = "Package index query failed."


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[IndexDatabase] = None,
) -> FastAPI:
    """
    Build the API application.

    ``settings`` defaults to the environment (read at startup, not import).
    ``database`` defaults to a read-only SqliteIndexDatabase on
    ``settings.db_path``; it is opened on startup and closed on shutdown.
    """
    app = FastAPI(
        title="Package Search API",
        version=__version__,
        description="Read-only substring search over a package repository index.",
    )

    @app.on_event("startup")
    async def startup_event() -> None:
        """
        Resolve settings and open the index database. Startup fails if the
        database cannot be opened.
        """
        app.state.settings = settings if settings is not None else load_settings()
        db = database
        if db is None:
            db = SqliteIndexDatabase(app.state.settings.db_path)
        db.open()
        app.state.database = db

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        db = getattr(app.state, "database", None)
        if db is not None:
            db.close()

    @app.exception_handler(SearchError)
    async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
        message = str(exc)
        if isinstance(exc, QueryExecutionError) and app.state.settings.mask_errors:
            message = MASKED_QUERY_ERROR
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} while serving {request.url.path}: {exc}")
        else:
            logger.info(f"{type(exc).__name__} while serving {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    # Compress every body for clients that accept gzip. GZip must sit inside
    # the header middleware below so it sees a single-body response and can
    # recompute Content-Length for the compressed payload.
    app.add_middleware(GZipMiddleware, minimum_size=0)

    @app.middleware("http")
    async def allow_any_origin_on_gzip(request: Request, call_next):
        response = await call_next(request)
        if "gzip" in request.headers.get("accept-encoding", ""):
            response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """
        Lightweight health check endpoint. Does not touch storage.
        """
        return "API is healthy"

    app.include_router(search_router, tags=["search"])

    return app


app = create_app()


def run() -> None:
    """
    Console entrypoint: read configuration and serve with Uvicorn.
    """
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.critical(str(e))
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info(
        f"package-search-api is listening on port {settings.api_port} for {settings.db_path}"
    )
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
