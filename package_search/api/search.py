from __future__ import annotations

import asyncio
import logging
import threading

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import PlainTextResponse

from package_search.core.config import Settings
from package_search.core.dependencies import get_search_service, get_settings
from package_search.services.search import PackageSearchService

logger = logging.getLogger(__name__)
router = APIRouter()

TIMEOUT_MESSAGE = "Timeout exceeded"


@router.get("/")
async def search_packages(
    package: str = Query(default="", description="Substring to match against package names."),
    service: PackageSearchService = Depends(get_search_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Search the index for packages whose name contains ``package``.

    The whole pipeline (validation, query, encoding) runs in a worker thread
    and races a timer of ``settings.request_timeout`` seconds. If the timer
    wins, 408 is returned and the cancellation event interrupts the query that
    is still running in SQLite.

    Validation and storage errors propagate to the exception handlers
    registered in ``package_search.main``.
    """
    cancel = threading.Event()
    try:
        body = await asyncio.wait_for(
            asyncio.to_thread(service.search, package, cancel),
            timeout=settings.request_timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Search for '{package}' exceeded {settings.request_timeout}s, cancelling query"
        )
        return PlainTextResponse(TIMEOUT_MESSAGE, status_code=status.HTTP_408_REQUEST_TIMEOUT)
    finally:
        # Also reached when the client disconnects and this task is cancelled.
        cancel.set()

    return Response(
        content=body,
        status_code=status.HTTP_200_OK,
        media_type="application/json",
        headers={"Content-Length": str(len(body))},
    )
