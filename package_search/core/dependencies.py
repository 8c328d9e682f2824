from fastapi import Request

from package_search.core.config import Settings
from package_search.services.search import PackageSearchService
from package_search.storage.db_manager import IndexDatabase


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> IndexDatabase:
    return request.app.state.database


def get_search_service(request: Request) -> PackageSearchService:
    settings = get_settings(request)
    return PackageSearchService(get_database(request), max_results=settings.max_results)
