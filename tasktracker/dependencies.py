"""Shared FastAPI dependencies — objects created by the application lifespan."""

from fastapi import Request

from tasktracker.attendance.scanner import QRScanner
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.client.uploads import ObjectStorage
from tasktracker.common.polling import CachedResource


def get_api_client(request: Request) -> ApiClient:
    return request.app.state.api_client


def get_store(request: Request) -> CredentialStore:
    return request.app.state.api_client.store


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.object_storage


def get_cache(name: str):
    """Dependency factory returning the named screen cache."""

    def _get(request: Request) -> CachedResource:
        return request.app.state.caches[name]

    return _get


def get_scanner(request: Request) -> QRScanner:
    return request.app.state.scanner


def get_caches(request: Request) -> dict[str, CachedResource]:
    return request.app.state.caches
