"""
Shared dependencies for the routers.

Provides the API client, the session token from the auth cookie, and the
per-request ``InventoryStore``.
"""

from typing import Optional

from fastapi import Depends, Request

from .api_client import InventoryApiClient, inventory_client
from .config import settings
from .exceptions import LoginRequired
from .store import InventoryStore


def get_api_client() -> InventoryApiClient:
    return inventory_client


def get_token(request: Request) -> Optional[str]:
    """Bearer token stored in the auth cookie."""
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


async def get_store(
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
) -> InventoryStore:
    """Fresh, unauthenticated store bound to the request's token."""
    return InventoryStore(client, get_token(request))


async def get_session_store(
    request: Request,
    store: InventoryStore = Depends(get_store),
) -> InventoryStore:
    """
    Store with a validated session and loaded cache.

    Raises:
        LoginRequired: When there is no token or the API rejects it
    """
    if not await store.initialize():
        raise LoginRequired(request.url.path)
    return store
