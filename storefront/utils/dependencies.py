# module storefront.utils.dependencies
"""
Dépendances FastAPI par requête.
- Stockage durable du navigateur: Redis (app.state.redis) sinon mémoire (dev).
- CartStore: stockage durable + session Starlette (marqueur de session de navigation).
- ApiClient: token de la requête (Bearer ou cookie), navigateur de la requête,
  client httpx partagé créé par le lifespan.
- exclusive_action: une action sensible à la fois par navigateur (checkout, annulation).
"""
from typing import Optional

import httpx
from fastapi import Depends, Request

from storefront.api.client import ApiClient
from storefront.api.tokens import StaticTokenProvider
from storefront.auth.identity import Identity, resolve_identity
from storefront.cart.storage import KeyValueStorage, MemoryStorage, RedisStorage
from storefront.cart.store import CartStore
from storefront.config import STOREFRONT_API_URL
from storefront.errors import PreconditionFailed
from storefront.utils.navigation import RecordingNavigator
from storefront.utils.security import CLIENT_COOKIE_NAME, get_request_token, request_location

STORAGE_TTL_SECONDS = 60 * 60 * 24 * 30


def get_client_id(request: Request) -> str:
    """Identifiant du navigateur (cookie longue durée posé par le middleware)."""
    return getattr(request.state, "client_id", None) or request.cookies.get(CLIENT_COOKIE_NAME) or "anonymous"


def get_storage(request: Request, client_id: str = Depends(get_client_id)) -> KeyValueStorage:
    client = getattr(request.app.state, "redis", None)
    if client is not None:
        return RedisStorage(client, namespace=f"client:{client_id}", ttl_seconds=STORAGE_TTL_SECONDS)
    stores = getattr(request.app.state, "memory_storages", None)
    if stores is None:
        stores = {}
        request.app.state.memory_storages = stores
    return stores.setdefault(client_id, MemoryStorage())


def get_cart(request: Request, storage: KeyValueStorage = Depends(get_storage)) -> CartStore:
    return CartStore(storage=storage, session=request.session)


def get_navigator() -> RecordingNavigator:
    return RecordingNavigator()


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    return getattr(request.app.state, "http_client", None)


async def get_api_client(
    request: Request,
    navigator: RecordingNavigator = Depends(get_navigator),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    client = ApiClient(
        base_url=getattr(request.app.state, "api_url", None) or STOREFRONT_API_URL,
        token_provider=StaticTokenProvider(get_request_token(request)),
        navigator=navigator,
        location=request_location(request),
        http_client=http_client,
    )
    try:
        yield client
    finally:
        await client.aclose()


async def get_identity(request: Request) -> Optional[Identity]:
    return await resolve_identity(get_request_token(request))


def exclusive_action(kind: str, busy_message: str):
    """
    Une seule action `kind` à la fois par navigateur (checkout, annulation).
    Une seconde requête concurrente est refusée (409) sans appel réseau.
    """
    def _dep(request: Request, client_id: str = Depends(get_client_id)):
        inflight = getattr(request.app.state, "inflight", None)
        if inflight is None:
            inflight = set()
            request.app.state.inflight = inflight
        key = (kind, client_id)
        if key in inflight:
            raise PreconditionFailed(busy_message, status_code=409)
        inflight.add(key)
        try:
            yield
        finally:
            inflight.discard(key)
    return _dep
