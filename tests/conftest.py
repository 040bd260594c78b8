import os

# Pas de Redis réel ni d'init fastapi-limiter pendant les tests
os.environ.setdefault("USE_FAKE_REDIS_FOR_TESTS", "1")
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import types
from typing import Generator
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.api.client import ApiClient
from storefront.api.tokens import StaticTokenProvider
from storefront.app import app as fastapi_app
from storefront.auth.identity import Identity
from storefront.cart.storage import MemoryStorage
from storefront.cart.store import CartStore
from storefront.utils.dependencies import get_http_client, get_identity
from storefront.utils.navigation import RecordingNavigator

API_URL = "http://backend.test"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class FakeBackend:
    """
    API backend simulée via httpx.MockTransport.
    - on(method, path, ...): réponse JSON fixe ou handler(request) -> httpx.Response
    - calls: requêtes reçues, dans l'ordre
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, status=200, json=None, headers=None, handler=None):
        self.routes[(method.upper(), path)] = handler or (status, json, headers)

    def called(self, method, path):
        return [r for r in self.calls if r.method == method.upper() and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        status, body, headers = route
        return httpx.Response(status, json=body if body is not None else {}, headers=headers)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http_client(backend):
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def api_client(http_client, navigator):
    """Client API authentifié (token présent) branché sur le backend simulé."""
    return ApiClient(
        base_url=API_URL,
        token_provider=StaticTokenProvider("user-token"),
        navigator=navigator,
        location="/cart",
        http_client=http_client,
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage):
    # Session de navigation déjà initialisée: le panier persistant est relu
    return CartStore(storage=storage, session={"cart_session_initialized": "1"})


@pytest.fixture
def identity():
    return Identity(user_id="u1", token="user-token", email="ana@example.com", full_name="Ana Lopez", phone="+100")


@pytest.fixture(autouse=True)
def mock_supabase(monkeypatch):
    """Aucun appel Supabase: token inconnu => utilisateur non connecté."""
    fake = MagicMock()
    fake.auth.get_user.return_value = types.SimpleNamespace(user=None)
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: fake)
    return fake


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app, http_client) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_http_client] = lambda: http_client
    try:
        with TestClient(app) as c:
            app.state.api_url = API_URL
            app.state.redis.flushall()
            app.state.inflight.clear()
            app.state._rl_store = {}
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def signed_in(app, identity, monkeypatch):
    """Utilisateur connecté pour les dépendances get_identity et le flux de retour de paiement."""
    async def _resolve(token):
        return identity

    app.dependency_overrides[get_identity] = lambda: identity
    monkeypatch.setattr("storefront.checkout.views.resolve_identity", _resolve)
    return identity


@pytest.fixture
def scholar_item():
    return {
        "id": "scholar-batch-12",
        "name": "Scholar",
        "price": 120,
        "start_date": "2025-03-01",
        "end_date": "2025-05-31",
        "batch_number": 12,
    }
