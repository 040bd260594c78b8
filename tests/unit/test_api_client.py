import httpx
import pytest

from storefront.api.client import ApiClient
from storefront.api.errors import (
    NetworkError,
    ProtocolError,
    RateLimited,
    RequestFailed,
    RequestTimeout,
    Unauthorized,
    ValidationFailed,
)
from storefront.api.tokens import CallableTokenProvider, StaticTokenProvider

API_URL = "http://backend.test"


def _client(handler, token=None, navigator=None, location="/cart?step=2"):
    return ApiClient(
        base_url=API_URL,
        token_provider=StaticTokenProvider(token),
        navigator=navigator,
        location=location,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_bearer_token_attached_when_present():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"ok": True})

    res = await _client(handler, token="abc").request("GET", "/auth/me")
    assert res.data == {"ok": True}
    assert seen["auth"] == "Bearer abc"


@pytest.mark.asyncio
async def test_token_provider_failure_sends_unauthenticated():
    seen = {}

    async def _broken():
        raise RuntimeError("identity provider down")

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={})

    client = ApiClient(
        base_url=API_URL,
        token_provider=CallableTokenProvider(_broken),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    await client.request("GET", "/batch/get")
    assert seen["auth"] is None


@pytest.mark.asyncio
async def test_401_with_token_raises_without_navigation(navigator):
    client = _client(lambda r: httpx.Response(401, json={"error": "Token expired"}), token="abc", navigator=navigator)
    with pytest.raises(Unauthorized) as exc:
        await client.request("GET", "/student/orders")
    assert exc.value.had_token is True
    assert exc.value.redirect_url is None
    assert exc.value.message == "Token expired"
    assert navigator.pending is None


@pytest.mark.asyncio
async def test_401_without_token_navigates_to_sign_in(navigator):
    client = _client(lambda r: httpx.Response(401, json={}), navigator=navigator)
    with pytest.raises(Unauthorized) as exc:
        await client.request("GET", "/student/orders")
    expected = "/sign-in?redirect_url=%2Fcart%3Fstep%3D2"
    assert exc.value.redirect_url == expected
    assert navigator.pending.url == expected
    assert navigator.pending.delay == 0


@pytest.mark.asyncio
async def test_429_uses_retry_after_header():
    client = _client(lambda r: httpx.Response(429, json={"error": "slow down"}, headers={"Retry-After": "30"}))
    with pytest.raises(RateLimited) as exc:
        await client.request("POST", "/payments/create-session", body={"items": []})
    assert exc.value.message == "Too many attempts. Please try again after 30 seconds."
    assert exc.value.retry_after == "30"


@pytest.mark.asyncio
async def test_429_without_header_falls_back_to_server_error_then_generic():
    with pytest.raises(RateLimited) as exc:
        await _client(lambda r: httpx.Response(429, json={"error": "Quota exceeded"})).request("GET", "/x")
    assert exc.value.message == "Quota exceeded"

    with pytest.raises(RateLimited) as exc:
        await _client(lambda r: httpx.Response(429, text="nope")).request("GET", "/x")
    assert exc.value.message == "Too many attempts. Please try again later."


@pytest.mark.asyncio
async def test_validation_errors_are_joined():
    body = {"errors": [{"path": "email", "msg": "Invalid email"}, {"msg": "Name required"}]}
    client = _client(lambda r: httpx.Response(400, json=body))
    with pytest.raises(ValidationFailed) as exc:
        await client.request("POST", "/student/register", body={})
    assert exc.value.message == "Validation errors: email: Invalid email; Name required"
    assert len(exc.value.errors) == 2
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_server_error_message_or_default():
    with pytest.raises(RequestFailed) as exc:
        await _client(lambda r: httpx.Response(500, json={"error": "Database error"})).request("GET", "/x")
    assert exc.value.message == "Database error"
    assert exc.value.status_code == 500

    with pytest.raises(RequestFailed) as exc:
        await _client(lambda r: httpx.Response(503, text="<html>")).request("GET", "/x", default_error="Failed to fetch batches")
    assert exc.value.message == "Failed to fetch batches"


@pytest.mark.asyncio
async def test_non_json_success_is_protocol_error():
    client = _client(lambda r: httpx.Response(200, text="<html>ok</html>", headers={"content-type": "text/html"}))
    with pytest.raises(ProtocolError):
        await client.request("GET", "/batch/get")


@pytest.mark.asyncio
async def test_timeout_is_classified():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestTimeout):
        await _client(handler).request("GET", "/batch/get")


@pytest.mark.asyncio
async def test_connection_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as exc:
        await _client(handler).request("GET", "/batch/get")
    assert "connection refused" in exc.value.message


@pytest.mark.asyncio
async def test_owned_http_client_is_closed():
    client = ApiClient(base_url=API_URL)
    async with client:
        pass
    assert client._http.is_closed
