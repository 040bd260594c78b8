from fastapi import FastAPI, Request
from fastapi.responses import Response
from fastapi.testclient import TestClient

from storefront.utils import security as security_mod
from storefront.utils.navigation import RecordingNavigator
from storefront.utils.security import (
    COOKIE_NAME,
    clear_session_cookie,
    get_request_token,
    request_location,
    set_session_cookie,
)


def _make_app():
    app = FastAPI()

    @app.get("/whoami")
    def whoami(request: Request):
        return {"token": get_request_token(request), "location": request_location(request)}

    return app


def test_set_and_clear_session_cookie(monkeypatch):
    monkeypatch.setattr(security_mod, "COOKIE_SECURE", True, raising=False)
    resp = Response()

    set_session_cookie(resp, "abc123")
    low = (resp.headers.get("set-cookie") or "").lower()
    assert "sb_access=abc123" in low
    assert "httponly" in low
    assert "path=/" in low
    assert "samesite=lax" in low
    assert "secure" in low

    resp2 = Response()
    clear_session_cookie(resp2)
    h2 = (resp2.headers.get("set-cookie") or "").lower()
    assert "sb_access=" in h2
    assert "max-age=0" in h2


def test_bearer_header_wins_over_cookie():
    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    assert client.get("/whoami", headers={"Authorization": "Bearer header-token"}).json()["token"] == "header-token"
    assert client.get("/whoami").json()["token"] == "cookie-token"


def test_no_token():
    assert TestClient(_make_app()).get("/whoami").json()["token"] is None


def test_request_location_prefers_same_host_referer():
    client = TestClient(_make_app())
    r = client.get("/whoami?x=1", headers={"Referer": "http://testserver/checkout/success?session_id=cs_1"})
    assert r.json()["location"] == "/checkout/success?session_id=cs_1"

    r2 = client.get("/whoami?x=1", headers={"Referer": "https://evil.example/cart"})
    assert r2.json()["location"] == "/whoami?x=1"


def test_recording_navigator_responses():
    nav = RecordingNavigator()
    assert nav.redirect() is None

    nav.navigate("https://pay.example/cs_1")
    redirect = nav.redirect()
    assert redirect.status_code == 303
    assert redirect.headers["location"] == "https://pay.example/cs_1"

    nav.navigate("/checkout/cancel?error=card_declined", delay=3)
    assert nav.redirect() is None
    resp = nav.apply(Response())
    assert resp.headers["Refresh"] == "3; url=/checkout/cancel?error=card_declined"
