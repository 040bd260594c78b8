def test_checkout_redirects_to_payment_page(client, backend, signed_in, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    backend.on("POST", "/client/create", status=201, json={"message": "User created"})
    backend.on("POST", "/payments/create-session", json={"url": "https://pay.example/cs_test_1"})

    r = client.post("/api/v1/checkout", follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "https://pay.example/cs_test_1"
    assert client.get("/api/v1/cart").json()["count"] == 1


def test_checkout_empty_cart(client, backend, signed_in):
    r = client.post("/api/v1/checkout")
    assert r.status_code == 400
    assert r.json()["detail"] == "Your cart is empty"
    assert backend.calls == []


def test_checkout_requires_sign_in(client, backend, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    r = client.post("/api/v1/checkout")
    assert r.status_code == 401
    assert backend.calls == []


def test_checkout_failure_keeps_cart(client, backend, signed_in, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    backend.on("POST", "/client/create", status=201, json={})
    backend.on("POST", "/payments/create-session", status=429, json={}, headers={"Retry-After": "30"})

    r = client.post("/api/v1/checkout", follow_redirects=False)

    assert r.status_code == 429
    assert r.headers["Retry-After"] == "30"
    assert r.json() == {"state": "failed", "detail": "Too many attempts. Please try again after 30 seconds."}
    assert client.get("/api/v1/cart").json()["count"] == 1


def test_concurrent_checkout_is_refused(app, client, backend, signed_in, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    app.state.inflight.add(("checkout", client.cookies.get("storefront_client")))

    r = client.post("/api/v1/checkout")

    assert r.status_code == 409
    assert r.json()["detail"] == "Checkout already in progress"
    assert backend.calls == []


def test_checkout_is_rate_limited(client, backend, signed_in, monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    for _ in range(10):
        assert client.post("/api/v1/checkout").status_code == 400
    r = client.post("/api/v1/checkout")
    assert r.status_code == 429
    assert "Retry-After" in r.headers


def test_success_page_registers_and_clears_cart(client, backend, signed_in, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    backend.on("GET", "/payments/verify-session", json={"valid": True, "paid": True, "customer_email": "ana@example.com", "amount_total": 12000, "currency": "usd"})
    backend.on("POST", "/payments/update-session", json={"message": "ok"})
    backend.on("POST", "/student/register", json={"message": "Registered"})

    r = client.get("/checkout/success", params={"session_id": "cs_test_1"})

    assert r.status_code == 200
    data = r.json()
    assert data["valid"] is True
    assert data["amount_total"] == 12000
    assert data["registrations"][0]["batch_number"] == 12
    assert "Refresh" not in r.headers
    assert client.get("/api/v1/cart").json()["count"] == 0


def test_success_page_failure_schedules_redirect(client, backend, signed_in, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    backend.on("GET", "/payments/verify-session", json={"valid": False, "error": "card_declined"})

    r = client.get("/checkout/success", params={"session_id": "cs_test_2"})

    assert r.json()["error"] == "card_declined"
    assert r.headers["Refresh"] == "3; url=/checkout/cancel?error=card_declined"
    assert client.get("/api/v1/cart").json()["count"] == 1

    cancel = client.get("/checkout/cancel", params={"error": "card_declined"}).json()
    assert cancel == {"error": "card_declined", "cart_count": 1}


def test_success_page_without_session_id(client, backend):
    r = client.get("/checkout/success")
    assert r.json()["error"] == "No session ID provided"
    assert r.headers["Refresh"].startswith("3; url=/checkout/cancel?error=")
    assert backend.calls == []


def test_success_page_without_token_redirects_to_sign_in(client, backend, scholar_item):
    client.post("/api/v1/cart/items", json=scholar_item)
    backend.on("GET", "/payments/verify-session", status=401, json={"error": "Unauthorized"})

    r = client.get("/checkout/success", params={"session_id": "cs_test_9"}, follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "/sign-in?redirect_url=%2Fcheckout%2Fsuccess%3Fsession_id%3Dcs_test_9"
    assert "Refresh" not in r.headers
    assert backend.called("POST", "/payments/update-session") == []
    assert client.get("/api/v1/cart").json()["count"] == 1
