import json

import pytest

from storefront.api.errors import (
    NetworkError,
    ProtocolError,
    RateLimited,
    RequestFailed,
    RequestTimeout,
    Unauthorized,
    ValidationFailed,
)
from storefront.app_setup.exceptions import error_response, status_for
from storefront.errors import PreconditionFailed


@pytest.mark.parametrize(
    "exc,status",
    [
        (PreconditionFailed("Your cart is empty"), 400),
        (PreconditionFailed("A cancellation is already in progress", status_code=409), 409),
        (Unauthorized("Token expired", had_token=True), 401),
        (RateLimited("slow down", retry_after="30"), 429),
        (ValidationFailed("Validation errors: x", errors=["x"], status_code=400), 422),
        (RequestFailed("Database error", status_code=500), 502),
        (NetworkError("connection refused"), 503),
        (RequestTimeout("The request timed out after 30 seconds"), 504),
        (ProtocolError("Invalid JSON in response", status_code=200), 502),
    ],
)
def test_status_mapping(exc, status):
    assert status_for(exc) == status


def test_rate_limited_response_carries_retry_after():
    resp = error_response(RateLimited("Too many attempts. Please try again after 30 seconds.", retry_after="30"))
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "30"
    assert json.loads(resp.body) == {"detail": "Too many attempts. Please try again after 30 seconds."}
