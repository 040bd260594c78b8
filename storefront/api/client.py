# module storefront.api.client
"""
Client HTTP authentifié vers l'API backend (httpx, JSON uniquement).

- Token bearer obtenu via le TokenProvider injecté, à chaque requête.
- Timeout fixe (API_TIMEOUT_SECONDS, 30s par défaut).
- Classification des réponses: voir storefront.api.errors.
- Aucun retry automatique: chaque échec remonte à l'appelant.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from storefront.api.errors import (
    ApiError,
    NetworkError,
    ProtocolError,
    RateLimited,
    RequestFailed,
    RequestTimeout,
    Unauthorized,
    ValidationFailed,
)
from storefront.api.tokens import NoTokenProvider, TokenProvider
from storefront.auth.redirects import sign_in_url
from storefront.config import API_TIMEOUT_SECONDS, STOREFRONT_API_URL
from storefront.utils.navigation import Navigator

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Request failed"
RATE_LIMIT_GENERIC = "Too many attempts. Please try again later."


@dataclass
class ApiResponse:
    status_code: int
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)


def _is_json(response: httpx.Response) -> bool:
    return "json" in (response.headers.get("content-type") or "").lower()


def _error_payload(response: httpx.Response) -> Dict[str, Any]:
    """Body d'erreur JSON du backend ({error?, errors?}) ou {} si illisible."""
    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _error_text(item: Any) -> str:
    if isinstance(item, dict):
        text = item.get("msg") or item.get("message")
        if text:
            field_name = item.get("path") or item.get("param") or item.get("loc")
            return f"{field_name}: {text}" if field_name else str(text)
        return json.dumps(item, sort_keys=True)
    return str(item)


def rate_limit_message(retry_after: Optional[str], payload: Dict[str, Any]) -> str:
    if retry_after:
        return f"Too many attempts. Please try again after {retry_after} seconds."
    return payload.get("error") or RATE_LIMIT_GENERIC


class ApiClient:
    """
    Primitive d'appel unique `request(method, path, ...)`.
    - token_provider: injecté à la construction (NoTokenProvider par défaut).
    - navigator / location: sur 401 sans token, navigation vers la connexion
      avec `location` (chemin + query de la page courante) comme retour.
    - http_client: httpx.AsyncClient partagé (lifespan) ou créé localement.
    """

    def __init__(
        self,
        base_url: str = STOREFRONT_API_URL,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = API_TIMEOUT_SECONDS,
        navigator: Optional[Navigator] = None,
        location: str = "/",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider: TokenProvider = token_provider or NoTokenProvider()
        self.timeout = timeout
        self.navigator = navigator
        self.location = location
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _bearer_token(self) -> Optional[str]:
        try:
            raw = await self.token_provider.get_token()
        except Exception as e:
            logger.info("api.client token provider failed, sending unauthenticated: %s", e)
            return None
        token = raw.strip() if isinstance(raw, str) else None
        return token or None

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        default_error: str = DEFAULT_ERROR,
    ) -> ApiResponse:
        headers = {"Accept": "application/json"}
        token = await self._bearer_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self._http.request(
                method.upper(),
                url,
                json=body,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("api.client timeout %s %s", method.upper(), path)
            raise RequestTimeout(f"The request timed out after {int(self.timeout)} seconds") from e
        except httpx.TransportError as e:
            logger.warning("api.client no response %s %s: %s", method.upper(), path, e)
            raise NetworkError(str(e) or "Network error occurred") from e

        return self._classify(response, had_token=bool(token), path=path, default_error=default_error)

    def _classify(self, response: httpx.Response, had_token: bool, path: str, default_error: str) -> ApiResponse:
        status = response.status_code

        if 200 <= status < 300:
            if not _is_json(response):
                raise ProtocolError(
                    f"Unexpected response content type: {response.headers.get('content-type') or 'none'}",
                    status_code=status,
                )
            try:
                data = response.json()
            except (json.JSONDecodeError, ValueError) as e:
                raise ProtocolError("Invalid JSON in response", status_code=status) from e
            return ApiResponse(status_code=status, data=data, headers=dict(response.headers))

        payload = _error_payload(response)

        if status == 401:
            message = payload.get("error") or "Unauthorized"
            if had_token:
                # Token envoyé mais rejeté: pas de redirection (évite une boucle)
                raise Unauthorized(message, had_token=True, payload=payload)
            target = sign_in_url(self.location)
            if self.navigator is not None:
                self.navigator.navigate(target)
            raise Unauthorized(message, had_token=False, redirect_url=target, payload=payload)

        if status == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimited(rate_limit_message(retry_after, payload), retry_after=retry_after, payload=payload)

        if status in (400, 500):
            # Pas de body complet dans les logs (données sensibles)
            logger.error("Request failed with status %s path=%s", status, path)

        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            message = "Validation errors: " + "; ".join(_error_text(e) for e in errors)
            raise ValidationFailed(message, errors=errors, status_code=status, payload=payload)

        raise RequestFailed(payload.get("error") or default_error, status_code=status, payload=payload)


__all__ = ["ApiClient", "ApiResponse", "ApiError", "rate_limit_message"]
