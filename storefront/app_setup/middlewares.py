"""
Middlewares transverses du storefront.
- register_basic_middlewares: session de navigation, CORS, TrustedHost, proxy.
- register_client_cookie_middleware: identifiant durable du navigateur (clé du stockage panier/langue).
- register_security_middleware: en-têtes de sécurité et CSP.
Notes:
- La session Starlette n'a pas de max_age: elle disparaît à la fermeture du navigateur,
  comme le marqueur de session du panier.
"""
import secrets

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except Exception:
    ProxyHeadersMiddleware = None

from storefront.config import ALLOWED_HOSTS, COOKIE_SECURE, CORS_ORIGINS, SESSION_SECRET_KEY, STOREFRONT_API_URL, SUPABASE_URL
from storefront.utils.security import CLIENT_COOKIE_NAME

CLIENT_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def register_basic_middlewares(app: FastAPI) -> None:
    """
    - SessionMiddleware: cookie de session sans expiration explicite (durée de vie du navigateur).
    - CORSMiddleware: origines définies par CORS_ORIGINS.
    - TrustedHostMiddleware: limite les hôtes acceptés.
    - ProxyHeadersMiddleware (si dispo): X-Forwarded-*.
    """
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        session_cookie="storefront_session",
        max_age=None,
        same_site="lax",
        https_only=COOKIE_SECURE,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    if ProxyHeadersMiddleware:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])


def register_client_cookie_middleware(app: FastAPI) -> None:
    """Pose (ou prolonge) le cookie storefront_client et l'expose via request.state.client_id."""
    @app.middleware("http")
    async def client_cookie(request: Request, call_next):
        client_id = request.cookies.get(CLIENT_COOKIE_NAME)
        is_new = not client_id
        if is_new:
            client_id = secrets.token_urlsafe(24)
        request.state.client_id = client_id
        response = await call_next(request)
        if is_new:
            response.set_cookie(
                key=CLIENT_COOKIE_NAME,
                value=client_id,
                httponly=True,
                secure=COOKIE_SECURE,
                samesite="Lax",
                max_age=CLIENT_COOKIE_MAX_AGE,
                path="/",
            )
        return response


def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")

        # CSP: l'API backend et Supabase sont appelés depuis les pages
        csp_connect = ["'self'", STOREFRONT_API_URL]
        if SUPABASE_URL:
            csp_connect.append(SUPABASE_URL)
        swagger_cdns = ["https://cdn.jsdelivr.net", "https://unpkg.com"]
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: blob: https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"connect-src {' '.join(csp_connect)}"
        )
        response.headers["Content-Security-Policy"] = csp
        return response
