"""
Gestionnaires d'exceptions.
- Erreurs du storefront et de l'API backend -> JSON {"detail": message} avec un status stable.
- Unauthorized sans token (redirect_url posée): redirection 303 vers la page de connexion.
- HTTPException: JSON FastAPI standard.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

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
from storefront.errors import PreconditionFailed, StorefrontError

logger = logging.getLogger(__name__)

# Ordre: du plus spécifique au plus général
STATUS_BY_ERROR = (
    (Unauthorized, 401),
    (RateLimited, 429),
    (ValidationFailed, 422),
    (RequestTimeout, 504),
    (NetworkError, 503),
    (ProtocolError, 502),
    (RequestFailed, 502),
    (PreconditionFailed, 400),
)


def status_for(exc: StorefrontError) -> int:
    if isinstance(exc, PreconditionFailed) and exc.status_code:
        return exc.status_code
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def error_response(exc: StorefrontError) -> JSONResponse:
    status = status_for(exc)
    content = {"detail": exc.message}
    headers = {}
    if isinstance(exc, ValidationFailed):
        content["errors"] = exc.errors
    if isinstance(exc, RateLimited) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(status_code=status, content=content, headers=headers or None)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        if exc.redirect_url:
            return RedirectResponse(url=exc.redirect_url, status_code=HTTP_303_SEE_OTHER)
        return error_response(exc)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        if isinstance(exc, ApiError):
            logger.warning("API error on %s %s: %s", request.method, request.url.path, exc.message)
        return error_response(exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
