from typing import Dict, Any
from fastapi import Request, Response, HTTPException
import os
import time
import hashlib
from storefront.utils.security import CLIENT_COOKIE_NAME

def _client_key_from_request(req: Request) -> str:
    # Priorité: cookie navigateur (hashé) puis IP
    client_id = getattr(req.state, "client_id", None) or req.cookies.get(CLIENT_COOKIE_NAME)
    path = req.url.path
    if client_id:
        h = hashlib.sha256(client_id.encode("utf-8")).hexdigest()[:16]
        return f"client:{h}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de rate limiting des actions sensibles (checkout, annulation, contact).
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev/tests), 429 + Retry-After.
    - app.state.rate_limit_enabled=False: désactivé.
    - Sinon fastapi-limiter (Redis) si initialisé par le lifespan.
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key_from_request(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                retry_after = max(1, int(seconds - (now - hits[0])))
                raise HTTPException(status_code=429, detail="Too Many Requests", headers={"Retry-After": str(retry_after)})
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        try:
            from fastapi_limiter import FastAPILimiter
            from fastapi_limiter.depends import RateLimiter
        except ImportError:
            return
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        async def _identifier(req: Request) -> str:
            return _client_key_from_request(req)
        # Callback par défaut de fastapi-limiter: HTTPException(429) avec Retry-After
        return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    limiter_ready = False
    backend = None
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
        backend = "redis" if limiter_ready else None
    except ImportError:
        limiter_ready = False
        backend = None

    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
        "local_fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }
