"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Redis synchrone pour le stockage durable du navigateur (panier, langue); mémoire si Redis est injoignable.
- FastAPILimiter (redis.asyncio) pour le rate limiting des actions sensibles.
- httpx.AsyncClient partagé par les clients API de chaque requête.
Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: pas d'init du rate limiter (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: fakeredis pour le stockage et le rate limiter (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: fallback local si l'init échoue
"""
import logging
import os
from contextlib import asynccontextmanager

import httpx
import redis
import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from storefront.config import API_TIMEOUT_SECONDS, REDIS_URL

try:
    import fakeredis  # tests only
    from fakeredis.aioredis import FakeRedis
except Exception:
    fakeredis = None
    FakeRedis = None


def _storage_redis(logger: logging.Logger, use_fake: bool):
    if use_fake:
        if not fakeredis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return fakeredis.FakeRedis(decode_responses=True)
    try:
        r = redis.Redis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
        r.ping()
        return r
    except redis.RedisError as e:
        logger.warning("Cart storage falling back to in-memory (Redis unavailable: %s)", e)
        return None


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger, use_fake: bool) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if use_fake:
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL") or REDIS_URL
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    use_fake = os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1"

    app.state.redis = _storage_redis(logger, use_fake)
    app.state.memory_storages = {}
    # Actions en cours par navigateur: ("checkout"|"cancel", client_id)
    app.state.inflight = set()
    app.state.http_client = httpx.AsyncClient(timeout=API_TIMEOUT_SECONDS)
    await _init_rate_limiter(app, logger, use_fake)

    try:
        yield
    finally:
        await app.state.http_client.aclose()
        if app.state.redis is not None:
            app.state.redis.close()
        if getattr(app.state, "rate_limit_enabled", False) and FastAPILimiter.redis is not None:
            await FastAPILimiter.close()
            FastAPILimiter.redis = None
