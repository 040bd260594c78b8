from fastapi import APIRouter, Request

from storefront.config import STOREFRONT_API_URL
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root(request: Request):
    return {
        "ok": True,
        "api_url": STOREFRONT_API_URL,
        "storage": "redis" if getattr(request.app.state, "redis", None) is not None else "memory",
        "rate_limit": rate_limit_health_info(request),
    }
