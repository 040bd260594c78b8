from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.client import ApiClient
from storefront.utils.dependencies import get_api_client

from .service import list_batches

router = APIRouter(prefix="/api/v1/batches", tags=["Batches API"])


@router.get("")
async def get_batches_view(class_type: Optional[str] = None, client: ApiClient = Depends(get_api_client)):
    batches = await list_batches(client, class_type)
    return [
        {**b.model_dump(mode="json"), "remaining": b.remaining, "available": b.available}
        for b in batches
    ]
