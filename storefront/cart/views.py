import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from storefront.api.client import ApiClient
from storefront.batches import service as batches_service
from storefront.errors import PreconditionFailed
from storefront.utils.dependencies import get_api_client, get_cart

from .models import CartItem
from .store import CartStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])

NO_OPEN_BATCH = "No open batch is available for this class"
BATCH_UNAVAILABLE = "This batch is full or no longer open"


class PlanSelection(BaseModel):
    plan_name: str = Field(min_length=1)
    price: Decimal
    class_type: str
    batch_num: Optional[int] = None
    description: str = ""
    features: List[str] = Field(default_factory=list)


def cart_payload(cart: CartStore) -> Dict[str, Any]:
    total = cart.total_price()
    return {
        "items": [item.model_dump(mode="json") for item in cart.list()],
        "count": cart.count(),
        "total": int(total) if total == total.to_integral_value() else float(total),
    }


@router.get("")
def get_cart_view(cart: CartStore = Depends(get_cart)):
    return cart_payload(cart)


@router.post("/items")
def add_item(item: CartItem, cart: CartStore = Depends(get_cart)):
    """Ajout idempotent: une ligne déjà présente (même id) n'est ni dupliquée ni mise à jour."""
    cart.add(item)
    return cart_payload(cart)


@router.post("/plans")
async def add_plan(
    selection: PlanSelection,
    cart: CartStore = Depends(get_cart),
    client: ApiClient = Depends(get_api_client),
):
    """
    Ajoute un plan tarifaire sur un batch du catalogue.
    - batch_num fourni: ce batch doit être ouvert (actif, places restantes).
    - sinon: prochain batch ouvert du niveau demandé.
    """
    batches = await batches_service.list_batches(client, selection.class_type)
    if selection.batch_num is not None:
        batch = next((b for b in batches if b.batch_num == selection.batch_num), None)
        if batch is None or not batch.available:
            raise PreconditionFailed(BATCH_UNAVAILABLE)
    else:
        batch = batches_service.next_available_batch(batches, selection.class_type)
        if batch is None:
            raise PreconditionFailed(NO_OPEN_BATCH)

    item = batches_service.cart_item_from_batch(
        selection.plan_name,
        selection.price,
        batch,
        description=selection.description,
        features=selection.features,
    )
    cart.add(item)
    logger.info("cart.views plan added id=%s", item.id)
    return cart_payload(cart)


@router.delete("/items/{item_id}")
def remove_item(item_id: str, cart: CartStore = Depends(get_cart)):
    cart.remove(item_id)
    return cart_payload(cart)
